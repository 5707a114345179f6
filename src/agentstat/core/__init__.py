"""Core domain: models, row keys, ports and the retrieval pipeline."""
