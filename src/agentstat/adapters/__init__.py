"""Adapters implementing and exposing the core ports."""
