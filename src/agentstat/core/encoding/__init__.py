"""Encoders for stored rows and HTTP responses."""
