"""Neon Empire HTTP API."""
