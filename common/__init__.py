"""Shared helpers: secrets, logging, metrics, server-side auth."""
