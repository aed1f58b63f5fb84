"""Clients for external HTTP services."""
