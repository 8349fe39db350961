"""Typed clients and reconciliation for Grafana App Platform resources."""

__version__ = "0.1.0"
