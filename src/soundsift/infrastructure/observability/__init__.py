"""Observability helpers (structured logging, log message templates)."""
