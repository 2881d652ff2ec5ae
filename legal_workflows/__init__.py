"""Trigger → condition → action workflow automation for legal practice management."""

__version__ = "0.1.0"
