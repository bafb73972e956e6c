"""Persistent exact-search embedding index."""

__version__ = "0.1.0"
