"""Retrieval-augmented dream interpretation service."""

__version__ = "0.1.0"
