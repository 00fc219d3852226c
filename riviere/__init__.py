"""Riviere - declarative extraction of architectural components from source code."""

__version__ = "0.1.0"
