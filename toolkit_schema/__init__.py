"""Toolkit Schema -- keeps a TypeScript toolkit in sync with its schema graph."""

__version__ = "1.0.0"
