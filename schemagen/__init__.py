"""Ecto schema and migration generator for Phoenix applications."""

__version__ = "0.1.0"
