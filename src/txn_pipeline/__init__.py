"""Synthetic card transaction generation and publishing pipeline."""

__version__ = "0.1.0"
