"""Procedural city district and neighborhood generator."""

__version__ = "0.1.0"
