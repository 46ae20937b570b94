"""Compliance document discovery and extraction service."""

__version__ = "0.1.0"
