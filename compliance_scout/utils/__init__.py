"""Shared utilities: logging, retry, errors, URLs."""
