"""Pydantic data models for the discovery pipeline."""
