"""Compliance link discovery: keyword classifier and three-pass cascade."""
