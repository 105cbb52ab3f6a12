"""Validation artifact persistence."""
