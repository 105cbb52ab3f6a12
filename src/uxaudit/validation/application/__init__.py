"""Validation application services."""
