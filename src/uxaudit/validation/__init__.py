"""Validation module - three-cycle review of audit findings."""
