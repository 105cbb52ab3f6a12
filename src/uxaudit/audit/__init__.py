"""Audit module - phases, discovery and orchestration."""
