"""Shared kernel: base model, exceptions, settings, logging, process runner."""
