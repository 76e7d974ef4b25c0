"""Kernel: configuration, domain models, logging and validation logic."""
