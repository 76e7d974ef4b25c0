"""Command-line interface for crategate."""
