"""Command-line interface for dirstash."""
