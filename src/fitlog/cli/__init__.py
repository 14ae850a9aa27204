"""Command-line interface for fitlog."""
