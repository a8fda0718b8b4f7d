"""Command-line interface for vyapar."""
