"""Command line interface for bot-pr-merge."""
