"""Shared utilities for bot-pr-merge."""
