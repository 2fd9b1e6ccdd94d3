"""Command line interface for GitHub Issue Cache."""
