"""GitHub Issue Cache - browse GitHub issues from a local cache."""

__version__ = "0.1.0"
