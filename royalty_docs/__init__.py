"""Contract document service for the label's royalty back office."""

__version__ = "0.1.0"
