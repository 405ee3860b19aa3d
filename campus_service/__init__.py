"""Campus facility tagging service."""

__version__ = "0.1.0"
