"""regprune — Docker registry tag retention and cleanup."""

__version__ = "0.1.0"
