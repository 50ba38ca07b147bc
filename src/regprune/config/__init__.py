"""Configuration — file discovery, settings, and logging setup."""
