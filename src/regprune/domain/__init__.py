"""Domain layer — images, retention rules, matching, and evaluation.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
