"""Infrastructure layer — the registry HTTP API client.

This layer depends on stdlib and third-party libs (httpx).
The service layer bridges between domain models and infrastructure.
"""
