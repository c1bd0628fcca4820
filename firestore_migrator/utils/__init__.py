"""Shared utilities for API clients, retries and logging."""

__all__ = [
    "api",
    "logging",
]
