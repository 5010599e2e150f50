"""Logging utilities for splitdb."""

from .logging import LogManager  # noqa: F401

__all__ = [
    "LogManager",
]
