"""Storage adapters behind the DirectoryBackend interface."""

from .base import DirectoryBackend

__all__ = ["DirectoryBackend"]
