"""Application ports - Interfaces for external adapters."""

from .directory_repository import DirectoryRepository
from .notifier import Notifier

__all__ = [
    "DirectoryRepository",
    "Notifier",
]
