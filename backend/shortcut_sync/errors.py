"""
Errors raised while reconciling shortcuts with containers
"""

from typing import Optional


class StorageWriteFailure(Exception):
    """A single shortcut write failed; the sync pass continues without it."""

    def __init__(self, message: str, shortcut_id: Optional[int] = None, container_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.shortcut_id = shortcut_id
        self.container_name = container_name
