"""
SCIM Directory Services

Persistence, mapping and orchestration for tenant-scoped SCIM users.
"""

from .directory import ChildFailure, UserBundle, UserDirectoryService
from .user_store import DirectoryStore, RecordNotFound, StoreError

__all__ = [
    "ChildFailure",
    "DirectoryStore",
    "RecordNotFound",
    "StoreError",
    "UserBundle",
    "UserDirectoryService",
]
