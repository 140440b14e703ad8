"""
Session Services Package

The Session value plus swappable stores for it.
"""

from simple_finances.services.session.interface import (
    InMemorySessionStore,
    Session,
    SessionStore,
    SessionStoreError,
)
from simple_finances.services.session.file_store import FileSessionStore

__all__ = [
    "FileSessionStore",
    "InMemorySessionStore",
    "Session",
    "SessionStore",
    "SessionStoreError",
]
