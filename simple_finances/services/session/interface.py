"""
Session Value and Abstract Session Store

DESIGN DECISION: The SimpleFIN access URL is the whole session. It is
modelled as an explicit Session value handed to the aggregator client,
never as hidden global state.

Lifecycle:
1. Created when a setup token is successfully claimed
2. Read on startup
3. Destroyed on logout

The store interface is load/save/clear; a file,
a keyring or an in-memory dict can back it.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Session(BaseModel):
    """
    An authenticated aggregator session.

    The access URL embeds credentials; it is excluded from repr so it never
    lands in a log line by accident.
    """
    model_config = ConfigDict(frozen=True)

    access_url: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="SimpleFIN access URL with embedded credentials"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the setup token was claimed"
    )
    from_environment: bool = Field(
        default=False,
        description="True when the URL came from configuration, not a claim"
    )

    @field_validator('access_url')
    @classmethod
    def strip_access_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Access URL cannot be blank")
        return v


class SessionStore(ABC):
    """
    Abstract interface for persisting the session between runs.
    """

    @abstractmethod
    def load(self) -> Optional[Session]:
        """
        Load the saved session.

        Returns:
            The session if one was saved, None otherwise

        Raises:
            SessionStoreError: If stored data exists but is unreadable
        """
        pass

    @abstractmethod
    def save(self, session: Session) -> None:
        """
        Persist a session, replacing any previous one.

        Raises:
            SessionStoreError: If the write fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget the saved session. Clearing an empty store is a no-op."""
        pass


class SessionStoreError(Exception):
    """Base exception for session storage operations."""
    pass


class InMemorySessionStore(SessionStore):
    """Process-local store, used by tests and demo mode."""

    def __init__(self, session: Optional[Session] = None):
        self._session = session

    def load(self) -> Optional[Session]:
        return self._session

    def save(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None
