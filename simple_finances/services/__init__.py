"""Services package."""

from simple_finances.services.demo_data import demo_account_set
from simple_finances.services.session import (
    FileSessionStore,
    InMemorySessionStore,
    Session,
    SessionStore,
    SessionStoreError,
)
from simple_finances.services.simplefin import (
    AccessDeniedError,
    AccountsFetchError,
    ClaimFailedError,
    InvalidSetupTokenError,
    SimpleFINClient,
    SimpleFINError,
)

__all__ = [
    # Demo data
    "demo_account_set",
    # Session services
    "FileSessionStore",
    "InMemorySessionStore",
    "Session",
    "SessionStore",
    "SessionStoreError",
    # Aggregator services
    "AccessDeniedError",
    "AccountsFetchError",
    "ClaimFailedError",
    "InvalidSetupTokenError",
    "SimpleFINClient",
    "SimpleFINError",
]
