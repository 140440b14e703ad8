"""SimpleFIN aggregator services package."""

from simple_finances.services.simplefin.client import (
    AccessDeniedError,
    AccountsFetchError,
    ClaimFailedError,
    InvalidSetupTokenError,
    SimpleFINClient,
    SimpleFINError,
    decode_setup_token,
    split_access_url,
)

__all__ = [
    "AccessDeniedError",
    "AccountsFetchError",
    "ClaimFailedError",
    "InvalidSetupTokenError",
    "SimpleFINClient",
    "SimpleFINError",
    "decode_setup_token",
    "split_access_url",
]
