"""Analytics package."""

from simple_finances.analytics.engine import (
    TransferDetector,
    aggregate_net_worth,
    build_report,
    classify_account,
    description_key,
    detect_subscriptions,
    find_malformed_values,
    normalize_timestamp,
    normalize_transactions,
    parse_amount,
    spend_30d,
)
from simple_finances.analytics.views import group_accounts, recent_activity

__all__ = [
    "TransferDetector",
    "aggregate_net_worth",
    "build_report",
    "classify_account",
    "description_key",
    "detect_subscriptions",
    "find_malformed_values",
    "group_accounts",
    "normalize_timestamp",
    "normalize_transactions",
    "parse_amount",
    "recent_activity",
    "spend_30d",
]
