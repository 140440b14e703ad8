"""
Data Models Package

This package contains all Pydantic models used in Simple Finances.
Aggregator payloads are parsed into these models before any analysis.
"""

from simple_finances.models.account import (
    Account,
    AccountSet,
    AccountType,
    Organization,
    Transaction,
)
from simple_finances.models.report import (
    AccountBalance,
    AccountTypeGroup,
    ActivityItem,
    DashboardSnapshot,
    FinanceReport,
    InstitutionGroup,
    MalformedValue,
    NetWorth,
    NormalizedTransaction,
    SpendSummary,
    Subscription,
)
from simple_finances.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Snapshot models
    "Account",
    "AccountSet",
    "AccountType",
    "Organization",
    "Transaction",
    # Derived models
    "AccountBalance",
    "AccountTypeGroup",
    "ActivityItem",
    "DashboardSnapshot",
    "FinanceReport",
    "InstitutionGroup",
    "MalformedValue",
    "NetWorth",
    "NormalizedTransaction",
    "SpendSummary",
    "Subscription",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
