"""
Audit Models for Simple Finances

Every significant action in the system is logged for audit purposes:
connecting to the aggregator, each refresh, and every value we had to skip.

DESIGN DECISION: Audit events are emitted, never edited. They describe
what happened; they never carry credentials (access URLs are redacted by
the builder).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Session lifecycle
    SESSION_CREATED = "session_created"
    SESSION_CLEARED = "session_cleared"
    CLAIM_FAILED = "claim_failed"

    # Data refresh
    ACCOUNTS_FETCHED = "accounts_fetched"
    ACCOUNTS_FETCH_FAILED = "accounts_fetch_failed"
    AGGREGATOR_WARNING = "aggregator_warning"
    REPORT_COMPUTED = "report_computed"

    # Data quality
    MALFORMED_VALUE_SKIPPED = "malformed_value_skipped"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'session', 'account', 'transaction')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Aggregator ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one refresh)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


def redact_url(url: str) -> str:
    """Drop user-info (the SimpleFIN credentials) from a URL."""
    parts = urlsplit(url)
    if not parts.username and not parts.password:
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.session_created(access_url, correlation_id)
        event = AuditEventBuilder.accounts_fetched(3, 120, correlation_id)
    """

    @staticmethod
    def session_created(
        access_url: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CREATED,
            entity_type="session",
            correlation_id=correlation_id,
            description="Setup token claimed, session created",
            details={
                "access_host": redact_url(access_url),
            },
            is_user_action=True,
        )

    @staticmethod
    def session_cleared(correlation_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CLEARED,
            entity_type="session",
            correlation_id=correlation_id,
            description="User logged out, session cleared",
            is_user_action=True,
        )

    @staticmethod
    def claim_failed(
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CLAIM_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            correlation_id=correlation_id,
            description="Setup token could not be claimed",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def accounts_fetched(
        account_count: int,
        transaction_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNTS_FETCHED,
            correlation_id=correlation_id,
            description=f"Fetched {account_count} accounts with {transaction_count} transactions",
            details={
                "account_count": account_count,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def accounts_fetch_failed(
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNTS_FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description="Account refresh failed",
            error_message=error_message,
        )

    @staticmethod
    def aggregator_warning(
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AGGREGATOR_WARNING,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Aggregator reported a problem",
            details={
                "message": message,
            },
        )

    @staticmethod
    def report_computed(
        net_worth: float,
        spending_30d: float,
        subscription_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_COMPUTED,
            entity_type="report",
            correlation_id=correlation_id,
            description=f"Report computed with {subscription_count} subscriptions",
            details={
                "net_worth": net_worth,
                "spending_30d": spending_30d,
                "subscription_count": subscription_count,
            },
        )

    @staticmethod
    def malformed_value_skipped(
        entity_type: str,
        entity_id: str,
        field: str,
        raw_value: Any,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MALFORMED_VALUE_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Skipped {entity_type} with unparseable {field}",
            details={
                "field": field,
                "raw_value": repr(raw_value),
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
