"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of each refresh (correlation IDs)
2. Visibility into data the aggregator sent that we could not use
3. Debugging capability without a debugger attached

The audit logger:
- Is async so flows can await it alongside network calls
- Never raises; a logging failure must not break a refresh
- Never logs credentials
"""

import logging
import sys
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from simple_finances.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structured logs to stderr at the given level.

    Called once at startup by the app factory.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    logging.getLogger("simple_finances").setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log. There is no remote
    audit store: the dashboard keeps no history between refreshes.
    """

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize audit logger.

        Args:
            logger: structlog logger to write to. Defaults to the
                    "simple_finances.audit" logger.
        """
        self._logger = logger or structlog.get_logger("simple_finances.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never take a refresh down with it
            print(f"WARNING: Failed to write audit event {event.event_id}: {e}", file=sys.stderr)
            return False

        return True

    async def log_session_created(
        self,
        access_url: str,
        correlation_id: UUID,
    ) -> None:
        """Log a successful setup-token claim."""
        event = AuditEventBuilder.session_created(
            access_url=access_url,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_session_cleared(self, correlation_id: UUID) -> None:
        """Log a logout."""
        event = AuditEventBuilder.session_cleared(correlation_id=correlation_id)
        await self.log(event)

    async def log_claim_failed(
        self,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed setup-token claim."""
        event = AuditEventBuilder.claim_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_accounts_fetched(
        self,
        account_count: int,
        transaction_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a completed accounts fetch."""
        event = AuditEventBuilder.accounts_fetched(
            account_count=account_count,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_accounts_fetch_failed(
        self,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a failed accounts fetch."""
        event = AuditEventBuilder.accounts_fetch_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_aggregator_warnings(
        self,
        messages: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log each aggregator-side error message as a warning."""
        for message in messages:
            event = AuditEventBuilder.aggregator_warning(
                message=message,
                correlation_id=correlation_id,
            )
            await self.log(event)

    async def log_report_computed(
        self,
        net_worth: float,
        spending_30d: float,
        subscription_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log report computation."""
        event = AuditEventBuilder.report_computed(
            net_worth=net_worth,
            spending_30d=spending_30d,
            subscription_count=subscription_count,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_malformed_value(
        self,
        entity_type: str,
        entity_id: str,
        field: str,
        raw_value: Any,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a balance or amount the engine had to skip."""
        event = AuditEventBuilder.malformed_value_skipped(
            entity_type=entity_type,
            entity_id=entity_id,
            field=field,
            raw_value=raw_value,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a refresh).
    Pass it through all subsequent operations.
    """
    return uuid4()
