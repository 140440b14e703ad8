"""
Main Orchestrator for Simple Finances

This module ties together all the components and defines the
end-to-end flows for:
1. Connect (setup token -> claim -> session saved)
2. Refresh (session -> fetch -> analytics -> dashboard snapshot)
3. Disconnect (session cleared)

DESIGN DECISION: The orchestrator owns every side effect.
- The analytics engine stays pure; the orchestrator supplies `now`
- Only one fetch is in flight per flow
- Every step is audited
"""

import asyncio
import threading
import time
from typing import Optional
from uuid import UUID

from simple_finances.analytics import (
    build_report,
    find_malformed_values,
    group_accounts,
    recent_activity,
)
from simple_finances.audit import AuditLogger, configure_logging, create_correlation_id
from simple_finances.config import (
    AppSettings,
    Settings,
    SimpleFINSettings,
    get_settings,
)
from simple_finances.models.account import AccountSet
from simple_finances.models.report import DashboardSnapshot
from simple_finances.services.demo_data import demo_account_set
from simple_finances.services.session import (
    FileSessionStore,
    Session,
    SessionStore,
    SessionStoreError,
)
from simple_finances.services.simplefin import SimpleFINClient, SimpleFINError


SECONDS_PER_DAY = 24 * 60 * 60

# Polling interval for the fetch lock, which is held across event loops
LOCK_POLL_SECONDS = 0.05


class NotConnectedError(Exception):
    """A live refresh was requested with no session."""
    pass


def build_snapshot(
    account_set: AccountSet,
    now: float,
    is_demo: bool = False,
) -> DashboardSnapshot:
    """Compute everything the dashboard shows for one snapshot."""
    return DashboardSnapshot(
        report=build_report(account_set, now),
        activity=recent_activity(account_set),
        institutions=group_accounts(account_set),
        aggregator_errors=list(account_set.errors),
        generated_at=now,
        is_demo=is_demo,
    )


class DashboardFlow:
    """
    Orchestrates the dashboard lifecycle.

    Flow:
    1. Startup -> current_session() (environment first, then the store)
    2. Connect -> claim setup token, save session
    3. Refresh -> fetch lookback window, compute snapshot
    4. Disconnect -> clear session
    """

    def __init__(
        self,
        client: Optional[SimpleFINClient] = None,
        session_store: Optional[SessionStore] = None,
        audit_logger: Optional[AuditLogger] = None,
        simplefin_settings: Optional[SimpleFINSettings] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._simplefin_settings = simplefin_settings or get_settings().simplefin
        self._app_settings = app_settings or get_settings().app
        self._client = client or SimpleFINClient(self._simplefin_settings)
        self._session_store = session_store or FileSessionStore(
            self._app_settings.session_file
        )
        self._audit_logger = audit_logger or AuditLogger()
        self._refresh_lock = threading.Lock()

    def current_session(self) -> Optional[Session]:
        """
        Return the active session, if any.

        A configured SIMPLEFIN_ACCESS_URL wins over the stored session.
        """
        configured_url = self._simplefin_settings.access_url
        if configured_url:
            return Session(access_url=configured_url, from_environment=True)
        return self._session_store.load()

    @property
    def is_connected(self) -> bool:
        return self.current_session() is not None

    async def connect(
        self,
        setup_token: str,
        correlation_id: Optional[UUID] = None,
    ) -> Session:
        """
        Claim a setup token and persist the resulting session.

        Raises:
            InvalidSetupTokenError / ClaimFailedError: From the client
            SessionStoreError: If the session cannot be saved
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            access_url = await self._client.claim_access_url(setup_token)
        except SimpleFINError as e:
            await self._audit_logger.log_claim_failed(
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_external_service_error(
                service="simplefin",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        session = Session(access_url=access_url)
        try:
            self._session_store.save(session)
        except SessionStoreError as e:
            await self._audit_logger.log_error(
                error_type="session_store",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        await self._audit_logger.log_session_created(
            access_url=access_url,
            correlation_id=correlation_id,
        )
        return session

    async def disconnect(self, correlation_id: Optional[UUID] = None) -> None:
        """Forget the stored session (logout)."""
        correlation_id = correlation_id or create_correlation_id()
        self._session_store.clear()
        await self._audit_logger.log_session_cleared(correlation_id=correlation_id)

    async def refresh(
        self,
        now: Optional[float] = None,
        demo: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> DashboardSnapshot:
        """
        Fetch the lookback window and compute the dashboard snapshot.

        Args:
            now: Reference time in unix seconds; defaults to the clock
            demo: Use the built-in demo snapshot instead of the aggregator

        Raises:
            NotConnectedError: Live refresh with no session
            SimpleFINError: If the fetch fails
        """
        correlation_id = correlation_id or create_correlation_id()
        now = time.time() if now is None else now

        if demo or self._app_settings.demo_mode:
            account_set = demo_account_set(now)
            is_demo = True
        else:
            account_set = await self._fetch(now, correlation_id)
            is_demo = False

        await self._audit_logger.log_accounts_fetched(
            account_count=len(account_set.accounts),
            transaction_count=account_set.transaction_count,
            correlation_id=correlation_id,
        )
        if account_set.errors:
            await self._audit_logger.log_aggregator_warnings(
                messages=list(account_set.errors),
                correlation_id=correlation_id,
            )
        for malformed in find_malformed_values(account_set):
            await self._audit_logger.log_malformed_value(
                entity_type=malformed.entity_type,
                entity_id=malformed.entity_id,
                field=malformed.field,
                raw_value=malformed.raw_value,
                correlation_id=correlation_id,
            )

        snapshot = build_snapshot(account_set, now, is_demo=is_demo)

        await self._audit_logger.log_report_computed(
            net_worth=snapshot.report.net_worth,
            spending_30d=snapshot.report.spending_30d,
            subscription_count=len(snapshot.report.subscriptions),
            correlation_id=correlation_id,
        )
        return snapshot

    async def _fetch(self, now: float, correlation_id: UUID) -> AccountSet:
        session = self.current_session()
        if session is None:
            raise NotConnectedError("Connect a SimpleFIN account first")

        start_date = now - self._simplefin_settings.lookback_days * SECONDS_PER_DAY

        while not self._refresh_lock.acquire(blocking=False):
            await asyncio.sleep(LOCK_POLL_SECONDS)
        try:
            return await self._client.fetch_accounts(session, start_date)
        except SimpleFINError as e:
            await self._audit_logger.log_accounts_fetch_failed(
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            await self._audit_logger.log_external_service_error(
                service="simplefin",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        finally:
            self._refresh_lock.release()


def create_app_components(
    settings: Optional[Settings] = None,
) -> DashboardFlow:
    """
    Factory function to create all application components.

    Configures logging from settings, then wires the client, the file
    session store and the audit logger into a DashboardFlow.
    """
    settings = settings or get_settings()
    simplefin_settings = settings.simplefin
    app_settings = settings.app
    configure_logging(app_settings.effective_log_level)

    return DashboardFlow(
        client=SimpleFINClient(simplefin_settings),
        session_store=FileSessionStore(app_settings.session_file),
        audit_logger=AuditLogger(),
        simplefin_settings=simplefin_settings,
        app_settings=app_settings,
    )
