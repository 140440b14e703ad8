"""
Derived Report Models

Everything here is COMPUTED from an AccountSet and never persisted.

The serialization aliases reproduce the camelCase output contract the
dashboard front end consumes:

    {netWorth, assets, liabilities, spending30d,
     spendingByAccount, subscriptions: [{desc, amount, count}]}

Use `FinanceReport.to_output_dict()` to get that shape.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from simple_finances.models.account import AccountType


_DERIVED_CONFIG = ConfigDict(frozen=True)


# =============================================================================
# ENGINE INTERMEDIATES
# =============================================================================

class NormalizedTransaction(BaseModel):
    """
    A transaction with its amount parsed and its timestamp in seconds,
    tagged with the account it came from.
    """
    model_config = _DERIVED_CONFIG

    id: str
    account_id: str
    account_name: str
    posted: float = Field(..., description="Unix seconds")
    amount: float = Field(..., description="Signed amount (negative = money out)")
    description: str = ""


class MalformedValue(BaseModel):
    """A balance or amount the engine could not parse and skipped."""
    model_config = _DERIVED_CONFIG

    entity_type: str = Field(..., pattern="^(account|transaction)$")
    entity_id: str
    field: str
    raw_value: str


class NetWorth(BaseModel):
    """Net worth decomposed into assets and liabilities."""
    model_config = _DERIVED_CONFIG

    net_worth: float = Field(default=0.0, serialization_alias="netWorth")
    assets: float = 0.0
    liabilities: float = 0.0


class SpendSummary(BaseModel):
    """Trailing-window spending, excluding transfers."""
    model_config = _DERIVED_CONFIG

    total: float = 0.0
    by_account: dict[str, float] = Field(
        default_factory=dict,
        description="Keyed by account display name"
    )


class Subscription(BaseModel):
    """
    A detected recurring charge.

    `key` is the normalized grouping key; it is used for de-duplication
    and is not part of the output contract.
    """
    model_config = _DERIVED_CONFIG

    description: str = Field(
        ...,
        serialization_alias="desc",
        description="Raw description of the most recent charge"
    )
    amount: float = Field(..., gt=1, description="Average charge magnitude")
    count: int = Field(..., ge=2, description="Number of matching charges")
    key: str = Field(..., exclude=True)


class FinanceReport(BaseModel):
    """
    Consolidated analytics for one account snapshot.

    No rounding is applied; formatting belongs to the presentation layer.
    """
    model_config = _DERIVED_CONFIG

    net_worth: float = Field(default=0.0, serialization_alias="netWorth")
    assets: float = 0.0
    liabilities: float = 0.0
    spending_30d: float = Field(default=0.0, serialization_alias="spending30d")
    spending_by_account: dict[str, float] = Field(
        default_factory=dict,
        serialization_alias="spendingByAccount"
    )
    subscriptions: list[Subscription] = Field(
        default_factory=list,
        max_length=20
    )

    def to_output_dict(self) -> dict:
        """Serialize to the front-end output contract."""
        return self.model_dump(by_alias=True)


# =============================================================================
# DASHBOARD VIEWS
# =============================================================================

class ActivityItem(BaseModel):
    """One row of the recent activity feed."""
    model_config = _DERIVED_CONFIG

    id: str
    account_name: str
    posted: float = Field(..., description="Unix seconds")
    amount: Optional[float] = Field(
        default=None,
        description="None when the aggregator sent an unparseable amount"
    )
    description: str = ""

    @property
    def posted_at(self) -> datetime:
        return datetime.fromtimestamp(self.posted)

    @property
    def is_credit(self) -> bool:
        return self.amount is not None and self.amount > 0


class AccountBalance(BaseModel):
    """An account line on the accounts page."""
    model_config = _DERIVED_CONFIG

    id: str
    name: str
    account_type: AccountType
    balance: Optional[float] = Field(
        default=None,
        description="Balance magnitude; None when unparseable"
    )


class AccountTypeGroup(BaseModel):
    """Accounts of one type at one institution."""
    model_config = _DERIVED_CONFIG

    account_type: AccountType
    accounts: list[AccountBalance] = Field(default_factory=list)


class InstitutionGroup(BaseModel):
    """All accounts held at one institution, grouped by type."""
    model_config = _DERIVED_CONFIG

    name: str
    groups: list[AccountTypeGroup] = Field(default_factory=list)


class DashboardSnapshot(BaseModel):
    """
    Everything the dashboard renders after one refresh.

    Built by the orchestrator; the report itself is a pure function of
    the accounts and the refresh time.
    """
    model_config = _DERIVED_CONFIG

    report: FinanceReport
    activity: list[ActivityItem] = Field(default_factory=list)
    institutions: list[InstitutionGroup] = Field(default_factory=list)
    aggregator_errors: list[str] = Field(default_factory=list)
    generated_at: float = Field(..., description="The `now` used for the report")
    is_demo: bool = False
