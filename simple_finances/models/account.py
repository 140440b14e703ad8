"""
Account Snapshot Models

These models describe the JSON payload returned by the SimpleFIN
`/accounts` endpoint. They are the boundary where raw aggregator JSON
becomes typed Python objects.

DESIGN DECISION: Numeric fields that arrive as decimal strings
(`balance`, `amount`) stay strings here. Parsing happens in the analytics
engine, which decides what to do with malformed values. A single bad
amount must never reject the whole snapshot.

All models are frozen: a snapshot is read-only for the lifetime of one
refresh.
"""

from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


_SNAPSHOT_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    coerce_numbers_to_str=True,
    extra="ignore",
)


class AccountType(str, Enum):
    """
    Account classification derived from the account's display name.

    The values double as the section labels on the accounts page.
    """
    CHECKING = "Checking"
    SAVINGS = "Savings"
    CREDIT_CARD = "Credit Card"
    INVESTMENT = "Investment"
    OTHER = "Other"


class Organization(BaseModel):
    """The financial institution that holds an account."""
    model_config = _SNAPSHOT_CONFIG

    name: Optional[str] = None
    domain: Optional[str] = None
    sfin_url: Optional[str] = Field(
        default=None,
        alias="sfin-url",
        description="Institution URL on the aggregator side"
    )


class Transaction(BaseModel):
    """
    A single posted transaction as reported by the aggregator.

    `posted` may be unix seconds or milliseconds depending on the source;
    see `normalize_timestamp` in the analytics engine.
    """
    model_config = _SNAPSHOT_CONFIG

    id: str
    posted: float = Field(
        ...,
        description="Posting time, unix seconds or milliseconds"
    )
    amount: str = Field(
        ...,
        description="Sign-bearing decimal string (negative = money out)"
    )
    description: str = ""
    memo: str = ""

    @field_validator('description', 'memo', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class Account(BaseModel):
    """
    An account with its balance and the transactions in the fetch window.

    A missing or null `transactions` list is an account with no activity.
    """
    model_config = _SNAPSHOT_CONFIG

    id: str
    name: str
    org: Optional[Organization] = None
    currency: Optional[str] = None
    balance: str = Field(
        ...,
        description="Decimal string; credit cards report money owed as positive"
    )
    balance_date: Optional[float] = Field(
        default=None,
        alias="balance-date",
        description="When the balance was last updated (unix seconds)"
    )
    transactions: tuple[Transaction, ...] = ()

    @field_validator('transactions', mode='before')
    @classmethod
    def none_to_empty_transactions(cls, v):
        return () if v is None else v

    @field_validator('name', mode='before')
    @classmethod
    def none_to_empty_name(cls, v):
        return "" if v is None else v

    @property
    def institution_name(self) -> Optional[str]:
        """Institution display name, if the aggregator sent one."""
        if self.org and self.org.name:
            return self.org.name
        return None


class AccountSet(BaseModel):
    """
    The full `/accounts` response.

    `errors` carries aggregator-side messages (e.g. an institution that
    needs re-authentication). They are warnings, not failures.
    """
    model_config = _SNAPSHOT_CONFIG

    accounts: tuple[Account, ...] = ()
    errors: tuple[str, ...] = ()

    @field_validator('accounts', 'errors', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return () if v is None else v

    @property
    def transaction_count(self) -> int:
        return sum(len(account.transactions) for account in self.accounts)
