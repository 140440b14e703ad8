"""
Transaction Analytics Engine

Turns an account snapshot into the three dashboard numbers:
1. Net worth (assets minus liabilities, credit cards always owed)
2. Trailing 30-day spending, with transfers between own accounts removed
3. Recurring subscription charges

DESIGN DECISION: The engine is a PURE function of (accounts, now).
- No I/O, no logging, no clock reads
- Inputs are never mutated (snapshot models are frozen anyway)
- Safe to call concurrently and repeatedly; same input, same output

Malformed numbers are rejected at the boundary rather than propagated
as NaN: an unparseable balance contributes nothing to net worth, and an
unparseable amount removes that transaction from every analysis.
`find_malformed_values` reports what was skipped so callers can audit it.

The constants below define observable behavior and are not configuration.
"""

import math
import re
from collections import defaultdict
from typing import Iterable, Optional, Sequence, Union

from simple_finances.models.account import Account, AccountSet, AccountType
from simple_finances.models.report import (
    FinanceReport,
    MalformedValue,
    NetWorth,
    NormalizedTransaction,
    SpendSummary,
    Subscription,
)


SECONDS_PER_DAY = 24 * 60 * 60

# Timestamps above this are milliseconds (as seconds they would be past 2033)
MILLISECOND_THRESHOLD = 2_000_000_000

TRANSFER_WINDOW_SECONDS = 3 * SECONDS_PER_DAY
TRANSFER_AMOUNT_TOLERANCE = 1e-3
# Bucket for amounts whose cent value overflows a float; beyond any finite bucket
OVERFLOW_BUCKET = 10 ** 400

SPEND_WINDOW_SECONDS = 30 * SECONDS_PER_DAY

SUBSCRIPTION_MIN_COUNT = 2
SUBSCRIPTION_MIN_SPREAD_SECONDS = 5 * SECONDS_PER_DAY
SUBSCRIPTION_RELATIVE_TOLERANCE = 0.3
SUBSCRIPTION_ABSOLUTE_TOLERANCE = 10.0
SUBSCRIPTION_MIN_AVERAGE = 1.0
MAX_SUBSCRIPTIONS = 20

KEY_WORD_COUNT = 2
KEY_MIN_LENGTH = 3
KEY_MIN_WORD_LENGTH = 3
KEY_STOPWORDS = frozenset({"the", "inc", "com", "payment"})

# First match wins, in this order
ACCOUNT_TYPE_KEYWORDS: tuple[tuple[AccountType, tuple[str, ...]], ...] = (
    (AccountType.CHECKING, ("checking", "spending")),
    (AccountType.SAVINGS, ("savings", "reserve")),
    (AccountType.CREDIT_CARD, ("credit", "card", "visa", "amex", "mastercard")),
    (AccountType.INVESTMENT, ("investment", "brokerage", "ira", "401k")),
)

_NON_LETTERS = re.compile(r"[^a-z\s]")
_WHITESPACE = re.compile(r"\s+")

AccountsInput = Union[AccountSet, Iterable[Account]]


# =============================================================================
# PARSING & NORMALIZATION
# =============================================================================

def classify_account(name: str) -> AccountType:
    """
    Classify an account by case-insensitive substring match on its name.

    Total: anything unrecognized is OTHER.
    """
    lowered = (name or "").lower()
    for account_type, keywords in ACCOUNT_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return account_type
    return AccountType.OTHER


def normalize_timestamp(posted: float) -> float:
    """Convert a seconds-or-milliseconds timestamp to seconds."""
    if posted > MILLISECOND_THRESHOLD:
        return posted / 1000
    return posted


def parse_amount(value) -> Optional[float]:
    """
    Parse a decimal string (or number) into a finite float.

    Returns None for missing, non-numeric and non-finite input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and "_" in value:
        # float() accepts "1_000"; aggregators never send that
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def account_list(accounts: AccountsInput) -> Sequence[Account]:
    """Accept an AccountSet or any iterable of accounts."""
    if isinstance(accounts, AccountSet):
        return accounts.accounts
    return tuple(accounts)


def normalize_transactions(accounts: AccountsInput) -> list[NormalizedTransaction]:
    """
    Flatten every account's transactions, in account order.

    Transactions with an unparseable amount are dropped.
    """
    normalized = []
    for account in account_list(accounts):
        for tx in account.transactions:
            amount = parse_amount(tx.amount)
            if amount is None:
                continue
            normalized.append(NormalizedTransaction(
                id=tx.id,
                account_id=account.id,
                account_name=account.name,
                posted=normalize_timestamp(tx.posted),
                amount=amount,
                description=tx.description,
            ))
    return normalized


def find_malformed_values(accounts: AccountsInput) -> list[MalformedValue]:
    """List every balance and amount the engine will skip."""
    malformed = []
    for account in account_list(accounts):
        if parse_amount(account.balance) is None:
            malformed.append(MalformedValue(
                entity_type="account",
                entity_id=account.id,
                field="balance",
                raw_value=account.balance,
            ))
        for tx in account.transactions:
            if parse_amount(tx.amount) is None:
                malformed.append(MalformedValue(
                    entity_type="transaction",
                    entity_id=tx.id,
                    field="amount",
                    raw_value=tx.amount,
                ))
    return malformed


# =============================================================================
# NET WORTH
# =============================================================================

def aggregate_net_worth(accounts: AccountsInput) -> NetWorth:
    """
    Sum balances into net worth, assets and liabilities.

    A credit card balance is money owed whatever its sign. Every other
    account adds its signed balance; negatives count as liabilities.
    """
    net_worth = 0.0
    assets = 0.0
    liabilities = 0.0

    for account in account_list(accounts):
        balance = parse_amount(account.balance)
        if balance is None:
            continue

        if classify_account(account.name) is AccountType.CREDIT_CARD:
            owed = abs(balance)
            net_worth -= owed
            liabilities += owed
        else:
            net_worth += balance
            if balance > 0:
                assets += balance
            else:
                liabilities += abs(balance)

    return NetWorth(net_worth=net_worth, assets=assets, liabilities=liabilities)


# =============================================================================
# TRANSFERS
# =============================================================================

class TransferDetector:
    """
    Flags transactions that look like money moved between own accounts.

    A transaction is a transfer if ANY other transaction (different id, any
    account) has the negated amount within TRANSFER_AMOUNT_TOLERANCE and was
    posted less than TRANSFER_WINDOW_SECONDS away. Matches are not consumed:
    one transaction may pair with several.

    Transactions are bucketed by amount in cents. The tolerance is a tenth
    of a bucket, so a partner lies within 0.1 of the negated amount in
    bucket units; even after float rounding of `amount * 100` that never
    reaches past the adjacent bucket, so checking the negated bucket and its
    two neighbours finds exactly the matches a full pairwise scan would.
    """

    def __init__(self, transactions: Iterable[NormalizedTransaction]):
        self._buckets: dict[int, list[NormalizedTransaction]] = defaultdict(list)
        for tx in transactions:
            self._buckets[self._bucket(tx.amount)].append(tx)

    @staticmethod
    def _bucket(amount: float) -> int:
        scaled = amount * 100
        if math.isinf(scaled):
            # Only an exact negation can match at this magnitude
            return OVERFLOW_BUCKET if scaled > 0 else -OVERFLOW_BUCKET
        return math.floor(scaled)

    def find_partners(self, tx: NormalizedTransaction) -> list[NormalizedTransaction]:
        """All transactions that make `tx` a transfer."""
        target = self._bucket(-tx.amount)
        partners = []
        for bucket in (target - 1, target, target + 1):
            for other in self._buckets.get(bucket, ()):
                if (
                    other.id != tx.id
                    and abs(other.amount + tx.amount) < TRANSFER_AMOUNT_TOLERANCE
                    and abs(other.posted - tx.posted) < TRANSFER_WINDOW_SECONDS
                ):
                    partners.append(other)
        return partners

    def is_transfer(self, tx: NormalizedTransaction) -> bool:
        return bool(self.find_partners(tx))


# =============================================================================
# SPENDING
# =============================================================================

def spend_30d(
    transactions: Sequence[NormalizedTransaction],
    now: float,
    detector: Optional[TransferDetector] = None,
) -> SpendSummary:
    """
    Total outflow over the trailing 30 days, excluding transfers.

    Keyed by account display name; same-named accounts are merged.
    """
    detector = detector or TransferDetector(transactions)
    window_start = now - SPEND_WINDOW_SECONDS

    total = 0.0
    by_account: dict[str, float] = {}

    for tx in transactions:
        if tx.posted >= window_start and tx.amount < 0 and not detector.is_transfer(tx):
            spent = abs(tx.amount)
            total += spent
            by_account[tx.account_name] = by_account.get(tx.account_name, 0.0) + spent

    return SpendSummary(total=total, by_account=by_account)


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

def description_key(description: str) -> str:
    """
    Reduce a raw description to a grouping key.

    Lowercase, non-letters become spaces, whitespace collapsed; then the
    first two words longer than two letters that are not stopwords.

        "NETFLIX.COM 866-579-7172"  ->  "netflix"
        "Whole Foods Market #123"   ->  "whole foods"
    """
    cleaned = _NON_LETTERS.sub(" ", (description or "").lower())
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    words = [
        word for word in cleaned.split(" ")
        if len(word) >= KEY_MIN_WORD_LENGTH and word not in KEY_STOPWORDS
    ]
    return " ".join(words[:KEY_WORD_COUNT])


def _is_consistent(amount: float, average: float) -> bool:
    difference = abs(amount - average)
    if difference < SUBSCRIPTION_ABSOLUTE_TOLERANCE:
        return True
    return average > 0 and difference / average < SUBSCRIPTION_RELATIVE_TOLERANCE


def detect_subscriptions(
    transactions: Sequence[NormalizedTransaction],
    detector: Optional[TransferDetector] = None,
) -> list[Subscription]:
    """
    Find recurring charges.

    Outflows (transfers excluded) are grouped by `description_key`. A group
    is a subscription when it has at least two charges, every charge is
    within 30% or $10 of the group average, the newest and oldest charges
    are more than five days apart, and the average exceeds $1.

    Returns at most MAX_SUBSCRIPTIONS, highest average first.
    """
    detector = detector or TransferDetector(transactions)

    groups: dict[str, list[NormalizedTransaction]] = {}
    for tx in transactions:
        if tx.amount < 0 and not detector.is_transfer(tx):
            key = description_key(tx.description)
            if len(key) >= KEY_MIN_LENGTH:
                groups.setdefault(key, []).append(tx)

    candidates = []
    for key, members in groups.items():
        if len(members) < SUBSCRIPTION_MIN_COUNT:
            continue

        members = sorted(members, key=lambda tx: tx.posted, reverse=True)
        amounts = [abs(tx.amount) for tx in members]
        average = sum(amounts) / len(amounts)

        consistent_amount = all(_is_consistent(amount, average) for amount in amounts)
        has_time_spread = (
            abs(members[0].posted - members[-1].posted) > SUBSCRIPTION_MIN_SPREAD_SECONDS
        )

        if consistent_amount and has_time_spread and average > SUBSCRIPTION_MIN_AVERAGE:
            candidates.append(Subscription(
                description=members[0].description,
                amount=average,
                count=len(members),
                key=key,
            ))

    # Grouping already makes keys unique; keep the best-supported one regardless
    seen_keys = set()
    unique = []
    for candidate in sorted(candidates, key=lambda sub: sub.count, reverse=True):
        if candidate.key not in seen_keys:
            seen_keys.add(candidate.key)
            unique.append(candidate)

    unique.sort(key=lambda sub: sub.amount, reverse=True)
    return unique[:MAX_SUBSCRIPTIONS]


# =============================================================================
# REPORT
# =============================================================================

def build_report(accounts: AccountsInput, now: float) -> FinanceReport:
    """
    Compute the full dashboard report for one snapshot.

    Args:
        accounts: An AccountSet or any iterable of Account
        now: Reference time in unix seconds (start of the 30-day window
             is `now - 30 days`)
    """
    accounts = account_list(accounts)
    if not accounts:
        return FinanceReport()

    worth = aggregate_net_worth(accounts)
    transactions = normalize_transactions(accounts)
    detector = TransferDetector(transactions)
    spending = spend_30d(transactions, now, detector)
    subscriptions = detect_subscriptions(transactions, detector)

    return FinanceReport(
        net_worth=worth.net_worth,
        assets=worth.assets,
        liabilities=worth.liabilities,
        spending_30d=spending.total,
        spending_by_account=spending.by_account,
        subscriptions=subscriptions,
    )
