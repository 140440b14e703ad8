"""
Dashboard views over an account snapshot.

These are presentation-ready orderings, not analytics: transfers are NOT
removed from the activity feed, and balances are shown as magnitudes.
"""

from typing import Optional

from simple_finances.analytics.engine import (
    AccountsInput,
    account_list,
    classify_account,
    normalize_timestamp,
    parse_amount,
)
from simple_finances.models.account import Account, AccountType
from simple_finances.models.report import (
    AccountBalance,
    AccountTypeGroup,
    ActivityItem,
    InstitutionGroup,
)


DEFAULT_ACTIVITY_LIMIT = 100
UNKNOWN_INSTITUTION = "Other Institutions"


def _name_order(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


def recent_activity(
    accounts: AccountsInput,
    limit: int = DEFAULT_ACTIVITY_LIMIT,
) -> list[ActivityItem]:
    """Every transaction across all accounts, newest first."""
    items = [
        ActivityItem(
            id=tx.id,
            account_name=account.name,
            posted=normalize_timestamp(tx.posted),
            amount=parse_amount(tx.amount),
            description=tx.description,
        )
        for account in account_list(accounts)
        for tx in account.transactions
    ]
    items.sort(key=lambda item: item.posted, reverse=True)
    return items[:max(limit, 0)]


def _balance_magnitude(account: Account) -> Optional[float]:
    balance = parse_amount(account.balance)
    return abs(balance) if balance is not None else None


def group_accounts(accounts: AccountsInput) -> list[InstitutionGroup]:
    """
    Group accounts by institution, then by account type.

    Institutions and accounts are sorted by name; types follow the
    AccountType declaration order and empty types are omitted.
    """
    by_institution: dict[str, list[Account]] = {}
    for account in account_list(accounts):
        name = account.institution_name or UNKNOWN_INSTITUTION
        by_institution.setdefault(name, []).append(account)

    institutions = []
    for name in sorted(by_institution, key=_name_order):
        members = by_institution[name]
        type_groups = []
        for account_type in AccountType:
            typed = [a for a in members if classify_account(a.name) is account_type]
            if not typed:
                continue
            typed.sort(key=lambda a: _name_order(a.name))
            type_groups.append(AccountTypeGroup(
                account_type=account_type,
                accounts=[
                    AccountBalance(
                        id=a.id,
                        name=a.name,
                        account_type=account_type,
                        balance=_balance_magnitude(a),
                    )
                    for a in typed
                ],
            ))
        institutions.append(InstitutionGroup(name=name, groups=type_groups))

    return institutions
