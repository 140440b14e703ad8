"""
Tests for the dashboard views (activity feed and account grouping).
"""

import pytest

from simple_finances.analytics.views import (
    UNKNOWN_INSTITUTION,
    group_accounts,
    recent_activity,
)
from simple_finances.models.account import Account, AccountType
from simple_finances.services.demo_data import demo_account_set


NOW = 1_700_000_000
DAY = 24 * 60 * 60


def make_account(account_id, name, balance="0.00", org_name=None, transactions=()):
    data = {
        "id": account_id,
        "name": name,
        "balance": balance,
        "transactions": list(transactions),
    }
    if org_name is not None:
        data["org"] = {"name": org_name}
    return Account.model_validate(data)


class TestRecentActivity:
    """Tests for the activity feed."""

    def test_newest_first_across_accounts(self):
        accounts = [
            make_account("a", "Checking", transactions=[
                {"id": "t1", "posted": NOW - 3 * DAY, "amount": "-5.00"},
                {"id": "t2", "posted": (NOW - 1 * DAY) * 1000, "amount": "-6.00"},
            ]),
            make_account("b", "Savings", transactions=[
                {"id": "t3", "posted": NOW - 2 * DAY, "amount": "100.00"},
            ]),
        ]
        items = recent_activity(accounts)

        assert [item.id for item in items] == ["t2", "t3", "t1"]
        assert items[0].posted == NOW - DAY
        assert items[1].account_name == "Savings"
        assert items[1].is_credit

    def test_transfers_are_kept(self):
        """Test the feed shows both legs of a transfer."""
        accounts = [
            make_account("a", "Checking", transactions=[
                {"id": "t1", "posted": NOW, "amount": "-1000.00"},
            ]),
            make_account("b", "Savings", transactions=[
                {"id": "t2", "posted": NOW, "amount": "1000.00"},
            ]),
        ]
        assert len(recent_activity(accounts)) == 2

    def test_malformed_amount_shown_without_amount(self):
        accounts = [make_account("a", "Checking", transactions=[
            {"id": "t1", "posted": NOW, "amount": "??", "description": "Mystery"},
        ])]
        items = recent_activity(accounts)
        assert items[0].amount is None
        assert items[0].description == "Mystery"

    def test_limit(self):
        transactions = [
            {"id": f"t{i}", "posted": NOW - i, "amount": "-1.00"} for i in range(150)
        ]
        accounts = [make_account("a", "Checking", transactions=transactions)]

        assert len(recent_activity(accounts)) == 100
        assert [item.id for item in recent_activity(accounts, limit=2)] == ["t0", "t1"]
        assert recent_activity(accounts, limit=0) == []


class TestGroupAccounts:
    """Tests for the accounts page grouping."""

    def test_demo_grouping(self):
        institutions = group_accounts(demo_account_set(NOW))

        assert [inst.name for inst in institutions] == [
            "American Express", "Chase Bank", "Fidelity Investments",
        ]
        chase = institutions[1]
        assert [group.account_type for group in chase.groups] == [
            AccountType.CHECKING, AccountType.SAVINGS,
        ]
        amex_card = institutions[0].groups[0].accounts[0]
        assert amex_card.name == "Platinum Card"
        assert amex_card.balance == 1250.0

    def test_type_order_and_name_sort(self):
        accounts = [
            make_account("1", "Visa Rewards", "-40.00", "Acme Bank"),
            make_account("2", "zeta checking", "10.00", "Acme Bank"),
            make_account("3", "Alpha Checking", "20.00", "Acme Bank"),
            make_account("4", "Car Loan", "-900.00", "Acme Bank"),
        ]
        [acme] = group_accounts(accounts)

        assert [group.account_type for group in acme.groups] == [
            AccountType.CHECKING, AccountType.CREDIT_CARD, AccountType.OTHER,
        ]
        assert [a.name for a in acme.groups[0].accounts] == ["Alpha Checking", "zeta checking"]
        assert acme.groups[1].accounts[0].balance == 40.0
        assert acme.groups[2].accounts[0].balance == 900.0

    def test_missing_institution_and_bad_balance(self):
        [group] = group_accounts([make_account("1", "Cash Savings", "n/a")])

        assert group.name == UNKNOWN_INSTITUTION
        assert group.groups[0].accounts[0].balance is None

    def test_empty(self):
        assert group_accounts([]) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
