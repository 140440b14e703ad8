"""
Built-in demo snapshot.

Four accounts at three institutions, dated relative to `now` so the
30-day window always has something in it. Shows a grocery subscription,
a coffee subscription and a credit card liability.
"""

import time
from typing import Optional

from simple_finances.models.account import AccountSet


DAY = 24 * 60 * 60


def demo_account_set(now: Optional[float] = None) -> AccountSet:
    """Return the demo snapshot as of `now` (unix seconds)."""
    now = int(now if now is not None else time.time())

    chase = {"domain": "chase.com", "name": "Chase Bank", "sfin-url": ""}
    amex = {"domain": "amex.com", "name": "American Express", "sfin-url": ""}
    fidelity = {"domain": "fidelity.com", "name": "Fidelity Investments", "sfin-url": ""}

    def tx(tx_id: str, days_ago: int, amount: str, description: str) -> dict:
        return {
            "id": tx_id,
            "posted": now - days_ago * DAY,
            "amount": amount,
            "description": description,
            "memo": "",
        }

    return AccountSet.model_validate({
        "accounts": [
            {
                "id": "1", "name": "Total Checking", "org": chase, "currency": "USD",
                "balance": "5240.50", "balance-date": now,
                "transactions": [
                    tx("t1", 1, "-120.00", "Whole Foods Market"),
                    tx("t2", 3, "-45.50", "Chevron Gas Station"),
                    tx("t3", 30, "-120.00", "Whole Foods Market"),
                    tx("t4", 5, "3500.00", "Payroll Deposit"),
                ],
            },
            {
                "id": "2", "name": "High Yield Savings", "org": chase, "currency": "USD",
                "balance": "25000.00", "balance-date": now,
                "transactions": [
                    tx("t5", 15, "1000.00", "Internal Transfer"),
                ],
            },
            {
                "id": "3", "name": "Platinum Card", "org": amex, "currency": "USD",
                "balance": "1250.00", "balance-date": now,
                "transactions": [
                    tx("t6", 2, "-85.00", "Blue Bottle Coffee"),
                    tx("t7", 4, "-150.00", "Restoration Hardware"),
                    tx("t8", 32, "-85.00", "Blue Bottle Coffee"),
                ],
            },
            {
                "id": "4", "name": "Brokerage Account", "org": fidelity, "currency": "USD",
                "balance": "45200.00", "balance-date": now,
                "transactions": [],
            },
        ],
    })
