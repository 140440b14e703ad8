"""
Simple Finances - Source Package

A personal-finance dashboard built on a read-only SimpleFIN connection.
It turns an account snapshot into net worth, trailing 30-day spending and
detected recurring subscriptions.

DESIGN PRINCIPLES:
1. The aggregator is read-only; we never write back
2. Analytics are a pure function of (accounts, now)
3. Malformed values are skipped loudly, never guessed
4. Every fetch is auditable
5. Session storage is swappable
"""

__version__ = "1.0.0"
__author__ = "Simple Finances Team"
