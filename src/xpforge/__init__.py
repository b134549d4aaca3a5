# src/xpforge/__init__.py

"""XPForge: rank tiers, XP awards and the activity ledger."""

__version__ = "0.1.0"
