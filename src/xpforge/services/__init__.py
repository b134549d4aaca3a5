# src/xpforge/services/__init__.py

"""Business logic: the XP award engine, the ledger and rank read views."""
