# src/xpforge/api/__init__.py

"""HTTP routers for XPForge."""
