# src/xpforge/utils/__init__.py
