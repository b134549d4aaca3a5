# src/xpforge/middleware/__init__.py

"""Middleware components for XPForge API."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
