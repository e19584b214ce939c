"""Shared store adapters.

This package provides a small abstraction layer so the limiter can run on
Redis in production and on an in-memory store in tests, without changing
the limiting logic.
"""
