"""Tests for the GFG stats dashboard.

The scraping backend is always faked with ``httpx.MockTransport``; the suite
needs no network access.
"""
