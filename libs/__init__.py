"""Shared libraries for the GFG stats services.

Subpackages:
- ``libs.common``: configuration, logging, and metrics.

Usage:
- Import stable, reusable functionality from here to keep service code lean.

Notes:
- Avoid service-specific logic; keep modules cohesive and broadly useful.
"""
