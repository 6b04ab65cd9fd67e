"""API subpackage for the dashboard service.

Routers expose the validating proxy routes and the server-rendered pages.
Transport layer remains thin and delegates to ``BackendProxy`` and
``DashboardOrchestrator``.
"""
