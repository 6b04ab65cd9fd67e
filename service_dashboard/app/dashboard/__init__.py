"""Dashboard components.

Includes the ``DashboardOrchestrator``, which runs the three parallel proxy
calls behind a search, and the view helpers that turn its result into the
cards and lists the home page renders.
"""
