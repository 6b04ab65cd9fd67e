"""Dashboard service package.

Layout:
- ``api``: proxy routes (``/api/*``) and the HTML pages.
- ``validation``: username validation shared by the proxy routes.
- ``proxy``: ``BackendProxy`` that forwards to the scraping backend.
- ``dashboard``: search orchestration and view models for the home page.
- ``runtime``: service-local metrics and runtime helpers.
"""
