"""Backend proxy components.

``BackendProxy`` forwards validated requests to the GFG scraping backend and
maps its responses; ``build_routes`` describes the per-route behavior.
"""
