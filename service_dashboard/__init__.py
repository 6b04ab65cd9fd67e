"""GFG stats dashboard service."""
