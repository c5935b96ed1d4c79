"""Header resolution and merging."""
