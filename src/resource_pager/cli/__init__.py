"""Command-line interface for resource_pager."""
