"""Terminal user interface for Outlinemap."""
