"""Document file services for Outlinemap."""
