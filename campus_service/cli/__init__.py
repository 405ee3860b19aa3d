"""Management CLI for campus-service."""
