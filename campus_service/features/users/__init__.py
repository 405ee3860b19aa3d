"""User profiles and activity log."""
