"""Feature packages (tags, users, realtime)."""
