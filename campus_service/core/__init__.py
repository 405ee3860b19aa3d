"""Core building blocks: settings, exceptions, database, pagination, events, dependencies."""
