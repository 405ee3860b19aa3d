"""Infrastructure adapters: database engine, logging, metrics, auth, realtime."""
