"""Realtime tag change stream."""
