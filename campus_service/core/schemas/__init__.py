"""Shared API schemas."""
