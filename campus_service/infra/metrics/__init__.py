"""Prometheus metrics: registry, HTTP metrics, domain counters and tracking helpers."""

from __future__ import annotations

from campus_service.infra.metrics.prometheus import REGISTRY

__all__ = ["REGISTRY"]
