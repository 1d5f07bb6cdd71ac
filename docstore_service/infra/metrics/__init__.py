"""Prometheus metrics."""

from docstore_service.infra.metrics.prometheus import REGISTRY

__all__ = ["REGISTRY"]
