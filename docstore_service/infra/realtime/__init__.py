"""Real-time delivery infrastructure."""

from docstore_service.infra.realtime.manager import ConnectionInfo, ConnectionManager

__all__ = ["ConnectionInfo", "ConnectionManager"]
