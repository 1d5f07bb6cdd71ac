"""Multi-tenant document store service with a real-time event feed."""

__version__ = "1.0.0"
