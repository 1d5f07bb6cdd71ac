"""Real-time delivery of tenant events over WebSocket."""

from .authenticator import AuthenticatedIdentity, ConnectionAuthenticator, ConnectionRejected

__all__ = ["AuthenticatedIdentity", "ConnectionAuthenticator", "ConnectionRejected"]
