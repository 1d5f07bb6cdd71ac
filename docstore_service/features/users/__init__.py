"""Users and their opaque access tokens, scoped per tenant."""

from .models import Token, User
from .service import AuthenticationService

__all__ = ["AuthenticationService", "Token", "User"]
