"""User authentication dependency for tenant-scoped endpoints."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request

from docstore_service.core.dependencies.database import DbSessionDep
from docstore_service.core.dependencies.settings import get_request_app_settings
from docstore_service.core.dependencies.tenant import TenantIdDep
from docstore_service.core.exceptions import UnauthorizedException
from docstore_service.features.users.schemas import UserWithToken
from docstore_service.features.users.service import AuthenticationService
from docstore_service.infra.logging import set_log_context

logger = logging.getLogger(__name__)


async def get_current_user(
    request: Request,
    tenant_id: TenantIdDep,
    session: DbSessionDep,
) -> UserWithToken:
    """Resolve the user token header to a user of the request's tenant.

    Raises:
        UnauthorizedException: ``USER_TOKEN_MISSING`` or ``INVALID_TOKEN``.
    """
    header = get_request_app_settings(request).user_token_header
    token = (request.headers.get(header) or "").strip()

    if not token:
        raise UnauthorizedException(
            detail=f"User token is required in the {header} header",
            code="USER_TOKEN_MISSING",
            type="user-token-missing",
        )

    user = await AuthenticationService(session).find_user_by_token(tenant_id, token)
    if user is None:
        logger.info("User token rejected", extra={"tenant_id": tenant_id})
        raise UnauthorizedException(
            detail="Invalid or expired token",
            code="INVALID_TOKEN",
            type="invalid-token",
        )

    set_log_context(user_id=user.id)
    return user


CurrentUserDep = Annotated[UserWithToken, Depends(get_current_user)]
