"""Tenant resolution dependency.

Every tenant-scoped endpoint resolves the caller's tenant from the tenant
header and checks it against the tenant directory before doing anything
else.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request

from docstore_service.core.dependencies.database import DbSessionDep
from docstore_service.core.dependencies.settings import get_request_app_settings
from docstore_service.core.exceptions import TenantException
from docstore_service.features.tenants.service import TenantDirectory
from docstore_service.infra.logging import set_log_context

logger = logging.getLogger(__name__)


async def get_tenant_id(request: Request, session: DbSessionDep) -> str:
    """Resolve and validate the tenant of the current request.

    Raises:
        TenantException: 400 ``TENANT_ID_MISSING`` when the header is absent,
            404 ``TENANT_INVALID`` when the tenant is unknown or inactive.
    """
    header = get_request_app_settings(request).tenant_header
    tenant_id = (request.headers.get(header) or "").strip()

    if not tenant_id:
        raise TenantException(
            status_code=400,
            detail=f"Tenant ID is required in the {header} header",
            code="TENANT_ID_MISSING",
            type="tenant-id-missing",
        )

    if not await TenantDirectory(session).is_valid_tenant(tenant_id):
        logger.info("Tenant rejected", extra={"tenant_id": tenant_id})
        raise TenantException(
            status_code=404,
            detail="Tenant does not exist or is inactive",
            code="TENANT_INVALID",
            type="tenant-invalid",
            extra={"tenant_id": tenant_id},
        )

    request.state.tenant_id = tenant_id
    set_log_context(tenant_id=tenant_id)
    return tenant_id


TenantIdDep = Annotated[str, Depends(get_tenant_id)]
