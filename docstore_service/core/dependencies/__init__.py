"""FastAPI dependencies for route handlers.

Usage:
    from docstore_service.core.dependencies import (
        CurrentUserDep,
        EventServiceDep,
        TenantIdDep,
    )

    @router.post("/events")
    async def create_event(tenant_id: TenantIdDep, user: CurrentUserDep, service: EventServiceDep):
        ...
"""

from docstore_service.core.dependencies.auth import CurrentUserDep, get_current_user
from docstore_service.core.dependencies.database import DbSessionDep, get_db_session
from docstore_service.core.dependencies.events import (
    ConnectionManagerDep,
    EventServiceDep,
    EventStoreDep,
    get_connection_manager,
    get_event_service,
    get_event_store,
)
from docstore_service.core.dependencies.settings import get_request_app_settings
from docstore_service.core.dependencies.tenant import TenantIdDep, get_tenant_id

__all__ = [
    "ConnectionManagerDep",
    "CurrentUserDep",
    "DbSessionDep",
    "EventServiceDep",
    "EventStoreDep",
    "TenantIdDep",
    "get_connection_manager",
    "get_current_user",
    "get_db_session",
    "get_event_service",
    "get_event_store",
    "get_request_app_settings",
    "get_tenant_id",
]
