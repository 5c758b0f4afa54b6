"""Registry API dependencies.

Delegates to the bootstrap singletons and resolves the acting user from
the X-User-Id header.
"""

from fastapi import Depends, Header, Request

from bluecarbon.api.errors import problem
from bluecarbon.application.services.lifecycle_controller import (
    SubmissionLifecycleController,
)
from bluecarbon.application.services.persistence_outbox import PersistenceOutbox
from bluecarbon.application.services.record_store import RecordStore
from bluecarbon.application.services.registry_sync_service import (
    RegistrySyncService,
)
from bluecarbon.application.services.role_views import RoleViewService
from bluecarbon.bootstrap.registry import (
    get_authorization_policy,
    get_integration_settings,
    get_lifecycle_config,
    get_lifecycle_controller,
    get_persistence_outbox,
    get_record_store,
    get_registry_sync_service,
    get_role_view_service,
)
from bluecarbon.domain.models.user import User
from bluecarbon.domain.services.authorization_policy import (
    Action,
    AuthorizationPolicy,
)

USER_HEADER = "X-User-Id"


def get_store() -> RecordStore:
    return get_record_store()


def get_controller() -> SubmissionLifecycleController:
    return get_lifecycle_controller()


def get_outbox() -> PersistenceOutbox:
    return get_persistence_outbox()


def get_sync_service() -> RegistrySyncService:
    return get_registry_sync_service()


def get_role_views() -> RoleViewService:
    return get_role_view_service()


def get_policy() -> AuthorizationPolicy:
    return get_authorization_policy()


def get_current_user(
    request: Request,
    x_user_id: str | None = Header(default=None, alias=USER_HEADER),
    store: RecordStore = Depends(get_store),
) -> User:
    """Resolve the acting user.

    Raises:
        HTTPException: 401 if the header is missing or names no known user.
    """
    user = store.get_user(x_user_id) if x_user_id else None
    if user is None:
        raise problem(
            request,
            401,
            "unknown-user",
            "Unknown User",
            f"{USER_HEADER} header must name a registered user",
        )
    return user


def require_action(action: Action):  # type: ignore[no-untyped-def]
    """Dependency factory rejecting actors not allowed to perform an action."""

    def _dependency(
        request: Request,
        user: User = Depends(get_current_user),
        policy: AuthorizationPolicy = Depends(get_policy),
    ) -> User:
        if not policy.is_allowed(user, action):
            raise problem(
                request,
                403,
                "forbidden",
                "Forbidden",
                f"Role {user.role.value} may not perform {action.value}",
            )
        return user

    return _dependency


__all__ = [
    "USER_HEADER",
    "get_controller",
    "get_current_user",
    "get_integration_settings",
    "get_lifecycle_config",
    "get_outbox",
    "get_policy",
    "get_role_views",
    "get_store",
    "get_sync_service",
    "require_action",
]
