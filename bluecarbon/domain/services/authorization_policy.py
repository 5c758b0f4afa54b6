"""Role-based authorization policy.

Every mutating lifecycle operation consults this single policy instead of
comparing roles at call sites. The policy is a pure lookup table and has
no infrastructure dependencies.
"""

from __future__ import annotations

from enum import Enum

from bluecarbon.domain.errors.authorization import UnauthorizedActionError
from bluecarbon.domain.models.submission import SubmissionStatus
from bluecarbon.domain.models.user import User, UserRole, UserStatus


class Action(Enum):
    """Intents a user may issue against the registry."""

    CREATE_SUBMISSION = "CREATE_SUBMISSION"
    REVERIFY_SUBMISSION = "REVERIFY_SUBMISSION"
    NGO_REVIEW = "NGO_REVIEW"
    FINAL_REVIEW = "FINAL_REVIEW"
    PURCHASE_CREDIT = "PURCHASE_CREDIT"
    MANAGE_USERS = "MANAGE_USERS"
    ASK_ORACLE = "ASK_ORACLE"
    VIEW_REGISTRY = "VIEW_REGISTRY"
    MANAGE_SYNC = "MANAGE_SYNC"


_ALL_ROLES: frozenset[UserRole] = frozenset(UserRole)

PERMISSIONS: dict[Action, frozenset[UserRole]] = {
    Action.CREATE_SUBMISSION: frozenset({UserRole.FISHERMAN}),
    Action.REVERIFY_SUBMISSION: frozenset({UserRole.NGO}),
    Action.NGO_REVIEW: frozenset({UserRole.NGO}),
    Action.FINAL_REVIEW: frozenset({UserRole.ADMIN}),
    Action.PURCHASE_CREDIT: frozenset({UserRole.CORPORATE}),
    Action.MANAGE_USERS: frozenset({UserRole.ADMIN}),
    Action.ASK_ORACLE: _ALL_ROLES,
    Action.VIEW_REGISTRY: frozenset({UserRole.NGO, UserRole.ADMIN}),
    Action.MANAGE_SYNC: frozenset({UserRole.ADMIN}),
}

# Statuses a reviewer may set directly. AI_VERIFIED and AI_FAILED are
# assigned by oracle screening only and therefore have no entry.
STATUS_ACTIONS: dict[SubmissionStatus, Action] = {
    SubmissionStatus.FIELD_CHECK: Action.NGO_REVIEW,
    SubmissionStatus.IN_REVIEW: Action.NGO_REVIEW,
    SubmissionStatus.NGO_APPROVED: Action.NGO_REVIEW,
    SubmissionStatus.APPROVED: Action.FINAL_REVIEW,
}


class AuthorizationPolicy:
    """Central role policy.

    Suspended accounts are denied every action.
    """

    def __init__(
        self, permissions: dict[Action, frozenset[UserRole]] | None = None
    ) -> None:
        self._permissions = permissions or PERMISSIONS

    def is_allowed(self, actor: User, action: Action) -> bool:
        if actor.status == UserStatus.SUSPENDED:
            return False
        return actor.role in self._permissions.get(action, frozenset())

    def require(self, actor: User, action: Action) -> None:
        """Raise UnauthorizedActionError unless the actor may act."""
        if not self.is_allowed(actor, action):
            raise UnauthorizedActionError(
                actor_id=actor.id, role=actor.role, action=action
            )

    def action_for_status(
        self, current: SubmissionStatus, target: SubmissionStatus
    ) -> Action | None:
        """Action required to move a submission from current to target.

        Rejection is an NGO verdict, except on an NGO-approved item where it
        is part of the final review. Returns None for statuses no user may
        set directly.
        """
        if target == SubmissionStatus.REJECTED:
            if current == SubmissionStatus.NGO_APPROVED:
                return Action.FINAL_REVIEW
            return Action.NGO_REVIEW
        return STATUS_ACTIONS.get(target)
