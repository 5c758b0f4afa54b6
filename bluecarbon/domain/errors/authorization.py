"""Authorization errors raised by the role policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bluecarbon.domain.exceptions import BlueCarbonError

if TYPE_CHECKING:
    from bluecarbon.domain.models.user import UserRole
    from bluecarbon.domain.services.authorization_policy import Action


class UnauthorizedActionError(BlueCarbonError):
    """Raised when an actor's role does not permit the requested action.

    Attributes:
        actor_id: Identifier of the acting user.
        role: The actor's role.
        action: The action that was denied.
    """

    def __init__(self, actor_id: str, role: UserRole, action: Action) -> None:
        self.actor_id = actor_id
        self.role = role
        self.action = action
        super().__init__(
            f"Role {role.value} may not perform {action.value} (actor {actor_id})"
        )
