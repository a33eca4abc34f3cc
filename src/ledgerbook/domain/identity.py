"""Identity provider interface and the static implementation used by the CLI."""

from abc import ABC, abstractmethod

from ledgerbook.domain.entities import Actor, Role
from ledgerbook.domain.errors import PermissionDeniedError, admin_required


class IdentityProvider(ABC):
    """Source of the actor performing the current operation."""

    @abstractmethod
    def current_actor(self) -> Actor:
        """Return the current actor."""
        pass


class StaticIdentityProvider(IdentityProvider):
    """Identity provider that always returns the same actor."""

    def __init__(self, actor_id: str, label: str | None = None, role: Role | str = Role.ADMIN):
        self.actor = Actor(id=actor_id, label=label or actor_id, role=Role(role))

    def current_actor(self) -> Actor:
        return self.actor


def require_admin(identity: IdentityProvider, action: str) -> Actor:
    """Return the current actor, or raise if it is not an admin.

    Args:
        identity: Identity provider
        action: Human readable action used in the error message

    Raises:
        PermissionDeniedError: If the current actor is not an admin
    """
    actor = identity.current_actor()
    if not actor.is_admin:
        raise PermissionDeniedError(admin_required(action))
    return actor
