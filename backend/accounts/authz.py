# accounts/authz.py
"""
Authorization utilities for the ledger.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require: Check permissions and raise if not granted

Permissions come from the membership role (see permission_defaults).
OWNER is an implicit allow.
"""

from dataclasses import dataclass
from typing import FrozenSet

from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import BusinessUnit, BusinessUnitMembership
from accounts.permission_defaults import permissions_for_role


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor (user + business unit).

    This is passed to commands and policies to provide context
    about who is performing an action and in which business unit.

    Attributes:
        user: The authenticated user
        business_unit: The active business unit
        membership: The user's membership in the business unit
        perms: Set of permission codes granted by the role
    """
    user: object  # User model
    business_unit: BusinessUnit
    membership: BusinessUnitMembership
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        if not self.membership.is_active:
            return False
        if self.membership.role == BusinessUnitMembership.Role.OWNER:
            return True
        return code in self.perms

    @property
    def is_owner(self) -> bool:
        return self.membership.role == BusinessUnitMembership.Role.OWNER

    @property
    def role(self) -> str:
        return self.membership.role


def actor_for(user, business_unit: BusinessUnit) -> ActorContext:
    """
    Build an ActorContext for a user inside a business unit.

    Raises:
        PermissionDenied: If the user has no active membership there
    """
    try:
        membership = BusinessUnitMembership.objects.select_related(
            "business_unit"
        ).get(
            user=user,
            business_unit=business_unit,
            is_active=True,
        )
    except BusinessUnitMembership.DoesNotExist:
        raise PermissionDenied("You are not an active member of the selected business unit.")

    return ActorContext(
        user=user,
        business_unit=membership.business_unit,
        membership=membership,
        perms=permissions_for_role(membership.role),
    )


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    Called at the start of every view that needs authorization.
    The membership is loaded fresh so role changes apply immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If user has no active business unit or membership
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    business_unit = getattr(user, "active_business_unit", None)
    if not business_unit:
        raise PermissionDenied("No active business unit selected.")

    return actor_for(user, business_unit)


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Example:
        require(actor, "journal.post")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")
