"""
Permission evaluation.

`authorize()` is the single entry point every mutation goes through. It is a
pure function of the principal and the active policy: it performs no I/O and
never raises for a denial. Instead it returns either

  - `Authorized(user, organization_id)`: the organization the caller must
    scope every subsequent query to, or
  - `Denied(reason, message)`: UNAUTHENTICATED (no principal),
    NO_ORGANIZATION (principal without an active organization) or FORBIDDEN
    (role lacks the grant).

Transport translation (401/403) happens in
`orgcms.permissions_config.permission_dependencies`.

A per-organization override layer can wrap `DefaultPermissionPolicy` through
the `PermissionPolicy` protocol without touching callers.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from orgcms.constants.roles import RoleName, has_role_level, parse_role
from orgcms.exceptions import AuthenticationError, AuthorizationError, NoOrganizationError
from orgcms.permissions_config.permissions import Action, Resource, role_allows

logger = logging.getLogger(__name__)


class DenialReason(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    NO_ORGANIZATION = "no_organization"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Authorized:
    user: Any
    organization_id: int

    allowed = True


@dataclass(frozen=True)
class Denied:
    reason: DenialReason
    message: str
    user: Any = field(default=None, compare=False)

    allowed = False


AuthorizationResult = Authorized | Denied


class PermissionPolicy(Protocol):
    def allows(
        self,
        role: RoleName,
        resource: Resource,
        action: Action,
        organization_id: int | None,
    ) -> bool: ...


class DefaultPermissionPolicy:
    """Static role matrix; organization_id is accepted but unused."""

    def allows(
        self,
        role: RoleName,
        resource: Resource,
        action: Action,
        organization_id: int | None,
    ) -> bool:
        if role == RoleName.SUPER_ADMIN:
            return True
        return role_allows(role, resource, action)


default_policy: PermissionPolicy = DefaultPermissionPolicy()


def authorize(
    principal: Any | None,
    resource: str | Resource,
    action: str | Action,
    policy: PermissionPolicy | None = None,
) -> AuthorizationResult:
    """
    Decide whether *principal* may perform *action* on *resource*.

    Args:
        principal: The authenticated user (anything exposing `role` and
            `organization_id`), or None for anonymous requests.
        resource: Matrix resource name, e.g. "posts".
        action: Matrix action name, e.g. "publish".
        policy: Policy to consult; defaults to the static matrix.

    Returns:
        Authorized with the caller's organization_id, or Denied.
    """
    if principal is None:
        return Denied(DenialReason.UNAUTHENTICATED, "Unauthorized")

    policy = policy or default_policy
    role = parse_role(getattr(principal, "role", None))
    organization_id = getattr(principal, "organization_id", None)

    try:
        resource = Resource(resource)
        action = Action(action)
    except ValueError:
        return Denied(
            DenialReason.FORBIDDEN,
            f"Forbidden: Missing permission {action} on {resource}",
            user=principal,
        )

    if role is None or not policy.allows(role, resource, action, organization_id):
        logger.debug("Permission denied: role=%s resource=%s action=%s", role, resource.value, action.value)
        return Denied(
            DenialReason.FORBIDDEN,
            f"Forbidden: Missing permission {action.value} on {resource.value}",
            user=principal,
        )

    if organization_id is None:
        return Denied(DenialReason.NO_ORGANIZATION, "No organization assigned", user=principal)

    return Authorized(user=principal, organization_id=organization_id)


def ensure_authorized(result: AuthorizationResult) -> Authorized:
    """Return *result* if allowed, otherwise raise the matching CMSError."""
    if isinstance(result, Authorized):
        return result
    if result.reason == DenialReason.UNAUTHENTICATED:
        raise AuthenticationError(result.message)
    if result.reason == DenialReason.NO_ORGANIZATION:
        raise NoOrganizationError(result.message)
    raise AuthorizationError(result.message)


def can_edit_resource(
    principal: Any | None,
    resource: str | Resource,
    author_id: int | None = None,
    policy: PermissionPolicy | None = None,
) -> bool:
    """
    Instance-level edit check.

    Editors and above may edit anything the matrix lets them edit; authors
    may only edit content they authored.
    """
    if principal is None:
        return False
    role = parse_role(getattr(principal, "role", None))
    if role is None:
        return False

    if not isinstance(authorize(principal, resource, Action.EDIT, policy), Authorized):
        return False

    if has_role_level(role, RoleName.EDITOR):
        return True

    if role == RoleName.AUTHOR and author_id is not None:
        return getattr(principal, "id", None) == author_id

    return False
