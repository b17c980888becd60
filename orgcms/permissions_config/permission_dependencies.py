from typing import Optional

from fastapi import Depends

from orgcms.auth import get_current_principal
from orgcms.constants.content import CONTENT_TYPE_RESOURCES, ContentType, resolve_content_type
from orgcms.exceptions import AuthenticationError, NoOrganizationError
from orgcms.models.user import User
from orgcms.permissions_config.permissions import Action, Resource
from orgcms.services.permission_service import Authorized, authorize, ensure_authorized


def require_permission(resource: Resource | str, action: Action | str):
    """
    Dependency factory guarding a route with one matrix entry.

    Resolves to `Authorized(user, organization_id)`; denials surface as 401
    (no principal / no organization) or 403 (missing grant).
    """

    async def checker(principal: Optional[User] = Depends(get_current_principal)) -> Authorized:
        return ensure_authorized(authorize(principal, resource, action))

    return checker


def authorize_content_type(principal: Optional[User], content_type: str | ContentType, action: Action) -> Authorized:
    """Authorize *action* on the resource guarding *content_type* (post -> posts, ...)."""
    content_type = resolve_content_type(content_type)
    return ensure_authorized(authorize(principal, CONTENT_TYPE_RESOURCES[content_type], action))


def require_organization_id(principal: Optional[User]) -> int:
    """
    Active organization of *principal*, for routes that must load a row
    before they know which resource guards it.
    """
    if principal is None:
        raise AuthenticationError()
    if principal.organization_id is None:
        raise NoOrganizationError()
    return principal.organization_id
