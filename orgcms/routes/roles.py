from fastapi import APIRouter, Depends

from orgcms.constants.roles import ROLE_DESCRIPTIONS, RoleName, format_role_name
from orgcms.exceptions import FeatureNotImplementedError
from orgcms.permissions_config.permission_dependencies import require_permission
from orgcms.permissions_config.permissions import RESOURCE_DISPLAY_NAMES, Action, Resource, flatten_role_permissions
from orgcms.schemas.role import RolesResponse
from orgcms.services.permission_service import Authorized

router = APIRouter(tags=["Roles"])


@router.get("/roles", response_model=RolesResponse)
async def get_roles(auth: Authorized = Depends(require_permission(Resource.USERS, Action.VIEW))):
    """
    Role catalogue: every role with its flattened default permissions.
    """
    roles = [
        {
            "name": role.value,
            "display_name": format_role_name(role),
            "description": ROLE_DESCRIPTIONS.get(role, ""),
            "permissions": flatten_role_permissions(role),
        }
        for role in RoleName
    ]
    return {
        "roles": roles,
        "resources": [
            {"name": resource.value, "display_name": RESOURCE_DISPLAY_NAMES[resource]} for resource in Resource
        ],
        "actions": [{"name": action.value, "display_name": action.value.capitalize()} for action in Action],
    }


@router.post("/roles/permissions")
async def update_role_permissions(auth: Authorized = Depends(require_permission(Resource.USERS, Action.EDIT))):
    raise FeatureNotImplementedError("Custom permission overrides are not available yet")
