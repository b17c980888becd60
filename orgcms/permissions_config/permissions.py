"""
Default permission matrix.

Role -> {Resource -> [Action]}. Each role is enumerated independently; there
is no implicit inheritance between roles. SUPER_ADMIN is additionally
short-circuited to "allow" by the evaluator.
"""

from enum import Enum

from orgcms.constants.roles import RoleName


class Resource(str, Enum):
    POSTS = "posts"
    PAGES = "pages"
    PRODUCTS = "products"
    CATEGORIES = "categories"
    TAGS = "tags"
    MEDIA = "media"
    USERS = "users"
    SETTINGS = "settings"
    MENUS = "menus"
    INQUIRIES = "inquiries"
    ORGANIZATIONS = "organizations"


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    PUBLISH = "publish"


RESOURCE_DISPLAY_NAMES = {
    Resource.POSTS: "Blog Posts",
    Resource.PAGES: "Pages",
    Resource.PRODUCTS: "Products",
    Resource.CATEGORIES: "Categories",
    Resource.TAGS: "Tags",
    Resource.MEDIA: "Media Library",
    Resource.USERS: "Users",
    Resource.SETTINGS: "Settings",
    Resource.MENUS: "Menus",
    Resource.INQUIRIES: "Inquiries",
    Resource.ORGANIZATIONS: "Organizations",
}

_ALL = (Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE, Action.PUBLISH)
_CRUD = (Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE)

DEFAULT_PERMISSIONS: dict[RoleName, dict[Resource, tuple[Action, ...]]] = {
    RoleName.SUPER_ADMIN: {resource: _ALL for resource in Resource},
    RoleName.ADMIN: {
        Resource.POSTS: _ALL,
        Resource.PAGES: _ALL,
        Resource.PRODUCTS: _ALL,
        Resource.CATEGORIES: _ALL,
        Resource.TAGS: _ALL,
        Resource.MEDIA: _ALL,
        Resource.USERS: _CRUD,
        Resource.SETTINGS: (Action.VIEW, Action.EDIT),
        Resource.MENUS: _ALL,
        Resource.INQUIRIES: (Action.VIEW, Action.EDIT, Action.DELETE),
        Resource.ORGANIZATIONS: (Action.VIEW, Action.EDIT),
    },
    RoleName.EDITOR: {
        Resource.POSTS: _ALL,
        Resource.PAGES: _ALL,
        Resource.PRODUCTS: _ALL,
        Resource.CATEGORIES: _CRUD,
        Resource.TAGS: _CRUD,
        Resource.MEDIA: _CRUD,
        Resource.USERS: (Action.VIEW,),
        Resource.SETTINGS: (Action.VIEW,),
        Resource.MENUS: _CRUD,
        Resource.INQUIRIES: (Action.VIEW, Action.EDIT),
        Resource.ORGANIZATIONS: (),
    },
    RoleName.AUTHOR: {
        # Editing is further limited to own content, see can_edit_resource()
        Resource.POSTS: (Action.VIEW, Action.CREATE, Action.EDIT),
        Resource.PAGES: (Action.VIEW,),
        Resource.PRODUCTS: (Action.VIEW, Action.CREATE, Action.EDIT),
        Resource.CATEGORIES: (Action.VIEW,),
        Resource.TAGS: (Action.VIEW, Action.CREATE),
        Resource.MEDIA: (Action.VIEW, Action.CREATE, Action.EDIT),
        Resource.USERS: (Action.VIEW,),
        Resource.SETTINGS: (),
        Resource.MENUS: (Action.VIEW,),
        Resource.INQUIRIES: (Action.VIEW,),
        Resource.ORGANIZATIONS: (),
    },
    RoleName.USER: {
        Resource.POSTS: (Action.VIEW,),
        Resource.PAGES: (Action.VIEW,),
        Resource.PRODUCTS: (Action.VIEW,),
        Resource.CATEGORIES: (Action.VIEW,),
        Resource.TAGS: (Action.VIEW,),
        Resource.MEDIA: (Action.VIEW,),
        Resource.USERS: (),
        Resource.SETTINGS: (),
        Resource.MENUS: (Action.VIEW,),
        Resource.INQUIRIES: (),
        Resource.ORGANIZATIONS: (),
    },
}


def get_role_permissions(role: str | RoleName) -> dict[Resource, tuple[Action, ...]]:
    """
    Returns the resource -> actions mapping for a given role.

    Raises:
        ValueError: If the role is not defined.
    """
    try:
        return DEFAULT_PERMISSIONS[RoleName(role)]
    except (KeyError, ValueError):
        raise ValueError(f"Invalid role: {role}") from None


def role_allows(role: str | RoleName, resource: str | Resource, action: str | Action) -> bool:
    """Matrix lookup; unknown roles, resources or actions are denied."""
    try:
        permissions = DEFAULT_PERMISSIONS[RoleName(role)]
        return Action(action) in permissions.get(Resource(resource), ())
    except ValueError:
        return False


def flatten_role_permissions(role: str | RoleName) -> list[dict]:
    """[{"resource": ..., "action": ..., "enabled": True}, ...] for the role catalogue."""
    return [
        {"resource": resource.value, "action": action.value, "enabled": True}
        for resource, actions in get_role_permissions(role).items()
        for action in actions
    ]
