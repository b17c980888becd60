"""Constants package for OrgCMS."""

from .content import CONTENT_TYPE_RESOURCES, ContentType, resolve_content_type
from .roles import (
    DEFAULT_ROLE,
    ROLE_DESCRIPTIONS,
    ROLE_HIERARCHY,
    RoleName,
    format_role_name,
    has_role_level,
    parse_role,
    role_level,
)

__all__ = [
    # Role constants
    "RoleName",
    "DEFAULT_ROLE",
    "ROLE_HIERARCHY",
    "ROLE_DESCRIPTIONS",
    "format_role_name",
    "has_role_level",
    "parse_role",
    "role_level",
    # Content constants
    "ContentType",
    "CONTENT_TYPE_RESOURCES",
    "resolve_content_type",
]
