"""
Role Constants for OrgCMS

This module defines constants for user roles to avoid hardcoded values
throughout the codebase.
"""

from enum import Enum


class RoleName(str, Enum):
    """Enumeration of role names in the system."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    AUTHOR = "AUTHOR"
    USER = "USER"


# Default role for new accounts
DEFAULT_ROLE = RoleName.USER

# Ordered from least to most privileged. Used only for ownership rules and
# role comparisons; the permission matrix enumerates each role independently.
ROLE_HIERARCHY: list[RoleName] = [
    RoleName.USER,
    RoleName.AUTHOR,
    RoleName.EDITOR,
    RoleName.ADMIN,
    RoleName.SUPER_ADMIN,
]

ROLE_DESCRIPTIONS = {
    RoleName.SUPER_ADMIN: "Full system access, can manage other administrators",
    RoleName.ADMIN: "Full organization access, can manage users and settings",
    RoleName.EDITOR: "Can create, edit, and publish all content",
    RoleName.AUTHOR: "Can create and edit own content only",
    RoleName.USER: "Read-only access to public content",
}


def parse_role(role: str | RoleName | None) -> RoleName | None:
    """Return the RoleName for *role*, or None when it is not a known role."""
    if role is None:
        return None
    try:
        return RoleName(role)
    except ValueError:
        return None


def role_level(role: str | RoleName) -> int:
    """Position of *role* in ROLE_HIERARCHY; -1 for unknown roles."""
    parsed = parse_role(role)
    if parsed is None:
        return -1
    return ROLE_HIERARCHY.index(parsed)


def has_role_level(user_role: str | RoleName, required_role: str | RoleName) -> bool:
    """
    Check if user_role is at least as privileged as required_role.

    Args:
        user_role: Role held by the user
        required_role: Minimum role required

    Returns:
        bool: True if user_role >= required_role in the hierarchy
    """
    return role_level(user_role) >= role_level(required_role) >= 0


def format_role_name(role: str | RoleName) -> str:
    """SUPER_ADMIN -> "Super Admin"."""
    value = role.value if isinstance(role, RoleName) else role
    return " ".join(word.capitalize() for word in value.split("_"))
