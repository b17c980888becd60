"""
Tests for the permission matrix and the permission evaluator.

The evaluator is pure, so most of these tests use MagicMock principals and
never touch the database.

Test classes:
    TestPermissionMatrix      — DEFAULT_PERMISSIONS contents per role
    TestAuthorize             — authorize() outcomes and denial reasons
    TestEnsureAuthorized      — Denied -> CMSError translation
    TestCanEditResource       — ownership rule for updates
    TestCustomPolicy          — pluggable PermissionPolicy
    TestRoleHelpers           — role hierarchy helpers
    TestRoleRoutes            — /api/admin/roles endpoints
"""

from unittest.mock import MagicMock

import pytest

from orgcms.constants.roles import RoleName, format_role_name, has_role_level, parse_role, role_level
from orgcms.exceptions import AuthenticationError, AuthorizationError, NoOrganizationError
from orgcms.permissions_config.permissions import (
    DEFAULT_PERMISSIONS,
    Action,
    Resource,
    flatten_role_permissions,
    get_role_permissions,
    role_allows,
)
from orgcms.services.permission_service import (
    Authorized,
    Denied,
    DenialReason,
    authorize,
    can_edit_resource,
    ensure_authorized,
)
from utils.mock_utils import make_auth_headers


def make_principal(role: RoleName | str, organization_id: int | None = 1, user_id: int = 10):
    principal = MagicMock()
    principal.id = user_id
    principal.role = role.value if isinstance(role, RoleName) else role
    principal.organization_id = organization_id
    return principal


# ── TestPermissionMatrix ──────────────────────────────────────────────────────


class TestPermissionMatrix:
    """DEFAULT_PERMISSIONS matches the documented role grants."""

    def test_every_role_enumerates_every_resource(self):
        for role in RoleName:
            assert set(DEFAULT_PERMISSIONS[role]) == set(Resource)

    def test_super_admin_has_everything(self):
        for resource in Resource:
            assert set(DEFAULT_PERMISSIONS[RoleName.SUPER_ADMIN][resource]) == set(Action)

    def test_admin_cannot_create_organizations(self):
        assert role_allows(RoleName.ADMIN, Resource.ORGANIZATIONS, Action.EDIT)
        assert not role_allows(RoleName.ADMIN, Resource.ORGANIZATIONS, Action.CREATE)
        assert not role_allows(RoleName.ADMIN, Resource.USERS, Action.PUBLISH)

    def test_editor_publishes_content_but_not_users(self):
        for resource in (Resource.POSTS, Resource.PAGES, Resource.PRODUCTS):
            assert role_allows(RoleName.EDITOR, resource, Action.PUBLISH)
        assert role_allows(RoleName.EDITOR, Resource.USERS, Action.VIEW)
        assert not role_allows(RoleName.EDITOR, Resource.USERS, Action.EDIT)
        assert DEFAULT_PERMISSIONS[RoleName.EDITOR][Resource.ORGANIZATIONS] == ()

    def test_author_grants(self):
        assert role_allows(RoleName.AUTHOR, Resource.POSTS, Action.EDIT)
        assert not role_allows(RoleName.AUTHOR, Resource.POSTS, Action.PUBLISH)
        assert not role_allows(RoleName.AUTHOR, Resource.POSTS, Action.DELETE)
        assert DEFAULT_PERMISSIONS[RoleName.AUTHOR][Resource.PAGES] == (Action.VIEW,)
        assert role_allows(RoleName.AUTHOR, Resource.TAGS, Action.CREATE)

    def test_user_is_read_only(self):
        for resource, actions in DEFAULT_PERMISSIONS[RoleName.USER].items():
            assert set(actions) <= {Action.VIEW}, resource

    def test_unknown_values_are_denied(self):
        assert role_allows("GUEST", Resource.POSTS, Action.VIEW) is False
        assert role_allows(RoleName.ADMIN, "widgets", Action.VIEW) is False
        assert role_allows(RoleName.ADMIN, Resource.POSTS, "approve") is False

    def test_get_role_permissions_rejects_unknown_role(self):
        with pytest.raises(ValueError, match="Invalid role"):
            get_role_permissions("GUEST")

    def test_flatten_role_permissions(self):
        flat = flatten_role_permissions(RoleName.AUTHOR)
        assert {"resource": "posts", "action": "create", "enabled": True} in flat
        assert all(entry["enabled"] for entry in flat)
        assert not any(entry["resource"] == "settings" for entry in flat)


# ── TestAuthorize ─────────────────────────────────────────────────────────────


class TestAuthorize:
    """authorize() returns Authorized or Denied and never raises."""

    def test_anonymous_is_unauthenticated(self):
        result = authorize(None, Resource.POSTS, Action.VIEW)
        assert isinstance(result, Denied)
        assert result.reason == DenialReason.UNAUTHENTICATED
        assert result.allowed is False

    def test_allowed_carries_organization_id(self):
        principal = make_principal(RoleName.EDITOR, organization_id=42)
        result = authorize(principal, "posts", "publish")
        assert isinstance(result, Authorized)
        assert result.organization_id == 42
        assert result.user is principal
        assert result.allowed is True

    def test_author_cannot_publish(self):
        result = authorize(make_principal(RoleName.AUTHOR), Resource.POSTS, Action.PUBLISH)
        assert isinstance(result, Denied)
        assert result.reason == DenialReason.FORBIDDEN
        assert result.message == "Forbidden: Missing permission publish on posts"

    def test_super_admin_is_always_allowed(self):
        principal = make_principal(RoleName.SUPER_ADMIN)
        for resource in Resource:
            for action in Action:
                assert isinstance(authorize(principal, resource, action), Authorized)

    def test_allowed_without_organization(self):
        result = authorize(make_principal(RoleName.EDITOR, organization_id=None), Resource.POSTS, Action.VIEW)
        assert isinstance(result, Denied)
        assert result.reason == DenialReason.NO_ORGANIZATION

    def test_forbidden_takes_precedence_over_missing_organization(self):
        result = authorize(make_principal(RoleName.USER, organization_id=None), Resource.POSTS, Action.EDIT)
        assert result.reason == DenialReason.FORBIDDEN

    def test_unknown_role_is_forbidden(self):
        result = authorize(make_principal("GUEST"), Resource.POSTS, Action.VIEW)
        assert result.reason == DenialReason.FORBIDDEN

    def test_unknown_resource_is_forbidden(self):
        result = authorize(make_principal(RoleName.ADMIN), "widgets", Action.VIEW)
        assert result.reason == DenialReason.FORBIDDEN


# ── TestEnsureAuthorized ──────────────────────────────────────────────────────


class TestEnsureAuthorized:
    """Denials map to 401/403 errors."""

    def test_passes_through_authorized(self):
        allowed = Authorized(user=make_principal(RoleName.ADMIN), organization_id=1)
        assert ensure_authorized(allowed) is allowed

    def test_unauthenticated_raises_401(self):
        with pytest.raises(AuthenticationError) as exc_info:
            ensure_authorized(Denied(DenialReason.UNAUTHENTICATED, "Unauthorized"))
        assert exc_info.value.status_code == 401

    def test_no_organization_raises_401(self):
        with pytest.raises(NoOrganizationError) as exc_info:
            ensure_authorized(Denied(DenialReason.NO_ORGANIZATION, "No organization assigned"))
        assert exc_info.value.status_code == 401

    def test_forbidden_raises_403_with_message(self):
        with pytest.raises(AuthorizationError) as exc_info:
            ensure_authorized(authorize(make_principal(RoleName.AUTHOR), Resource.POSTS, Action.PUBLISH))
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Forbidden: Missing permission publish on posts"


# ── TestCanEditResource ───────────────────────────────────────────────────────


class TestCanEditResource:
    """Authors edit only their own content; editors and above edit anything."""

    def test_editor_edits_anything(self):
        assert can_edit_resource(make_principal(RoleName.EDITOR), Resource.POSTS, author_id=999)

    def test_admin_edits_anything(self):
        assert can_edit_resource(make_principal(RoleName.ADMIN), Resource.PRODUCTS, author_id=None)

    def test_author_edits_own(self):
        assert can_edit_resource(make_principal(RoleName.AUTHOR, user_id=7), Resource.POSTS, author_id=7)

    def test_author_cannot_edit_others(self):
        assert not can_edit_resource(make_principal(RoleName.AUTHOR, user_id=7), Resource.POSTS, author_id=8)
        assert not can_edit_resource(make_principal(RoleName.AUTHOR, user_id=7), Resource.POSTS, author_id=None)

    def test_author_cannot_edit_pages_at_all(self):
        assert not can_edit_resource(make_principal(RoleName.AUTHOR, user_id=7), Resource.PAGES, author_id=7)

    def test_user_and_anonymous_cannot_edit(self):
        assert not can_edit_resource(make_principal(RoleName.USER, user_id=7), Resource.POSTS, author_id=7)
        assert not can_edit_resource(None, Resource.POSTS, author_id=7)


# ── TestCustomPolicy ──────────────────────────────────────────────────────────


class TestCustomPolicy:
    """A PermissionPolicy can replace the static matrix."""

    def test_policy_is_consulted(self):
        class DenyPages:
            def allows(self, role, resource, action, organization_id):
                return resource != Resource.PAGES

        principal = make_principal(RoleName.EDITOR, organization_id=3)
        assert isinstance(authorize(principal, Resource.POSTS, Action.EDIT, policy=DenyPages()), Authorized)
        result = authorize(principal, Resource.PAGES, Action.VIEW, policy=DenyPages())
        assert result.reason == DenialReason.FORBIDDEN

    def test_policy_receives_organization_id(self):
        policy = MagicMock()
        policy.allows.return_value = True
        authorize(make_principal(RoleName.USER, organization_id=5), Resource.SETTINGS, Action.EDIT, policy=policy)
        policy.allows.assert_called_once_with(RoleName.USER, Resource.SETTINGS, Action.EDIT, 5)


# ── TestRoleHelpers ───────────────────────────────────────────────────────────


class TestRoleHelpers:
    def test_parse_role(self):
        assert parse_role("EDITOR") is RoleName.EDITOR
        assert parse_role("editor") is None
        assert parse_role(None) is None

    def test_role_levels(self):
        assert role_level(RoleName.USER) < role_level(RoleName.AUTHOR) < role_level(RoleName.SUPER_ADMIN)
        assert role_level("GUEST") == -1

    def test_has_role_level(self):
        assert has_role_level(RoleName.ADMIN, RoleName.EDITOR)
        assert not has_role_level(RoleName.AUTHOR, RoleName.EDITOR)
        assert not has_role_level("GUEST", "GUEST")

    def test_format_role_name(self):
        assert format_role_name(RoleName.SUPER_ADMIN) == "Super Admin"


# ── TestRoleRoutes ────────────────────────────────────────────────────────────


class TestRoleRoutes:
    """GET /api/admin/roles and the not-yet-available overrides endpoint."""

    @pytest.mark.asyncio
    async def test_roles_requires_authentication(self, client):
        response = await client.get("/api/admin/roles")
        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "AUTH_FAILED"

    @pytest.mark.asyncio
    async def test_roles_catalogue(self, client, editor_headers):
        response = await client.get("/api/admin/roles", headers=editor_headers)
        assert response.status_code == 200
        data = response.json()
        assert [role["name"] for role in data["roles"]] == [role.value for role in RoleName]
        author = next(role for role in data["roles"] if role["name"] == "AUTHOR")
        assert author["displayName"] == "Author"
        assert {"resource": "posts", "action": "edit", "enabled": True} in author["permissions"]
        assert {"name": "posts", "displayName": "Blog Posts"} in data["resources"]
        assert [action["name"] for action in data["actions"]] == ["view", "create", "edit", "delete", "publish"]

    @pytest.mark.asyncio
    async def test_roles_forbidden_for_user_role(self, client, viewer_headers):
        response = await client.get("/api/admin/roles", headers=viewer_headers)
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Forbidden: Missing permission view on users"

    @pytest.mark.asyncio
    async def test_permission_overrides_not_implemented(self, client, admin_user):
        response = await client.post("/api/admin/roles/permissions", headers=make_auth_headers(admin_user))
        assert response.status_code == 501
        assert response.json()["error"]["error_code"] == "NOT_IMPLEMENTED"

    @pytest.mark.asyncio
    async def test_user_without_organization(self, client, orphan_user):
        response = await client.get("/api/admin/roles", headers=make_auth_headers(orphan_user))
        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "AUTH_NO_ORGANIZATION"
