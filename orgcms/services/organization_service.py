"""
Organization Service

Async operations on organizations and memberships.
All functions accept an injected AsyncSession.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.constants.roles import DEFAULT_ROLE, RoleName
from orgcms.exceptions import AuthorizationError, DuplicateResourceError, OrganizationNotFoundError
from orgcms.models.organization import Organization, OrganizationMembership, OrganizationStatus
from orgcms.models.user import User
from orgcms.services import revision_service
from orgcms.utils.slugify import slugify

logger = logging.getLogger(__name__)


async def create_organization(
    db: AsyncSession,
    name: str,
    slug: str | None = None,
    plan: str | None = None,
    domain: str | None = None,
) -> Organization:
    """Create a new organization; the slug is derived from the name when omitted."""
    slug = slug or slugify(name)
    existing = await db.execute(
        select(Organization.id).where((Organization.slug == slug) | (Organization.name == name))
    )
    if existing.first() is not None:
        raise DuplicateResourceError("Organization", "slug", slug)

    organization = Organization(
        name=name,
        slug=slug,
        domain=domain,
        plan=plan,
        status=OrganizationStatus.active.value,
    )
    db.add(organization)
    await db.commit()
    await db.refresh(organization)
    logger.info("Organization created: id=%d slug=%s", organization.id, organization.slug)
    return organization


async def get_organization(db: AsyncSession, organization_id: int) -> Organization:
    """Return an Organization by primary key or raise OrganizationNotFoundError."""
    result = await db.execute(select(Organization).where(Organization.id == organization_id))
    organization = result.scalars().first()
    if organization is None:
        raise OrganizationNotFoundError(organization_id)
    return organization


async def get_membership(db: AsyncSession, user_id: int, organization_id: int) -> OrganizationMembership | None:
    result = await db.execute(
        select(OrganizationMembership).where(
            OrganizationMembership.user_id == user_id,
            OrganizationMembership.organization_id == organization_id,
        )
    )
    return result.scalars().first()


async def add_membership(
    db: AsyncSession,
    user: User,
    organization_id: int,
    role: str | RoleName = DEFAULT_ROLE,
    is_default: bool = False,
) -> OrganizationMembership:
    """
    Add *user* to an organization.

    Users without an active organization get this one as their active
    organization.
    """
    await get_organization(db, organization_id)
    if await get_membership(db, user.id, organization_id) is not None:
        raise DuplicateResourceError("Membership", "organization_id", organization_id)

    membership = OrganizationMembership(
        user_id=user.id,
        organization_id=organization_id,
        role=RoleName(role).value,
        is_default=is_default,
    )
    db.add(membership)
    if user.organization_id is None:
        user.organization_id = organization_id
    await db.commit()
    await db.refresh(membership)
    logger.info("Membership added: user=%d org=%d role=%s", user.id, organization_id, membership.role)
    return membership


async def switch_organization(db: AsyncSession, user: User, organization_id: int) -> User:
    """
    Make *organization_id* the user's active organization.

    The user needs a membership in it, or it must already be their current
    organization. The matching membership becomes the default one.

    Raises:
        AuthorizationError: the user has no access to the organization.
    """
    membership = await get_membership(db, user.id, organization_id)
    if membership is None and user.organization_id != organization_id:
        raise AuthorizationError("You don't have access to this organization")

    user.organization_id = organization_id
    if membership is not None:
        await db.execute(
            update(OrganizationMembership)
            .where(OrganizationMembership.user_id == user.id, OrganizationMembership.id != membership.id)
            .values(is_default=False)
            .execution_options(synchronize_session=False)
        )
        membership.is_default = True

    await db.commit()
    await db.refresh(user)
    logger.info("User %d switched to organization %d", user.id, organization_id)
    return user


async def list_user_organizations(db: AsyncSession, user: User) -> list[dict]:
    """
    Organizations the user belongs to, oldest membership first.

    The user's active organization is prepended when it has no membership row.
    """
    result = await db.execute(
        select(OrganizationMembership)
        .where(OrganizationMembership.user_id == user.id)
        .order_by(OrganizationMembership.created_at.asc(), OrganizationMembership.id.asc())
    )
    organizations = [
        {"organization": m.organization, "membership_role": m.role, "is_default": m.is_default}
        for m in result.scalars().all()
    ]

    if user.organization_id is not None and all(
        entry["organization"].id != user.organization_id for entry in organizations
    ):
        organization = await get_organization(db, user.organization_id)
        organizations.insert(0, {"organization": organization, "membership_role": user.role, "is_default": True})

    return organizations


async def delete_organization(db: AsyncSession, organization_id: int) -> Organization:
    """Soft-delete an organization and purge its revision history."""
    organization = await get_organization(db, organization_id)
    await revision_service.purge_organization_revisions(db, organization_id)
    organization.status = OrganizationStatus.deleted.value
    await db.commit()
    await db.refresh(organization)
    logger.info("Organization soft-deleted: id=%d slug=%s", organization.id, organization.slug)
    return organization
