"""
Organization routes for the signed-in user.

GET  /api/admin/organizations/mine     -> organizations the user belongs to
POST /api/admin/organizations/switch   -> change the active organization
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.auth import get_current_principal
from orgcms.database import get_db
from orgcms.exceptions import AuthenticationError
from orgcms.models.user import User
from orgcms.schemas.organization import (
    MyOrganizationsResponse,
    SwitchOrganizationRequest,
    SwitchOrganizationResponse,
)
from orgcms.services import organization_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Organizations"])


def _require_user(principal: Optional[User]) -> User:
    if principal is None:
        raise AuthenticationError()
    return principal


@router.get("/organizations/mine", response_model=MyOrganizationsResponse)
async def my_organizations(
    db: AsyncSession = Depends(get_db),
    principal: Optional[User] = Depends(get_current_principal),
):
    user = _require_user(principal)
    organizations = await organization_service.list_user_organizations(db, user)
    return {"organizations": organizations, "current_organization_id": user.organization_id}


@router.post("/organizations/switch", response_model=SwitchOrganizationResponse)
async def switch_organization(
    payload: SwitchOrganizationRequest,
    db: AsyncSession = Depends(get_db),
    principal: Optional[User] = Depends(get_current_principal),
):
    user = _require_user(principal)
    await organization_service.switch_organization(db, user, payload.organization_id)
    return {"success": True, "organization_id": payload.organization_id}
