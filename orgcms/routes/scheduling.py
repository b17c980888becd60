"""
Scheduling routes.

GET    /api/admin/scheduling?limit          -> upcoming scheduled content
POST   /api/admin/scheduling                -> schedule {contentType, contentId, scheduledAt}
DELETE /api/admin/scheduling                -> unschedule {contentType, contentId}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.auth import get_current_principal
from orgcms.constants.content import resolve_content_type
from orgcms.database import get_db
from orgcms.models.user import User
from orgcms.permissions_config.permission_dependencies import authorize_content_type, require_permission
from orgcms.permissions_config.permissions import Action, Resource
from orgcms.schemas.content import serialize_content_entity
from orgcms.schemas.scheduling import ScheduleRequest, ScheduleResponse, UnscheduleRequest, UpcomingResponse
from orgcms.services import scheduling_service
from orgcms.services.permission_service import Authorized

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Scheduling"])


@router.get("/scheduling", response_model=UpcomingResponse)
async def get_upcoming(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    auth: Authorized = Depends(require_permission(Resource.POSTS, Action.VIEW)),
):
    upcoming = await scheduling_service.get_upcoming_scheduled(db, auth.organization_id, limit=limit)
    return {"scheduled": upcoming, "count": len(upcoming)}


@router.post("/scheduling", response_model=ScheduleResponse)
async def schedule(
    payload: ScheduleRequest,
    db: AsyncSession = Depends(get_db),
    principal: Optional[User] = Depends(get_current_principal),
):
    content_type = resolve_content_type(payload.content_type)
    auth = authorize_content_type(principal, content_type, Action.PUBLISH)
    entity = await scheduling_service.schedule_content(
        db, content_type, payload.content_id, payload.scheduled_at, auth.organization_id
    )
    return {"success": True, "content": serialize_content_entity(content_type, entity)}


@router.delete("/scheduling", response_model=ScheduleResponse)
async def unschedule(
    payload: UnscheduleRequest = Body(...),
    db: AsyncSession = Depends(get_db),
    principal: Optional[User] = Depends(get_current_principal),
):
    content_type = resolve_content_type(payload.content_type)
    auth = authorize_content_type(principal, content_type, Action.PUBLISH)
    entity = await scheduling_service.unschedule_content(db, content_type, payload.content_id, auth.organization_id)
    return {"success": True, "content": serialize_content_entity(content_type, entity)}
