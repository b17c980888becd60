"""
Revision history routes.

GET  /api/admin/revisions?contentType&contentId&limit   -> list history
GET  /api/admin/revisions/{id}?compareWith=<version>      -> one revision, optionally diffed
POST /api/admin/revisions/{id}                            -> restore

Access is checked against the resource guarding the revision's content type
(post -> posts, page -> pages, product -> products).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.auth import get_current_principal
from orgcms.constants.content import CONTENT_TYPE_RESOURCES, resolve_content_type
from orgcms.database import get_db
from orgcms.exceptions import AuthorizationError, RevisionNotFoundError
from orgcms.models.user import User
from orgcms.permissions_config.permission_dependencies import authorize_content_type, require_organization_id
from orgcms.permissions_config.permissions import Action
from orgcms.schemas.content import serialize_content_entity
from orgcms.schemas.revision import RestoreResponse, RevisionDetailResponse, RevisionListResponse, RevisionOut
from orgcms.services import revision_service
from orgcms.services.content_service import CONTENT_SERVICES
from orgcms.services.permission_service import can_edit_resource

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Revisions"])


@router.get("/revisions", response_model=RevisionListResponse)
async def list_revisions(
    content_type: str = Query(..., alias="contentType"),
    content_id: int = Query(..., alias="contentId"),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    principal: Optional[User] = Depends(get_current_principal),
):
    auth = authorize_content_type(principal, content_type, Action.VIEW)
    revisions = await revision_service.list_revisions(db, content_type, content_id, auth.organization_id, limit=limit)
    return {"revisions": revisions}


@router.get("/revisions/{revision_id}", response_model=RevisionDetailResponse, response_model_exclude_unset=True)
async def get_revision(
    revision_id: int,
    compare_with: Optional[int] = Query(None, alias="compareWith"),
    db: AsyncSession = Depends(get_db),
    principal: Optional[User] = Depends(get_current_principal),
):
    organization_id = require_organization_id(principal)
    revision = await revision_service.get_revision(db, revision_id, organization_id)
    if revision is None:
        raise RevisionNotFoundError(revision_id)
    authorize_content_type(principal, revision.content_type, Action.VIEW)

    if compare_with is None:
        return RevisionDetailResponse(revision=RevisionOut.model_validate(revision))

    other = await revision_service.get_revision_by_version(
        db, revision.content_type, revision.content_id, compare_with, organization_id
    )
    if other is None:
        raise RevisionNotFoundError(f"{revision.content_type}:{revision.content_id}@v{compare_with}")

    older, newer = (other, revision) if other.version <= revision.version else (revision, other)
    return RevisionDetailResponse(
        revision=RevisionOut.model_validate(revision),
        compare_revision=RevisionOut.model_validate(other),
        changes=[change.to_dict() for change in revision_service.compare_revisions(older, newer)],
        metadata_changes=[change.to_dict() for change in revision_service.diff_metadata(older, newer)],
    )


@router.post("/revisions/{revision_id}", response_model=RestoreResponse)
async def restore_revision(
    revision_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Optional[User] = Depends(get_current_principal),
):
    organization_id = require_organization_id(principal)
    revision = await revision_service.get_revision(db, revision_id, organization_id)
    if revision is None:
        raise RevisionNotFoundError(revision_id)
    authorize_content_type(principal, revision.content_type, Action.EDIT)

    content_type = resolve_content_type(revision.content_type)
    target = await CONTENT_SERVICES[content_type](db).get(revision.content_id, organization_id)
    if not can_edit_resource(principal, CONTENT_TYPE_RESOURCES[content_type], target.author_id):
        raise AuthorizationError("You can only edit your own content")

    entity = await revision_service.restore_revision(db, revision_id, organization_id, principal.id)
    return {"success": True, "content": serialize_content_entity(content_type, entity)}
