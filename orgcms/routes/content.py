"""
CRUD routes for posts, pages and products.

/api/admin/posts, /api/admin/pages and /api/admin/products each expose:

GET    /            -> list (optional ?status, ?skip, ?limit)
POST   /            -> create
GET    /{id}        -> fetch
PUT    /{id}        -> update; body may carry skipRevision
DELETE /{id}        -> delete, together with the revision history

Every route is guarded by the matrix entry of its own resource. Updates are
additionally subject to the ownership rule (authors edit only their own
content).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.constants.content import CONTENT_TYPE_RESOURCES, ContentType
from orgcms.database import get_db
from orgcms.exceptions import AuthorizationError
from orgcms.permissions_config.permission_dependencies import require_permission
from orgcms.permissions_config.permissions import Action
from orgcms.schemas.content import (
    DeleteResponse,
    PageCreate,
    PageOut,
    PageUpdate,
    PostCreate,
    PostOut,
    PostUpdate,
    ProductCreate,
    ProductOut,
    ProductUpdate,
)
from orgcms.services.content_service import CONTENT_SERVICES
from orgcms.services.permission_service import Authorized, can_edit_resource

logger = logging.getLogger(__name__)


def build_content_router(content_type: ContentType, create_schema, update_schema, out_schema) -> APIRouter:
    resource = CONTENT_TYPE_RESOURCES[content_type]
    service_cls = CONTENT_SERVICES[content_type]
    router = APIRouter(tags=[resource.capitalize()])

    @router.get("", response_model=list[out_schema])
    async def list_content(
        status_filter: Optional[str] = Query(None, alias="status"),
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        db: AsyncSession = Depends(get_db),
        auth: Authorized = Depends(require_permission(resource, Action.VIEW)),
    ):
        return await service_cls(db).list(auth.organization_id, status=status_filter, skip=skip, limit=limit)

    @router.post("", response_model=out_schema, status_code=status.HTTP_201_CREATED)
    async def create_content(
        payload: create_schema,
        db: AsyncSession = Depends(get_db),
        auth: Authorized = Depends(require_permission(resource, Action.CREATE)),
    ):
        data = payload.model_dump(exclude_unset=True)
        return await service_cls(db).create(data, auth.organization_id, author_id=auth.user.id)

    @router.get("/{content_id}", response_model=out_schema)
    async def get_content(
        content_id: int,
        db: AsyncSession = Depends(get_db),
        auth: Authorized = Depends(require_permission(resource, Action.VIEW)),
    ):
        return await service_cls(db).get(content_id, auth.organization_id)

    @router.put("/{content_id}", response_model=out_schema)
    async def update_content(
        content_id: int,
        payload: update_schema,
        db: AsyncSession = Depends(get_db),
        auth: Authorized = Depends(require_permission(resource, Action.EDIT)),
    ):
        service = service_cls(db)
        existing = await service.get(content_id, auth.organization_id)
        if not can_edit_resource(auth.user, resource, existing.author_id):
            raise AuthorizationError("You can only edit your own content")

        data = payload.model_dump(exclude_unset=True, exclude={"skip_revision"})
        return await service.update(
            content_id,
            data,
            auth.organization_id,
            user_id=auth.user.id,
            skip_revision=payload.skip_revision,
        )

    @router.delete("/{content_id}", response_model=DeleteResponse)
    async def delete_content(
        content_id: int,
        db: AsyncSession = Depends(get_db),
        auth: Authorized = Depends(require_permission(resource, Action.DELETE)),
    ):
        await service_cls(db).delete(content_id, auth.organization_id)
        return {"success": True}

    return router


posts_router = build_content_router(ContentType.POST, PostCreate, PostUpdate, PostOut)
pages_router = build_content_router(ContentType.PAGE, PageCreate, PageUpdate, PageOut)
products_router = build_content_router(ContentType.PRODUCT, ProductCreate, ProductUpdate, ProductOut)
