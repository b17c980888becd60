"""
Content services for posts, pages and products.

Each service wraps one model and shares the update pipeline:

    load pre-update entity -> validate (slug, sku, status, relations)
    -> detect meaningful change over supplied fields
    -> snapshot the *old* state into the revision store -> apply the update

Revisions are written before the entity is touched; `create_revision()` may
roll the session back while resolving a version conflict.
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.constants.content import ContentType
from orgcms.exceptions import ContentNotFoundError, DuplicateResourceError, ValidationError
from orgcms.models.content import ContentStatus, Page, Post, Product, ProductStatus
from orgcms.models.taxonomy import Category, Tag
from orgcms.services import revision_service
from orgcms.utils.slugify import slugify
from orgcms.utils.timezone import utcnow

logger = logging.getLogger(__name__)


def _differs(old: Any, new: Any) -> bool:
    if isinstance(old, (dict, list)) or isinstance(new, (dict, list)):
        return json.dumps(old, sort_keys=True, default=str) != json.dumps(new, sort_keys=True, default=str)
    return old != new


class ContentService:
    content_type: ContentType
    model: Any
    status_enum: Any = ContentStatus
    published_status: Any = ContentStatus.PUBLISHED

    # Column holding the display title and the rich-text body
    title_field = "title"
    body_field = "content"

    # Fields whose change warrants a revision
    revision_fields: tuple[str, ...] = ()
    # Fields accepted by create() and update()
    editable_fields: tuple[str, ...] = ()

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def label(self) -> str:
        return self.content_type.value.capitalize()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get(self, content_id: int, organization_id: int):
        """Fetch one entity, raising ContentNotFoundError outside the organization."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == content_id, self.model.organization_id == organization_id)
        )
        entity = result.scalars().first()
        if entity is None:
            raise ContentNotFoundError(self.content_type.value, content_id)
        return entity

    async def list(self, organization_id: int, status: Optional[str] = None, skip: int = 0, limit: int = 20):
        query = select(self.model).where(self.model.organization_id == organization_id)
        if status:
            query = query.where(self.model.status == self._parse_status(status))
        query = query.order_by(self.model.updated_at.desc(), self.model.id.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return result.scalars().all()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, data: dict, organization_id: int, author_id: Optional[int] = None):
        title = data.get(self.title_field)
        if not title:
            raise ValidationError(f"{self.title_field.capitalize()} is required", field=self.title_field)

        fields = {key: value for key, value in data.items() if key in self.editable_fields}
        fields["slug"] = data.get("slug") or slugify(title)
        fields["status"] = self._parse_target_status(data.get("status") or self.status_enum.DRAFT)

        await self._ensure_unique_slug(fields["slug"], organization_id)
        await self._ensure_unique_fields(fields, organization_id)
        relations = await self._resolve_relations(data, organization_id)

        entity = self.model(organization_id=organization_id, author_id=author_id, **fields, **relations)
        if entity.status == self.published_status:
            entity.published_at = utcnow()

        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)

        logger.info("%s created: id=%d org=%s", self.label, entity.id, organization_id)
        return entity

    async def update(
        self,
        content_id: int,
        data: dict,
        organization_id: int,
        user_id: Optional[int] = None,
        skip_revision: bool = False,
    ):
        """
        Apply a partial update.

        Only keys present in *data* are changed. When any revision field in
        *data* differs from the stored value (and *skip_revision* is false),
        the pre-update state is snapshotted first. Everything that can reject
        the update is checked before the snapshot is written.
        """
        entity = await self.get(content_id, organization_id)

        if "slug" in data and data["slug"] and data["slug"] != entity.slug:
            await self._ensure_unique_slug(data["slug"], organization_id, exclude_id=entity.id)
        await self._ensure_unique_fields(data, organization_id, exclude_id=entity.id)
        status = self._parse_target_status(data["status"]) if data.get("status") is not None else None
        relations = await self._resolve_relations(data, organization_id)

        if self.has_meaningful_change(entity, data) and not skip_revision:
            title, body, metadata = self.snapshot(entity)
            await revision_service.create_revision(
                self.db,
                content_type=self.content_type,
                content_id=entity.id,
                title=title,
                content=body,
                metadata=metadata,
                author_id=user_id,
                organization_id=organization_id,
            )
            await self.db.refresh(entity)

        for field, value in data.items():
            if field not in self.editable_fields or field == "status":
                continue
            if field == "slug" and not value:
                continue
            setattr(entity, field, value)

        if status is not None:
            self._apply_status(entity, status)
        for attr, items in relations.items():
            setattr(entity, attr, items)
        entity.updated_at = utcnow()

        await self.db.commit()
        await self.db.refresh(entity)

        logger.info("%s updated: id=%d org=%s", self.label, entity.id, organization_id)
        return entity

    async def delete(self, content_id: int, organization_id: int) -> None:
        """Delete the entity together with its whole revision history."""
        entity = await self.get(content_id, organization_id)
        removed = await revision_service.delete_content_revisions(
            self.db, self.content_type, entity.id, organization_id, commit=False
        )
        await self.db.delete(entity)
        await self.db.commit()
        logger.info(
            "%s deleted: id=%d org=%s (%d revisions removed)", self.label, content_id, organization_id, removed
        )

    # ------------------------------------------------------------------
    # Revision support
    # ------------------------------------------------------------------

    def has_meaningful_change(self, entity, data: dict) -> bool:
        return any(
            field in data and _differs(getattr(entity, field), data[field]) for field in self.revision_fields
        )

    def snapshot(self, entity) -> tuple[str, Optional[str], dict]:
        """(title, serialized body, metadata) describing the entity as stored."""
        return (
            getattr(entity, self.title_field),
            revision_service.serialize_content(getattr(entity, self.body_field)),
            self.revision_metadata(entity),
        )

    def revision_metadata(self, entity) -> dict:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse_status(self, value):
        try:
            return self.status_enum(value)
        except ValueError:
            raise ValidationError(f"Invalid status: {value}", field="status") from None

    def _parse_target_status(self, value):
        """Status a create or update may move to; SCHEDULED only via the scheduling service."""
        status = self._parse_status(value)
        if status == self.status_enum.SCHEDULED:
            raise ValidationError("Use the scheduling endpoint to schedule content", field="status")
        return status

    def _apply_status(self, entity, status) -> None:
        if entity.status == self.status_enum.SCHEDULED and status != entity.status:
            entity.scheduled_at = None
        if status == self.published_status and entity.published_at is None:
            entity.published_at = utcnow()
        entity.status = status

    async def _ensure_unique_slug(self, slug: str, organization_id: int, exclude_id: Optional[int] = None) -> None:
        query = select(self.model.id).where(self.model.organization_id == organization_id, self.model.slug == slug)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        if (await self.db.execute(query)).first() is not None:
            raise DuplicateResourceError(self.label, "slug", slug)

    async def _ensure_unique_fields(self, data: dict, organization_id: int, exclude_id: Optional[int] = None) -> None:
        pass

    async def _resolve_relations(self, data: dict, organization_id: int) -> dict:
        """Relationship attribute -> loaded rows for the ids in *data*."""
        return {}

    async def _load_scoped(self, model, ids, organization_id: int, field: str):
        ids = list(dict.fromkeys(ids or []))
        if not ids:
            return []
        result = await self.db.execute(
            select(model).where(model.id.in_(ids), model.organization_id == organization_id)
        )
        found = result.scalars().all()
        if len(found) != len(ids):
            missing = sorted(set(ids) - {item.id for item in found})
            raise ValidationError(f"Unknown {field}: {missing}", field=field)
        return found


class PostService(ContentService):
    content_type = ContentType.POST
    model = Post
    revision_fields = ("title", "content", "excerpt", "featured_image", "seo")
    editable_fields = ("title", "slug", "content", "excerpt", "status", "featured_image", "seo")

    def revision_metadata(self, entity: Post) -> dict:
        return {
            "slug": entity.slug,
            "excerpt": entity.excerpt,
            "status": entity.status.value,
            "featuredImage": entity.featured_image,
            "seo": entity.seo,
            "categories": [category.name for category in entity.categories],
            "tags": [tag.name for tag in entity.tags],
        }

    async def _resolve_relations(self, data: dict, organization_id: int) -> dict:
        relations = {}
        if data.get("category_ids") is not None:
            relations["categories"] = await self._load_scoped(
                Category, data["category_ids"], organization_id, "categoryIds"
            )
        if data.get("tag_ids") is not None:
            relations["tags"] = await self._load_scoped(Tag, data["tag_ids"], organization_id, "tagIds")
        return relations


class PageService(ContentService):
    content_type = ContentType.PAGE
    model = Page
    revision_fields = ("title", "content", "template", "seo")
    editable_fields = ("title", "slug", "content", "status", "template", "seo")

    def revision_metadata(self, entity: Page) -> dict:
        return {
            "slug": entity.slug,
            "status": entity.status.value,
            "template": entity.template,
            "seo": entity.seo,
        }


class ProductService(ContentService):
    content_type = ContentType.PRODUCT
    model = Product
    status_enum = ProductStatus
    published_status = ProductStatus.ACTIVE
    title_field = "name"
    body_field = "description"
    revision_fields = ("name", "description", "short_description", "price", "featured_image", "specifications", "seo")
    editable_fields = (
        "name",
        "slug",
        "description",
        "short_description",
        "price",
        "compare_at_price",
        "sku",
        "inventory",
        "track_inventory",
        "status",
        "featured",
        "featured_image",
        "specifications",
        "seo",
    )

    def revision_metadata(self, entity: Product) -> dict:
        return {
            "slug": entity.slug,
            "shortDescription": entity.short_description,
            "price": entity.price,
            "compareAtPrice": entity.compare_at_price,
            "sku": entity.sku,
            "inventory": entity.inventory,
            "trackInventory": entity.track_inventory,
            "status": entity.status.value,
            "featured": entity.featured,
            "featuredImage": entity.featured_image,
            "specifications": entity.specifications,
            "seo": entity.seo,
            "categories": [category.name for category in entity.categories],
        }

    async def _ensure_unique_fields(self, data: dict, organization_id: int, exclude_id: Optional[int] = None) -> None:
        sku = data.get("sku")
        if not sku:
            return
        query = select(Product.id).where(Product.organization_id == organization_id, Product.sku == sku)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        if (await self.db.execute(query)).first() is not None:
            raise DuplicateResourceError(self.label, "sku", sku)

    async def _resolve_relations(self, data: dict, organization_id: int) -> dict:
        if data.get("category_ids") is None:
            return {}
        categories = await self._load_scoped(Category, data["category_ids"], organization_id, "categoryIds")
        return {"categories": categories}


CONTENT_SERVICES = {
    ContentType.POST: PostService,
    ContentType.PAGE: PageService,
    ContentType.PRODUCT: ProductService,
}
