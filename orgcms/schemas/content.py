from typing import Any, Optional

from pydantic import Field, field_validator

from orgcms.constants.content import ContentType
from orgcms.models.content import ContentStatus, ProductStatus
from orgcms.schemas.common import AuthorOut, CamelModel, UTCDateTime


def _reject_scheduled(value):
    if value is not None and value.value == "SCHEDULED":
        raise ValueError("use the scheduling endpoint to schedule content")
    return value


def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


class TaxonomyOut(CamelModel):
    id: int
    name: str
    slug: str


# ----------------------------------------------------------------------
# Posts
# ----------------------------------------------------------------------


class PostCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    slug: Optional[str] = Field(None, max_length=300)
    content: Optional[Any] = Field(None, description="Rich-text document (JSON).")
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    seo: Optional[dict[str, Any]] = None
    status: Optional[ContentStatus] = None
    category_ids: Optional[list[int]] = None
    tag_ids: Optional[list[int]] = None

    reject_scheduled_status = field_validator("status")(_reject_scheduled)


class PostUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    slug: Optional[str] = Field(None, max_length=300)
    content: Optional[Any] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    seo: Optional[dict[str, Any]] = None
    status: Optional[ContentStatus] = None
    category_ids: Optional[list[int]] = None
    tag_ids: Optional[list[int]] = None
    skip_revision: bool = Field(False, description="Apply the update without recording a revision.")

    reject_scheduled_status = field_validator("status")(_reject_scheduled)
    reject_null_fields = field_validator("title")(_reject_null)


class PostOut(CamelModel):
    id: int
    organization_id: int
    author_id: Optional[int] = None
    author: Optional[AuthorOut] = None
    title: str
    slug: str
    content: Optional[Any] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    seo: Optional[dict[str, Any]] = None
    status: ContentStatus
    scheduled_at: Optional[UTCDateTime] = None
    published_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime
    categories: list[TaxonomyOut] = []
    tags: list[TaxonomyOut] = []


# ----------------------------------------------------------------------
# Pages
# ----------------------------------------------------------------------


class PageCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=300)
    slug: Optional[str] = Field(None, max_length=300)
    content: Optional[Any] = None
    template: Optional[str] = Field("default", max_length=100)
    seo: Optional[dict[str, Any]] = None
    status: Optional[ContentStatus] = None

    reject_scheduled_status = field_validator("status")(_reject_scheduled)


class PageUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    slug: Optional[str] = Field(None, max_length=300)
    content: Optional[Any] = None
    template: Optional[str] = Field(None, max_length=100)
    seo: Optional[dict[str, Any]] = None
    status: Optional[ContentStatus] = None
    skip_revision: bool = False

    reject_scheduled_status = field_validator("status")(_reject_scheduled)
    reject_null_fields = field_validator("title")(_reject_null)


class PageOut(CamelModel):
    id: int
    organization_id: int
    author_id: Optional[int] = None
    title: str
    slug: str
    content: Optional[Any] = None
    template: Optional[str] = None
    seo: Optional[dict[str, Any]] = None
    status: ContentStatus
    scheduled_at: Optional[UTCDateTime] = None
    published_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


# ----------------------------------------------------------------------
# Products
# ----------------------------------------------------------------------


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=300)
    slug: Optional[str] = Field(None, max_length=300)
    description: Optional[Any] = None
    short_description: Optional[str] = None
    price: float = Field(0.0, ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    inventory: int = 0
    track_inventory: bool = False
    featured: bool = False
    featured_image: Optional[str] = None
    specifications: Optional[Any] = None
    seo: Optional[dict[str, Any]] = None
    status: Optional[ProductStatus] = None
    category_ids: Optional[list[int]] = None

    reject_scheduled_status = field_validator("status")(_reject_scheduled)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=300)
    slug: Optional[str] = Field(None, max_length=300)
    description: Optional[Any] = None
    short_description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    inventory: Optional[int] = None
    track_inventory: Optional[bool] = None
    featured: Optional[bool] = None
    featured_image: Optional[str] = None
    specifications: Optional[Any] = None
    seo: Optional[dict[str, Any]] = None
    status: Optional[ProductStatus] = None
    category_ids: Optional[list[int]] = None
    skip_revision: bool = False

    reject_scheduled_status = field_validator("status")(_reject_scheduled)
    reject_null_fields = field_validator("name", "price", "inventory", "track_inventory", "featured")(_reject_null)


class ProductOut(CamelModel):
    id: int
    organization_id: int
    author_id: Optional[int] = None
    name: str
    slug: str
    description: Optional[Any] = None
    short_description: Optional[str] = None
    price: float
    compare_at_price: Optional[float] = None
    sku: Optional[str] = None
    inventory: int
    track_inventory: bool
    featured: bool
    featured_image: Optional[str] = None
    specifications: Optional[Any] = None
    seo: Optional[dict[str, Any]] = None
    status: ProductStatus
    scheduled_at: Optional[UTCDateTime] = None
    published_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime
    categories: list[TaxonomyOut] = []


class DeleteResponse(CamelModel):
    success: bool = True


CONTENT_SCHEMAS = {
    ContentType.POST: PostOut,
    ContentType.PAGE: PageOut,
    ContentType.PRODUCT: ProductOut,
}


def serialize_content_entity(content_type: ContentType, entity) -> dict[str, Any]:
    """JSON-ready camelCase dict for a post, page or product."""
    return CONTENT_SCHEMAS[content_type].model_validate(entity).model_dump(mode="json", by_alias=True)
