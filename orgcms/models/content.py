"""
Content entities: posts, pages and products.

Each entity carries the scheduling fields (`status`, `scheduled_at`,
`published_at`). `scheduled_at` is set only while `status` is SCHEDULED.
"""

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from orgcms.constants.content import ContentType
from orgcms.database import Base
from orgcms.models.taxonomy import post_categories, post_tags, product_categories
from orgcms.utils.timezone import utcnow


class ContentStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"


class ProductStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    content = Column(JSON, nullable=True)
    excerpt = Column(Text, nullable=True)
    featured_image = Column(String(500), nullable=True)
    seo = Column(JSON, nullable=True)
    status = Column(Enum(ContentStatus, name="content_status"), default=ContentStatus.DRAFT, nullable=False)
    scheduled_at = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    author = relationship("User", lazy="selectin")
    categories = relationship("Category", secondary=post_categories, back_populates="posts", lazy="selectin")
    tags = relationship("Tag", secondary=post_tags, back_populates="posts", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_post_org_slug"),
        Index("idx_post_status_scheduled", "status", "scheduled_at"),
    )


class Page(Base):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    content = Column(JSON, nullable=True)
    template = Column(String(100), nullable=True, default="default")
    seo = Column(JSON, nullable=True)
    status = Column(Enum(ContentStatus, name="content_status"), default=ContentStatus.DRAFT, nullable=False)
    scheduled_at = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    author = relationship("User", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_page_org_slug"),
        Index("idx_page_status_scheduled", "status", "scheduled_at"),
    )


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    description = Column(JSON, nullable=True)
    short_description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    compare_at_price = Column(Float, nullable=True)
    sku = Column(String(100), nullable=True)
    inventory = Column(Integer, nullable=False, default=0)
    track_inventory = Column(Boolean, nullable=False, default=False)
    featured = Column(Boolean, nullable=False, default=False)
    featured_image = Column(String(500), nullable=True)
    specifications = Column(JSON, nullable=True)
    seo = Column(JSON, nullable=True)
    status = Column(Enum(ProductStatus, name="product_status"), default=ProductStatus.DRAFT, nullable=False)
    scheduled_at = Column(DateTime, nullable=True)
    # Activation timestamp, set when a scheduled product goes ACTIVE
    published_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    categories = relationship("Category", secondary=product_categories, back_populates="products", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("organization_id", "slug", name="uq_product_org_slug"),
        UniqueConstraint("organization_id", "sku", name="uq_product_org_sku"),
        Index("idx_product_status_scheduled", "status", "scheduled_at"),
    )

    @property
    def title(self) -> str:
        return self.name


CONTENT_MODELS = {
    ContentType.POST: Post,
    ContentType.PAGE: Page,
    ContentType.PRODUCT: Product,
}
