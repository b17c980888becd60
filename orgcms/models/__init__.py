from .organization import Organization, OrganizationMembership, OrganizationStatus
from .user import User
from .taxonomy import Category, Tag, post_categories, post_tags, product_categories
from .content import CONTENT_MODELS, ContentStatus, Page, Post, Product, ProductStatus
from .revision import Revision

__all__ = [
    "Organization",
    "OrganizationMembership",
    "OrganizationStatus",
    "User",
    "Category",
    "Tag",
    "post_categories",
    "post_tags",
    "product_categories",
    "CONTENT_MODELS",
    "ContentStatus",
    "ProductStatus",
    "Post",
    "Page",
    "Product",
    "Revision",
]
