"""Content type constants shared by the revision and scheduling services."""

from enum import Enum

from orgcms.exceptions import UnknownContentTypeError


class ContentType(str, Enum):
    POST = "post"
    PAGE = "page"
    PRODUCT = "product"


# Permission-matrix resource guarding each content type
CONTENT_TYPE_RESOURCES = {
    ContentType.POST: "posts",
    ContentType.PAGE: "pages",
    ContentType.PRODUCT: "products",
}


def resolve_content_type(value: str | ContentType) -> ContentType:
    """Parse *value* into a ContentType, naming the offending value on failure."""
    if isinstance(value, ContentType):
        return value
    try:
        return ContentType(value)
    except ValueError:
        raise UnknownContentTypeError(value) from None
