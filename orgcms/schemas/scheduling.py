from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from orgcms.schemas.common import AuthorOut, CamelModel, UTCDateTime


class ScheduleRequest(CamelModel):
    content_type: str = Field(..., description="One of post, page or product.")
    content_id: int
    scheduled_at: datetime = Field(..., description="ISO-8601 timestamp; must be in the future.")


class UnscheduleRequest(CamelModel):
    content_type: str
    content_id: int


class ScheduledItemOut(CamelModel):
    id: int
    type: str
    title: str
    slug: str
    scheduled_at: UTCDateTime
    author: Optional[AuthorOut] = None


class UpcomingResponse(CamelModel):
    scheduled: list[ScheduledItemOut]
    count: int


class ScheduleResponse(CamelModel):
    success: bool = True
    content: dict[str, Any]


class PublishedCounts(CamelModel):
    posts: int = 0
    pages: int = 0
    products: int = 0


class CronPublishResponse(CamelModel):
    success: bool = True
    published: PublishedCounts
    errors: list[str] = []
    timestamp: str
