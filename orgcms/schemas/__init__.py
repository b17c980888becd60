from .token import Token
from .content import (
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
from .revision import RevisionDetailResponse, RevisionListResponse, RevisionOut, RestoreResponse
from .scheduling import CronPublishResponse, ScheduleRequest, UnscheduleRequest, UpcomingResponse
from .organization import MyOrganizationsResponse, SwitchOrganizationRequest, SwitchOrganizationResponse
from .role import RolesResponse

# Define the public API of this module
__all__ = [
    "Token",
    "PostCreate",
    "PostUpdate",
    "PostOut",
    "PageCreate",
    "PageUpdate",
    "PageOut",
    "ProductCreate",
    "ProductUpdate",
    "ProductOut",
    "RevisionOut",
    "RevisionListResponse",
    "RevisionDetailResponse",
    "RestoreResponse",
    "ScheduleRequest",
    "UnscheduleRequest",
    "UpcomingResponse",
    "CronPublishResponse",
    "MyOrganizationsResponse",
    "SwitchOrganizationRequest",
    "SwitchOrganizationResponse",
    "RolesResponse",
]
