from typing import Optional

from orgcms.schemas.common import CamelModel, UTCDateTime


class OrganizationOut(CamelModel):
    id: int
    name: str
    slug: str
    domain: Optional[str] = None
    status: str
    plan: Optional[str] = None
    created_at: UTCDateTime


class UserOrganizationOut(CamelModel):
    organization: OrganizationOut
    membership_role: str
    is_default: bool


class MyOrganizationsResponse(CamelModel):
    organizations: list[UserOrganizationOut]
    current_organization_id: Optional[int] = None


class SwitchOrganizationRequest(CamelModel):
    organization_id: int


class SwitchOrganizationResponse(CamelModel):
    success: bool = True
    organization_id: int
    message: str = "Organization switched successfully"
