from orgcms.schemas.common import CamelModel


class PermissionOut(CamelModel):
    resource: str
    action: str
    enabled: bool = True


class RoleOut(CamelModel):
    name: str
    display_name: str
    description: str
    permissions: list[PermissionOut]


class NamedItem(CamelModel):
    name: str
    display_name: str


class RolesResponse(CamelModel):
    roles: list[RoleOut]
    resources: list[NamedItem]
    actions: list[NamedItem]
