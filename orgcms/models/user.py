from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from orgcms.constants.roles import DEFAULT_ROLE, RoleName, parse_role
from orgcms.database import Base
from orgcms.utils.timezone import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=True)
    # Null for accounts provisioned by an external identity provider
    hashed_password = Column(String, nullable=True)
    role = Column(String(20), nullable=False, default=DEFAULT_ROLE.value)
    # Active organization; every authorized request is scoped to it
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    organization = relationship("Organization", foreign_keys=[organization_id], lazy="selectin")
    memberships = relationship("OrganizationMembership", back_populates="user", cascade="all, delete-orphan")

    @property
    def role_name(self) -> RoleName | None:
        return parse_role(self.role)
