"""
Organization model: the tenant isolation boundary.

Every post, page, product, category, tag and revision carries an
organization_id; users belong to one or more organizations through
OrganizationMembership and act within one active organization at a time.
"""

import enum

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from orgcms.constants.roles import DEFAULT_ROLE
from orgcms.database import Base
from orgcms.utils.timezone import utcnow


class OrganizationStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    deleted = "deleted"


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, unique=True)
    slug = Column(String(100), nullable=False, unique=True, index=True)
    domain = Column(String(253), nullable=True, unique=True)
    status = Column(String(20), nullable=False, default=OrganizationStatus.active.value)
    plan = Column(String(50), nullable=True)
    # metadata_ avoids shadowing Base.metadata
    metadata_ = Column("metadata", JSON, nullable=True, default=dict)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    memberships = relationship("OrganizationMembership", back_populates="organization", cascade="all, delete-orphan")

    __table_args__ = (Index("idx_organization_status", "status"),)


class OrganizationMembership(Base):
    __tablename__ = "organization_memberships"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=DEFAULT_ROLE.value)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    organization = relationship("Organization", back_populates="memberships", lazy="selectin")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (UniqueConstraint("user_id", "organization_id", name="uq_membership_user_org"),)
