from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from orgcms.database import Base
from orgcms.utils.timezone import utcnow


class Revision(Base):
    """
    Immutable snapshot of a post, page or product.

    `content_id` is not a foreign key; it points into posts, pages or
    products depending on `content_type`.
    """

    __tablename__ = "revisions"

    id = Column(Integer, primary_key=True, index=True)
    content_type = Column(String(20), nullable=False)
    content_id = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False)
    title = Column(String(300), nullable=False)
    content = Column(Text, nullable=True)
    # metadata_ avoids shadowing Base.metadata
    metadata_ = Column("metadata", JSON, nullable=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    author = relationship("User", lazy="selectin")

    __table_args__ = (
        UniqueConstraint(
            "content_type", "content_id", "organization_id", "version", name="uq_revision_content_version"
        ),
        Index("idx_revision_content", "content_type", "content_id", "organization_id"),
    )
