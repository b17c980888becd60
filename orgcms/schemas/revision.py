from typing import Any, Optional

from pydantic import AliasChoices, Field

from orgcms.schemas.common import AuthorOut, CamelModel, UTCDateTime


class RevisionOut(CamelModel):
    id: int
    content_type: str
    content_id: int
    version: int
    title: str
    content: Optional[str] = None
    # The ORM column is exposed as metadata_; Base.metadata is SQLAlchemy's
    metadata: Optional[dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("metadata_", "metadata"), serialization_alias="metadata"
    )
    author_id: Optional[int] = None
    author: Optional[AuthorOut] = None
    organization_id: int
    created_at: UTCDateTime


class RevisionChangeOut(CamelModel):
    field: str
    old_value: Any = None
    new_value: Any = None


class RevisionListResponse(CamelModel):
    revisions: list[RevisionOut]


class RevisionDetailResponse(CamelModel):
    revision: RevisionOut
    compare_revision: Optional[RevisionOut] = None
    changes: Optional[list[RevisionChangeOut]] = None
    metadata_changes: Optional[list[RevisionChangeOut]] = None


class RestoreResponse(CamelModel):
    success: bool = True
    content: dict[str, Any]
