"""
Revision store.

Append-only, versioned snapshots of posts, pages and products, keyed by
(content_type, content_id, organization_id). Every read and write is scoped
by organization_id; a revision of another organization is reported exactly
like a missing one.

A revision records the state that is *about to be overwritten*: content
services call `create_revision()` with the pre-update entity, before
committing their own update.
"""

import json
import logging
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Optional

from sqlalchemy import delete, func, inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.config import settings
from orgcms.constants.content import ContentType, resolve_content_type
from orgcms.exceptions import ContentNotFoundError, DatabaseError, RevisionNotFoundError
from orgcms.models.content import CONTENT_MODELS
from orgcms.models.revision import Revision
from orgcms.utils.timezone import utcnow

logger = logging.getLogger(__name__)

MAX_REVISIONS_PER_CONTENT = settings.max_revisions_per_content

# Attempts at assigning a version before giving up on a contended key
MAX_VERSION_ATTEMPTS = 3


@dataclass(frozen=True)
class RevisionChange:
    field: str
    old_value: Any
    new_value: Any

    def to_dict(self) -> dict:
        return {"field": self.field, "oldValue": self.old_value, "newValue": self.new_value}


def serialize_content(value: Any) -> Optional[str]:
    """Serialize a rich-text document for storage in Revision.content."""
    if value is None:
        return None
    return json.dumps(value)


def deserialize_content(value: Optional[str]) -> Any:
    if not value:
        return None
    return json.loads(value)


def _key_filter(content_type: ContentType, content_id: int, organization_id: int):
    return (
        Revision.content_type == content_type.value,
        Revision.content_id == content_id,
        Revision.organization_id == organization_id,
    )


async def _next_version(db: AsyncSession, content_type: ContentType, content_id: int, organization_id: int) -> int:
    result = await db.execute(
        select(func.max(Revision.version)).where(*_key_filter(content_type, content_id, organization_id))
    )
    return (result.scalar() or 0) + 1


async def create_revision(
    db: AsyncSession,
    *,
    content_type: str | ContentType,
    content_id: int,
    title: str,
    organization_id: int,
    content: Optional[str] = None,
    metadata: Optional[dict] = None,
    author_id: Optional[int] = None,
) -> Revision:
    """
    Append a snapshot and return it.

    The version is max(existing) + 1. Two concurrent writers computing the
    same version collide on the unique constraint; the loser rolls back and
    retries with a fresh version. Note that the rollback discards any other
    pending changes in *db*, so callers must create the revision before
    touching the entity they are about to update.

    Retention pruning runs after the commit and never fails the create.
    """
    content_type = resolve_content_type(content_type)

    for attempt in range(1, MAX_VERSION_ATTEMPTS + 1):
        version = await _next_version(db, content_type, content_id, organization_id)
        revision = Revision(
            content_type=content_type.value,
            content_id=content_id,
            version=version,
            title=title,
            content=content,
            metadata_=metadata,
            author_id=author_id,
            organization_id=organization_id,
            created_at=utcnow(),
        )
        db.add(revision)
        try:
            await db.commit()
            break
        except IntegrityError:
            await db.rollback()
            logger.warning(
                "Revision version %d already taken for %s:%s (attempt %d/%d)",
                version,
                content_type.value,
                content_id,
                attempt,
                MAX_VERSION_ATTEMPTS,
            )
    else:
        raise DatabaseError("Could not assign a revision version", operation="create_revision")

    logger.info(
        "Revision created: %s:%s v%d (org=%s)", content_type.value, content_id, revision.version, organization_id
    )

    await prune_revisions(db, content_type, content_id, organization_id)
    if inspect(revision).expired:
        await db.refresh(revision)
    return revision


async def prune_revisions(
    db: AsyncSession,
    content_type: str | ContentType,
    content_id: int,
    organization_id: int,
    keep: Optional[int] = None,
) -> int:
    """
    Delete the oldest revisions beyond the retention limit.

    Returns the number of rows deleted. Failures are logged and swallowed so
    that a successful create is never reported as failed.
    """
    content_type = resolve_content_type(content_type)
    if keep is None:
        keep = MAX_REVISIONS_PER_CONTENT
    key = _key_filter(content_type, content_id, organization_id)

    try:
        count = (await db.execute(select(func.count(Revision.id)).where(*key))).scalar_one()
        if count <= keep:
            return 0

        stale = await db.execute(
            select(Revision.id).where(*key).order_by(Revision.version.asc()).limit(count - keep)
        )
        stale_ids = list(stale.scalars().all())
        await db.execute(
            delete(Revision).where(Revision.id.in_(stale_ids)).execution_options(synchronize_session=False)
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning("Revision pruning failed for %s:%s: %s", content_type.value, content_id, e)
        return 0

    logger.info("Pruned %d revisions for %s:%s (org=%s)", len(stale_ids), content_type.value, content_id, organization_id)
    return len(stale_ids)


async def list_revisions(
    db: AsyncSession,
    content_type: str | ContentType,
    content_id: int,
    organization_id: int,
    limit: int = 20,
) -> list[Revision]:
    """Revision history for one piece of content, newest version first."""
    content_type = resolve_content_type(content_type)
    result = await db.execute(
        select(Revision)
        .where(*_key_filter(content_type, content_id, organization_id))
        .order_by(Revision.version.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_revision(db: AsyncSession, revision_id: int, organization_id: int) -> Optional[Revision]:
    result = await db.execute(
        select(Revision).where(Revision.id == revision_id, Revision.organization_id == organization_id)
    )
    return result.scalars().first()


async def get_revision_by_version(
    db: AsyncSession,
    content_type: str | ContentType,
    content_id: int,
    version: int,
    organization_id: int,
) -> Optional[Revision]:
    content_type = resolve_content_type(content_type)
    result = await db.execute(
        select(Revision).where(
            *_key_filter(content_type, content_id, organization_id),
            Revision.version == version,
        )
    )
    return result.scalars().first()


def _snapshot_fields(revision: Any) -> tuple[Any, Any, Any]:
    if isinstance(revision, Mapping):
        return revision.get("title"), revision.get("content"), revision.get("metadata")
    metadata = getattr(revision, "metadata_", None)
    return revision.title, revision.content, metadata


def _serialize_metadata(metadata: Any) -> str:
    return json.dumps(metadata or {}, sort_keys=True, default=str)


def compare_revisions(older: Any, newer: Any) -> list[RevisionChange]:
    """
    Coarse diff between two revisions.

    Only three fields are compared: title, content and metadata. Metadata is
    compared as one serialized blob, so any change inside it yields a single
    "metadata" entry. Accepts Revision rows or plain mappings with "title",
    "content" and "metadata" keys.
    """
    old_title, old_content, old_meta = _snapshot_fields(older)
    new_title, new_content, new_meta = _snapshot_fields(newer)

    changes = []
    if old_title != new_title:
        changes.append(RevisionChange("title", old_title, new_title))
    if old_content != new_content:
        changes.append(RevisionChange("content", old_content, new_content))
    if _serialize_metadata(old_meta) != _serialize_metadata(new_meta):
        changes.append(RevisionChange("metadata", old_meta, new_meta))
    return changes


def diff_metadata(older: Any, newer: Any) -> list[RevisionChange]:
    """Per-key metadata changes, reported as "metadata.<key>"."""
    old_meta = _snapshot_fields(older)[2] or {}
    new_meta = _snapshot_fields(newer)[2] or {}

    changes = []
    for key in sorted(set(old_meta) | set(new_meta)):
        old_value, new_value = old_meta.get(key), new_meta.get(key)
        if _serialize_metadata({"v": old_value}) != _serialize_metadata({"v": new_value}):
            changes.append(RevisionChange(f"metadata.{key}", old_value, new_value))
    return changes


async def restore_revision(db: AsyncSession, revision_id: int, organization_id: int, user_id: Optional[int]):
    """
    Overwrite a content entity with a revision's snapshot.

    Posts get title, content and (when captured) excerpt back; pages get
    title and content; products get name and description. Afterwards a new
    revision is appended whose payload is the restored snapshot, tagged with
    `restoredFrom = <version>`, documenting the restore point.

    Raises:
        RevisionNotFoundError: revision missing or outside the organization.
        ContentNotFoundError: the entity no longer exists.
        UnknownContentTypeError: corrupt content_type on the revision.
    """
    revision = await get_revision(db, revision_id, organization_id)
    if revision is None:
        raise RevisionNotFoundError(revision_id)

    content_type = resolve_content_type(revision.content_type)
    model = CONTENT_MODELS[content_type]

    result = await db.execute(
        select(model).where(model.id == revision.content_id, model.organization_id == organization_id)
    )
    entity = result.scalars().first()
    if entity is None:
        raise ContentNotFoundError(content_type.value, revision.content_id)

    body = deserialize_content(revision.content)
    metadata = dict(revision.metadata_ or {})

    if content_type == ContentType.POST:
        entity.title = revision.title
        entity.content = body
        if "excerpt" in metadata:
            entity.excerpt = metadata["excerpt"]
    elif content_type == ContentType.PAGE:
        entity.title = revision.title
        entity.content = body
    else:
        entity.name = revision.title
        entity.description = body
    entity.updated_at = utcnow()

    await db.commit()

    await create_revision(
        db,
        content_type=content_type,
        content_id=revision.content_id,
        title=revision.title,
        content=revision.content,
        metadata={**metadata, "restoredFrom": revision.version},
        author_id=user_id,
        organization_id=organization_id,
    )
    await db.refresh(entity)

    logger.info(
        "Restored %s:%s to v%d (org=%s, user=%s)",
        content_type.value,
        revision.content_id,
        revision.version,
        organization_id,
        user_id,
    )
    return entity


async def delete_content_revisions(
    db: AsyncSession,
    content_type: str | ContentType,
    content_id: int,
    organization_id: int,
    commit: bool = True,
) -> int:
    """Remove the whole history of one content item (cascade on delete)."""
    content_type = resolve_content_type(content_type)
    result = await db.execute(
        delete(Revision)
        .where(*_key_filter(content_type, content_id, organization_id))
        .execution_options(synchronize_session=False)
    )
    if commit:
        await db.commit()
    return result.rowcount or 0


async def purge_organization_revisions(db: AsyncSession, organization_id: int) -> int:
    """Remove every revision belonging to an organization."""
    result = await db.execute(
        delete(Revision)
        .where(Revision.organization_id == organization_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.info("Purged %d revisions for org=%s", result.rowcount or 0, organization_id)
    return result.rowcount or 0
