"""
Scheduling engine.

Content moves DRAFT -> SCHEDULED when scheduled, back to DRAFT when
unscheduled, and SCHEDULED -> PUBLISHED (products: ACTIVE) once its
`scheduled_at` has passed and the batch publisher runs.

The batch publisher is idempotent: each content type is flipped with a single
set-based UPDATE guarded by `status = SCHEDULED AND scheduled_at <= now`, so
running it twice (or concurrently) never publishes an item twice. Callers are
the cron endpoint (`orgcms.routes.cron`) and, optionally, the embedded
APScheduler job in `orgcms.scheduler`.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.constants.content import ContentType, resolve_content_type
from orgcms.exceptions import ContentNotFoundError, InvalidScheduleError, InvalidStatusTransitionError
from orgcms.models.content import CONTENT_MODELS, ContentStatus, Page, Post, Product, ProductStatus
from orgcms.utils.timezone import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

# How many rows per type get_upcoming_scheduled() reads before merging
UPCOMING_OVERFETCH_FACTOR = 3

_PUBLISH_TARGETS = (
    (ContentType.POST, Post, ContentStatus.PUBLISHED, "Failed to publish posts"),
    (ContentType.PAGE, Page, ContentStatus.PUBLISHED, "Failed to publish pages"),
    (ContentType.PRODUCT, Product, ProductStatus.ACTIVE, "Failed to activate products"),
)


@dataclass
class PublishResult:
    posts: int = 0
    pages: int = 0
    products: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.posts + self.pages + self.products

    def to_dict(self) -> dict:
        return {
            "posts": self.posts,
            "pages": self.pages,
            "products": self.products,
            "errors": list(self.errors),
        }


def _scheduled_status(content_type: ContentType):
    return ProductStatus.SCHEDULED if content_type == ContentType.PRODUCT else ContentStatus.SCHEDULED


def _draft_status(content_type: ContentType):
    return ProductStatus.DRAFT if content_type == ContentType.PRODUCT else ContentStatus.DRAFT


async def _get_scoped_entity(db: AsyncSession, content_type: ContentType, content_id: int, organization_id: int):
    model = CONTENT_MODELS[content_type]
    result = await db.execute(
        select(model).where(model.id == content_id, model.organization_id == organization_id)
    )
    entity = result.scalars().first()
    if entity is None:
        raise ContentNotFoundError(content_type.value, content_id)
    return entity


async def schedule_content(
    db: AsyncSession,
    content_type: str | ContentType,
    content_id: int,
    scheduled_at: datetime,
    organization_id: int,
):
    """
    Mark content for future publication.

    Raises:
        InvalidScheduleError: scheduled_at is missing or not strictly in the
            future. Checked before anything is read or written.
        UnknownContentTypeError: content_type is not post, page or product.
        ContentNotFoundError: no such content in the organization.
        InvalidStatusTransitionError: content is already published, active
            or archived.
    """
    if scheduled_at is None:
        raise InvalidScheduleError("Scheduled date is required")
    scheduled_at = to_naive_utc(scheduled_at)
    if scheduled_at <= utcnow():
        raise InvalidScheduleError(scheduled_at=scheduled_at)

    content_type = resolve_content_type(content_type)
    entity = await _get_scoped_entity(db, content_type, content_id, organization_id)

    scheduled = _scheduled_status(content_type)
    if entity.status not in (_draft_status(content_type), scheduled):
        raise InvalidStatusTransitionError(entity.status.value, scheduled.value, content_type.value)

    entity.status = scheduled
    entity.scheduled_at = scheduled_at
    await db.commit()
    await db.refresh(entity)

    logger.info(
        "Scheduled %s:%s for %s (org=%s)", content_type.value, content_id, scheduled_at.isoformat(), organization_id
    )
    return entity


async def unschedule_content(
    db: AsyncSession,
    content_type: str | ContentType,
    content_id: int,
    organization_id: int,
):
    """Revert scheduled content to DRAFT. Unscheduling a draft is a no-op."""
    content_type = resolve_content_type(content_type)
    entity = await _get_scoped_entity(db, content_type, content_id, organization_id)

    draft = _draft_status(content_type)
    if entity.status == draft:
        return entity
    if entity.status != _scheduled_status(content_type):
        raise InvalidStatusTransitionError(entity.status.value, draft.value, content_type.value)

    entity.status = draft
    entity.scheduled_at = None
    await db.commit()
    await db.refresh(entity)

    logger.info("Unscheduled %s:%s (org=%s)", content_type.value, content_id, organization_id)
    return entity


async def get_scheduled_content_due(db: AsyncSession) -> dict:
    """
    Everything across all organizations whose scheduled time has passed.

    Returns {"posts": [...], "pages": [...], "products": [...], "total": n}.
    """
    now = utcnow()
    due = {}
    for content_type, model, _, _ in _PUBLISH_TARGETS:
        result = await db.execute(
            select(model)
            .where(model.status == _scheduled_status(content_type), model.scheduled_at <= now)
            .order_by(model.scheduled_at.asc())
        )
        due[f"{content_type.value}s"] = list(result.scalars().all())
    due["total"] = len(due["posts"]) + len(due["pages"]) + len(due["products"])
    return due


async def _bulk_publish(db: AsyncSession, content_type: ContentType, model, target_status, now: datetime) -> int:
    result = await db.execute(
        update(model)
        .where(model.status == _scheduled_status(content_type), model.scheduled_at <= now)
        .values(status=target_status, published_at=now, scheduled_at=None, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount or 0


async def publish_scheduled_content(db: AsyncSession) -> PublishResult:
    """
    Publish posts and pages and activate products whose time has come.

    One failing type never blocks the others; its error is recorded in
    `PublishResult.errors` and the other counts are still reported.
    """
    now = utcnow()
    results = PublishResult()

    for content_type, model, target_status, failure_prefix in _PUBLISH_TARGETS:
        try:
            count = await _bulk_publish(db, content_type, model, target_status, now)
        except Exception as e:
            await db.rollback()
            logger.error("%s: %s", failure_prefix, e)
            results.errors.append(f"{failure_prefix}: {e}")
            continue
        setattr(results, f"{content_type.value}s", count)

    if results.total or results.errors:
        logger.info(
            "Scheduled publish run: posts=%d pages=%d products=%d errors=%d",
            results.posts,
            results.pages,
            results.products,
            len(results.errors),
        )
    return results


async def get_upcoming_scheduled(db: AsyncSession, organization_id: int, limit: int = 10) -> list[dict]:
    """
    Merged, soonest-first list of an organization's future scheduled items.

    Each type is over-fetched (`UPCOMING_OVERFETCH_FACTOR * limit` rows) before
    the merge so a type with many near items cannot starve the others out of
    the final slice.
    """
    if limit <= 0:
        return []

    now = utcnow()
    fetch = limit * UPCOMING_OVERFETCH_FACTOR
    upcoming = []

    for content_type, model, _, _ in _PUBLISH_TARGETS:
        result = await db.execute(
            select(model)
            .where(
                model.organization_id == organization_id,
                model.status == _scheduled_status(content_type),
                model.scheduled_at > now,
            )
            .order_by(model.scheduled_at.asc())
            .limit(fetch)
        )
        for entity in result.scalars().all():
            item = {
                "id": entity.id,
                "type": content_type.value,
                "title": entity.title,
                "slug": entity.slug,
                "scheduled_at": entity.scheduled_at,
            }
            if content_type == ContentType.POST and entity.author is not None:
                item["author"] = {"id": entity.author.id, "name": entity.author.name, "email": entity.author.email}
            upcoming.append(item)

    upcoming.sort(key=lambda item: item["scheduled_at"])
    return upcoming[:limit]
