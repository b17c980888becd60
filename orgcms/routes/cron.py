"""
Publish trigger for external schedulers (cron jobs, platform schedulers).

GET|POST /api/cron/publish

When CRON_SECRET is configured the caller must send
`Authorization: Bearer <CRON_SECRET>`. Calls may be repeated or overlap;
the batch publisher is idempotent.
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.config import settings
from orgcms.database import get_db
from orgcms.middleware.rate_limit import limiter
from orgcms.schemas.scheduling import CronPublishResponse
from orgcms.services.scheduling_service import publish_scheduled_content
from orgcms.utils.timezone import isoformat_utc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cron"])


def is_authorized_trigger(authorization: str | None, secret: str | None) -> bool:
    """True when no secret is configured or the header carries exactly that secret."""
    if not secret:
        return True
    return hmac.compare_digest((authorization or "").encode(), f"Bearer {secret}".encode())


@router.api_route("/publish", methods=["GET", "POST"], response_model=CronPublishResponse)
@limiter.limit(settings.cron_rate_limit)
async def publish(request: Request, db: AsyncSession = Depends(get_db)):
    if not is_authorized_trigger(request.headers.get("authorization"), settings.cron_secret):
        logger.warning("Rejected publish trigger with invalid credentials")
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    results = await publish_scheduled_content(db)
    logger.info(f"Scheduled content published: {results.to_dict()}")

    return {
        "success": True,
        "published": {"posts": results.posts, "pages": results.pages, "products": results.products},
        "errors": results.errors,
        "timestamp": isoformat_utc(utcnow()),
    }
