"""
Tests for the publish trigger endpoint (/api/cron/publish).

Test classes:
    TestTriggerAuthorization    — CRON_SECRET bearer check
    TestPublishEndpoint         — publishing through GET and POST
"""

from datetime import timedelta

import pytest

from orgcms.config import settings
from orgcms.models import ContentStatus, ProductStatus
from orgcms.routes.cron import is_authorized_trigger
from orgcms.utils.timezone import utcnow
from utils.mock_utils import create_test_page, create_test_post, create_test_product

CRON_URL = "/api/cron/publish"


@pytest.fixture
def cron_secret(monkeypatch):
    monkeypatch.setattr(settings, "cron_secret", "s3cret-value")
    return "s3cret-value"


class TestTriggerAuthorization:
    def test_no_secret_configured_allows_anyone(self):
        assert is_authorized_trigger(None, None)
        assert is_authorized_trigger("Bearer whatever", "")

    def test_exact_bearer_required(self):
        assert is_authorized_trigger("Bearer abc", "abc")
        assert not is_authorized_trigger("Bearer abd", "abc")
        assert not is_authorized_trigger("abc", "abc")
        assert not is_authorized_trigger(None, "abc")

    @pytest.mark.asyncio
    async def test_missing_header_is_rejected(self, client, cron_secret):
        response = await client.post(CRON_URL)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_wrong_secret_is_rejected(self, client, cron_secret):
        response = await client.get(CRON_URL, headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_rejected_call_publishes_nothing(self, client, cron_secret, test_db, organization):
        post = await create_test_post(
            test_db, organization.id, status=ContentStatus.SCHEDULED, scheduled_at=utcnow() - timedelta(minutes=1)
        )

        await client.post(CRON_URL, headers={"Authorization": "Bearer nope"})

        await test_db.refresh(post)
        assert post.status == ContentStatus.SCHEDULED


class TestPublishEndpoint:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "POST"])
    async def test_publishes_due_content(self, client, cron_secret, test_db, organization, method):
        past = utcnow() - timedelta(minutes=5)
        post = await create_test_post(test_db, organization.id, status=ContentStatus.SCHEDULED, scheduled_at=past)
        await create_test_page(test_db, organization.id, status=ContentStatus.SCHEDULED, scheduled_at=past)
        product = await create_test_product(test_db, organization.id, status=ProductStatus.SCHEDULED, scheduled_at=past)

        response = await client.request(method, CRON_URL, headers={"Authorization": f"Bearer {cron_secret}"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["published"] == {"posts": 1, "pages": 1, "products": 1}
        assert data["errors"] == []
        assert data["timestamp"].endswith("Z")

        await test_db.refresh(post)
        await test_db.refresh(product)
        assert post.status == ContentStatus.PUBLISHED
        assert product.status == ProductStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_repeated_calls_are_idempotent(self, client, cron_secret, test_db, organization):
        await create_test_post(
            test_db, organization.id, status=ContentStatus.SCHEDULED, scheduled_at=utcnow() - timedelta(minutes=5)
        )
        headers = {"Authorization": f"Bearer {cron_secret}"}

        first = await client.post(CRON_URL, headers=headers)
        second = await client.post(CRON_URL, headers=headers)

        assert first.json()["published"]["posts"] == 1
        assert second.json()["published"] == {"posts": 0, "pages": 0, "products": 0}

    @pytest.mark.asyncio
    async def test_open_when_no_secret_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "cron_secret", None)

        response = await client.get(CRON_URL)

        assert response.status_code == 200
        assert response.json()["published"] == {"posts": 0, "pages": 0, "products": 0}
