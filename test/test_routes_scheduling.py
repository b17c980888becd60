"""
Tests for the scheduling routes (/api/admin/scheduling).

Test classes:
    TestScheduleRoute       — POST
    TestUnscheduleRoute     — DELETE
    TestUpcomingRoute       — GET
"""

from datetime import timedelta

import pytest

from orgcms.models import ContentStatus
from orgcms.utils.timezone import isoformat_utc, utcnow
from utils.mock_utils import create_test_post, make_auth_headers

SCHEDULING_URL = "/api/admin/scheduling"


def future_iso(hours: int = 1) -> str:
    return isoformat_utc(utcnow() + timedelta(hours=hours))


class TestScheduleRoute:
    @pytest.mark.asyncio
    async def test_schedule_post(self, client, test_db, draft_post, editor_headers):
        scheduled_at = future_iso()

        response = await client.post(
            SCHEDULING_URL,
            json={"contentType": "post", "contentId": draft_post.id, "scheduledAt": scheduled_at},
            headers=editor_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["content"]["status"] == "SCHEDULED"
        assert data["content"]["scheduledAt"] == scheduled_at

        await test_db.refresh(draft_post)
        assert draft_post.status == ContentStatus.SCHEDULED

    @pytest.mark.asyncio
    async def test_past_date_is_rejected(self, client, test_db, draft_post, editor_headers):
        response = await client.post(
            SCHEDULING_URL,
            json={
                "contentType": "post",
                "contentId": draft_post.id,
                "scheduledAt": isoformat_utc(utcnow() - timedelta(minutes=1)),
            },
            headers=editor_headers,
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["error_code"] == "SCHEDULE_INVALID"
        assert error["message"] == "Scheduled date must be in the future"

        await test_db.refresh(draft_post)
        assert draft_post.status == ContentStatus.DRAFT

    @pytest.mark.asyncio
    async def test_author_cannot_publish(self, client, test_db, organization, author_user, author_headers):
        post = await create_test_post(test_db, organization.id, author_id=author_user.id)

        response = await client.post(
            SCHEDULING_URL,
            json={"contentType": "post", "contentId": post.id, "scheduledAt": future_iso()},
            headers=author_headers,
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Forbidden: Missing permission publish on posts"

    @pytest.mark.asyncio
    async def test_unknown_content_type(self, client, editor_headers):
        response = await client.post(
            SCHEDULING_URL,
            json={"contentType": "widget", "contentId": 1, "scheduledAt": future_iso()},
            headers=editor_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "CONTENT_TYPE_UNKNOWN"

    @pytest.mark.asyncio
    async def test_content_of_other_organization(self, client, draft_post, other_editor):
        response = await client.post(
            SCHEDULING_URL,
            json={"contentType": "post", "contentId": draft_post.id, "scheduledAt": future_iso()},
            headers=make_auth_headers(other_editor),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client, draft_post):
        response = await client.post(
            SCHEDULING_URL, json={"contentType": "post", "contentId": draft_post.id, "scheduledAt": future_iso()}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, editor_headers):
        response = await client.post(SCHEDULING_URL, json={"contentType": "post"}, headers=editor_headers)
        assert response.status_code == 422


class TestUnscheduleRoute:
    @pytest.mark.asyncio
    async def test_unschedule(self, client, test_db, organization, editor_headers):
        post = await create_test_post(
            test_db, organization.id, status=ContentStatus.SCHEDULED, scheduled_at=utcnow() + timedelta(hours=2)
        )

        response = await client.request(
            "DELETE", SCHEDULING_URL, json={"contentType": "post", "contentId": post.id}, headers=editor_headers
        )

        assert response.status_code == 200
        assert response.json()["content"]["status"] == "DRAFT"
        assert response.json()["content"]["scheduledAt"] is None

    @pytest.mark.asyncio
    async def test_unschedule_published_post(self, client, test_db, organization, editor_headers):
        post = await create_test_post(test_db, organization.id, status=ContentStatus.PUBLISHED)

        response = await client.request(
            "DELETE", SCHEDULING_URL, json={"contentType": "post", "contentId": post.id}, headers=editor_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "STATUS_TRANSITION_INVALID"


class TestUpcomingRoute:
    @pytest.mark.asyncio
    async def test_upcoming(self, client, test_db, organization, editor_user, editor_headers):
        await create_test_post(
            test_db,
            organization.id,
            title="Soon",
            status=ContentStatus.SCHEDULED,
            scheduled_at=utcnow() + timedelta(hours=1),
            author_id=editor_user.id,
        )

        response = await client.get(SCHEDULING_URL, headers=editor_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        item = data["scheduled"][0]
        assert item["type"] == "post"
        assert item["title"] == "Soon"
        assert item["author"]["email"] == editor_user.email
        assert item["scheduledAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_viewer_may_see_upcoming(self, client, viewer_headers):
        response = await client.get(SCHEDULING_URL, headers=viewer_headers)
        assert response.status_code == 200
        assert response.json() == {"scheduled": [], "count": 0}
