"""
Tests for the revision history routes.

Test classes:
    TestListRevisions        — GET /api/admin/revisions
    TestGetRevision          — GET /api/admin/revisions/{id}[?compareWith]
    TestRestoreRoute         — POST /api/admin/revisions/{id}
"""

import pytest

from orgcms.services.content_service import PageService, PostService
from orgcms.services.revision_service import create_revision, list_revisions
from utils.mock_utils import make_auth_headers


async def post_with_history(db, organization_id, author_id=None):
    """Post titled "C" with revisions v1 ("A") and v2 ("B")"""
    service = PostService(db)
    post = await service.create({"title": "A", "content": {"text": "a"}}, organization_id, author_id)
    await service.update(post.id, {"title": "B", "content": {"text": "b"}}, organization_id)
    await service.update(post.id, {"title": "C", "content": {"text": "c"}}, organization_id)
    return post


class TestListRevisions:
    @pytest.mark.asyncio
    async def test_lists_newest_first(self, client, test_db, organization, editor_headers):
        post = await post_with_history(test_db, organization.id)

        response = await client.get(
            "/api/admin/revisions", params={"contentType": "post", "contentId": post.id}, headers=editor_headers
        )

        assert response.status_code == 200
        revisions = response.json()["revisions"]
        assert [r["version"] for r in revisions] == [2, 1]
        assert revisions[0]["title"] == "B"
        assert revisions[0]["contentType"] == "post"
        assert revisions[0]["metadata"]["slug"] == "a"
        assert revisions[0]["createdAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_limit(self, client, test_db, organization, editor_headers):
        post = await post_with_history(test_db, organization.id)

        response = await client.get(
            "/api/admin/revisions",
            params={"contentType": "post", "contentId": post.id, "limit": 1},
            headers=editor_headers,
        )

        assert [r["version"] for r in response.json()["revisions"]] == [2]

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client):
        response = await client.get("/api/admin/revisions", params={"contentType": "post", "contentId": 1})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_content_type(self, client, editor_headers):
        response = await client.get(
            "/api/admin/revisions", params={"contentType": "widget", "contentId": 1}, headers=editor_headers
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Unknown content type: widget"

    @pytest.mark.asyncio
    async def test_missing_query_parameters(self, client, editor_headers):
        response = await client.get("/api/admin/revisions", headers=editor_headers)
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_other_organization_sees_nothing(self, client, test_db, organization, other_editor):
        post = await post_with_history(test_db, organization.id)

        response = await client.get(
            "/api/admin/revisions",
            params={"contentType": "post", "contentId": post.id},
            headers=make_auth_headers(other_editor),
        )

        assert response.status_code == 200
        assert response.json()["revisions"] == []


class TestGetRevision:
    @pytest.mark.asyncio
    async def test_single_revision(self, client, test_db, organization, editor_headers):
        post = await post_with_history(test_db, organization.id)
        newest = (await list_revisions(test_db, "post", post.id, organization.id))[0]

        response = await client.get(f"/api/admin/revisions/{newest.id}", headers=editor_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["revision"]["version"] == 2
        assert "changes" not in data
        assert "compareRevision" not in data

    @pytest.mark.asyncio
    async def test_compare_with_older_version(self, client, test_db, organization, editor_headers):
        post = await post_with_history(test_db, organization.id)
        newest = (await list_revisions(test_db, "post", post.id, organization.id))[0]

        response = await client.get(
            f"/api/admin/revisions/{newest.id}", params={"compareWith": 1}, headers=editor_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["compareRevision"]["version"] == 1
        assert data["changes"][0] == {"field": "title", "oldValue": "A", "newValue": "B"}
        assert [change["field"] for change in data["changes"]] == ["title", "content"]
        assert data["metadataChanges"] == []

    @pytest.mark.asyncio
    async def test_compare_direction_follows_versions(self, client, test_db, organization, editor_headers):
        post = await post_with_history(test_db, organization.id)
        oldest = (await list_revisions(test_db, "post", post.id, organization.id))[-1]

        response = await client.get(
            f"/api/admin/revisions/{oldest.id}", params={"compareWith": 2}, headers=editor_headers
        )

        assert response.json()["changes"][0] == {"field": "title", "oldValue": "A", "newValue": "B"}

    @pytest.mark.asyncio
    async def test_compare_with_missing_version(self, client, test_db, organization, editor_headers):
        post = await post_with_history(test_db, organization.id)
        newest = (await list_revisions(test_db, "post", post.id, organization.id))[0]

        response = await client.get(
            f"/api/admin/revisions/{newest.id}", params={"compareWith": 42}, headers=editor_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_revision_of_other_organization_is_not_found(self, client, test_db, organization, other_editor):
        revision = await create_revision(
            test_db, content_type="post", content_id=1, title="Secret", organization_id=organization.id
        )

        response = await client.get(f"/api/admin/revisions/{revision.id}", headers=make_auth_headers(other_editor))

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_REVISION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_no_organization(self, client, orphan_user):
        response = await client.get("/api/admin/revisions/1", headers=make_auth_headers(orphan_user))
        assert response.status_code == 401


class TestRestoreRoute:
    @pytest.mark.asyncio
    async def test_restore(self, client, test_db, organization, editor_user, editor_headers):
        post = await post_with_history(test_db, organization.id)
        oldest = (await list_revisions(test_db, "post", post.id, organization.id))[-1]

        response = await client.post(f"/api/admin/revisions/{oldest.id}", headers=editor_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["content"]["title"] == "A"
        assert data["content"]["content"] == {"text": "a"}

        revisions = await list_revisions(test_db, "post", post.id, organization.id)
        assert revisions[0].version == 3
        assert revisions[0].metadata_["restoredFrom"] == 1
        assert revisions[0].author_id == editor_user.id

    @pytest.mark.asyncio
    async def test_author_cannot_restore_pages(self, client, test_db, organization, author_headers):
        service = PageService(test_db)
        page = await service.create({"title": "Terms"}, organization.id)
        await service.update(page.id, {"title": "Terms of Service"}, organization.id)
        (revision,) = await list_revisions(test_db, "page", page.id, organization.id)

        response = await client.post(f"/api/admin/revisions/{revision.id}", headers=author_headers)

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Forbidden: Missing permission edit on pages"

    @pytest.mark.asyncio
    async def test_author_cannot_restore_someone_elses_post(
        self, client, test_db, organization, editor_user, author_headers
    ):
        post = await post_with_history(test_db, organization.id, author_id=editor_user.id)
        oldest = (await list_revisions(test_db, "post", post.id, organization.id))[-1]

        update = await client.put(f"/api/admin/posts/{post.id}", json={"title": "Mine now"}, headers=author_headers)
        restore = await client.post(f"/api/admin/revisions/{oldest.id}", headers=author_headers)

        assert update.status_code == 403
        assert restore.status_code == 403
        assert restore.json()["error"]["message"] == "You can only edit your own content"
        await test_db.refresh(post)
        assert post.title == "C"
        assert len(await list_revisions(test_db, "post", post.id, organization.id)) == 2

    @pytest.mark.asyncio
    async def test_author_can_restore_own_post(self, client, test_db, organization, author_user, author_headers):
        post = await post_with_history(test_db, organization.id, author_id=author_user.id)
        oldest = (await list_revisions(test_db, "post", post.id, organization.id))[-1]

        response = await client.post(f"/api/admin/revisions/{oldest.id}", headers=author_headers)

        assert response.status_code == 200
        assert response.json()["content"]["title"] == "A"

    @pytest.mark.asyncio
    async def test_viewer_can_read_but_not_restore(self, client, test_db, organization, viewer_headers):
        post = await post_with_history(test_db, organization.id)
        newest = (await list_revisions(test_db, "post", post.id, organization.id))[0]

        read = await client.get(f"/api/admin/revisions/{newest.id}", headers=viewer_headers)
        restore = await client.post(f"/api/admin/revisions/{newest.id}", headers=viewer_headers)

        assert read.status_code == 200
        assert restore.status_code == 403

    @pytest.mark.asyncio
    async def test_restore_of_deleted_content(self, client, test_db, organization, editor_headers):
        revision = await create_revision(
            test_db, content_type="post", content_id=999, title="Gone", organization_id=organization.id
        )

        response = await client.post(f"/api/admin/revisions/{revision.id}", headers=editor_headers)

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_CONTENT_NOT_FOUND"
