"""
Hoots Backend — Endpoint Tests
===============================

What:  End-to-end tests through the HTTP surface (routing, caller identity,
       status codes, error envelope).
How:   HTTPX AsyncClient over ASGITransport against a fresh app and schema.
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

ALICE = {"X-User-ID": "u1", "X-User-Name": "alice"}
BOB = {"X-User-ID": "u2", "X-User-Name": "bob"}

HOOT = {"title": "Hi", "text": "World", "category": "News"}


async def _create(client, headers=ALICE, **overrides):
    response = await client.post("/posts", json={**HOOT, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestPostEndpoints:

    @pytest.mark.asyncio
    async def test_create_post(self, test_client):
        response = await test_client.post("/posts", json=HOOT, headers=ALICE)

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Hi"
        assert body["text"] == "World"
        assert body["category"] == "News"
        assert body["author"] == {"id": "u1", "username": "alice"}
        assert body["comments"] == []
        assert "created_at" in body and "updated_at" in body

    @pytest.mark.asyncio
    async def test_client_supplied_author_is_ignored(self, test_client):
        body = await _create(test_client, author="u2", author_id="u2")

        assert body["author"]["id"] == "u1"

    @pytest.mark.asyncio
    async def test_invalid_category_is_400(self, test_client):
        response = await test_client.post(
            "/posts", json={**HOOT, "category": "Cooking"}, headers=ALICE,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "category"

    @pytest.mark.asyncio
    async def test_long_title_is_accepted(self, test_client):
        response = await test_client.post(
            "/posts", json={**HOOT, "title": "x" * 201}, headers=ALICE,
        )

        assert response.status_code == 201
        assert response.json()["title"] == "x" * 201

    @pytest.mark.asyncio
    async def test_missing_field_is_422(self, test_client):
        response = await test_client.post("/posts", json={"title": "Hi"}, headers=ALICE)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_identity_is_401(self, test_client):
        response = await test_client.post("/posts", json=HOOT)

        assert response.status_code == 401
        assert response.json()["error"] == "not_authenticated"

    @pytest.mark.asyncio
    async def test_list_contains_all_posts(self, test_client):
        first = await _create(test_client, title="first")
        second = await _create(test_client, headers=BOB, title="second")

        response = await test_client.get("/posts", headers=ALICE)

        assert response.status_code == 200
        posts = response.json()
        assert {p["id"] for p in posts} == {first["id"], second["id"]}
        authors = {p["title"]: p["author"]["username"] for p in posts}
        assert authors == {"first": "alice", "second": "bob"}

    @pytest.mark.asyncio
    async def test_get_unknown_post_is_404(self, test_client):
        response = await test_client.get(f"/posts/{uuid4()}", headers=ALICE)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_malformed_post_id_is_422(self, test_client):
        response = await test_client.get("/posts/not-a-uuid", headers=ALICE)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_author_can_update(self, test_client):
        post = await _create(test_client)

        response = await test_client.put(
            f"/posts/{post['id']}", json={"text": "Everyone"}, headers=ALICE,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["text"] == "Everyone"
        assert body["title"] == "Hi"
        assert body["author"]["id"] == "u1"

    @pytest.mark.asyncio
    async def test_other_user_update_is_403_and_unchanged(self, test_client):
        post = await _create(test_client)

        response = await test_client.put(
            f"/posts/{post['id']}", json={"title": "Hijacked"}, headers=BOB,
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        stored = (await test_client.get(f"/posts/{post['id']}", headers=ALICE)).json()
        assert stored["title"] == "Hi"

    @pytest.mark.asyncio
    async def test_other_user_delete_is_403(self, test_client):
        post = await _create(test_client)

        response = await test_client.delete(f"/posts/{post['id']}", headers=BOB)

        assert response.status_code == 403
        assert (await test_client.get(f"/posts/{post['id']}", headers=ALICE)).status_code == 200

    @pytest.mark.asyncio
    async def test_author_delete_removes_post_and_comments(self, test_client):
        post = await _create(test_client)
        await test_client.post(
            f"/posts/{post['id']}/comments", json={"text": "bye"}, headers=BOB,
        )

        response = await test_client.delete(f"/posts/{post['id']}", headers=ALICE)

        assert response.status_code == 200
        removed = response.json()
        assert removed["id"] == post["id"]
        assert [c["text"] for c in removed["comments"]] == ["bye"]
        assert (await test_client.get(f"/posts/{post['id']}", headers=ALICE)).status_code == 404


class TestCommentEndpoints:

    @pytest.mark.asyncio
    async def test_add_comment_is_appended_last(self, test_client):
        post = await _create(test_client)
        await test_client.post(
            f"/posts/{post['id']}/comments", json={"text": "first"}, headers=BOB,
        )

        response = await test_client.post(
            f"/posts/{post['id']}/comments", json={"text": "nice post"}, headers=ALICE,
        )

        assert response.status_code == 201
        comment = response.json()
        assert comment["text"] == "nice post"
        assert comment["author"] == {"id": "u1", "username": "alice"}

        stored = (await test_client.get(f"/posts/{post['id']}", headers=ALICE)).json()
        assert stored["comments"][-1]["id"] == comment["id"]
        assert [c["author"]["username"] for c in stored["comments"]] == ["bob", "alice"]

    @pytest.mark.asyncio
    async def test_comment_on_unknown_post_is_404(self, test_client):
        response = await test_client.post(
            f"/posts/{uuid4()}/comments", json={"text": "hello"}, headers=ALICE,
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_comment_is_400(self, test_client):
        post = await _create(test_client)

        response = await test_client.post(
            f"/posts/{post['id']}/comments", json={"text": ""}, headers=ALICE,
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_comment_author_edits_and_deletes(self, test_client):
        post = await _create(test_client)
        comment = (await test_client.post(
            f"/posts/{post['id']}/comments", json={"text": "typo"}, headers=BOB,
        )).json()
        url = f"/posts/{post['id']}/comments/{comment['id']}"

        edited = await test_client.put(url, json={"text": "fixed"}, headers=BOB)
        assert edited.status_code == 200
        assert edited.json()["text"] == "fixed"

        deleted = await test_client.delete(url, headers=BOB)
        assert deleted.status_code == 200
        assert deleted.json()["id"] == comment["id"]

        stored = (await test_client.get(f"/posts/{post['id']}", headers=ALICE)).json()
        assert stored["comments"] == []

    @pytest.mark.asyncio
    async def test_non_author_comment_changes_are_403(self, test_client):
        post = await _create(test_client)
        comment = (await test_client.post(
            f"/posts/{post['id']}/comments", json={"text": "mine"}, headers=BOB,
        )).json()
        url = f"/posts/{post['id']}/comments/{comment['id']}"

        assert (await test_client.put(url, json={"text": "theirs"}, headers=ALICE)).status_code == 403
        assert (await test_client.delete(url, headers=ALICE)).status_code == 403

        stored = (await test_client.get(f"/posts/{post['id']}", headers=ALICE)).json()
        assert [c["text"] for c in stored["comments"]] == ["mine"]

    @pytest.mark.asyncio
    async def test_delete_unknown_comment_is_404(self, test_client):
        post = await _create(test_client)

        response = await test_client.delete(
            f"/posts/{post['id']}/comments/{uuid4()}", headers=ALICE,
        )

        assert response.status_code == 404


class TestCallerIdentity:

    @pytest.mark.asyncio
    async def test_username_refresh_shows_on_existing_posts(self, test_client):
        post = await _create(test_client)

        renamed = {"X-User-ID": "u1", "X-User-Name": "alice.b"}
        stored = (await test_client.get(f"/posts/{post['id']}", headers=renamed)).json()

        assert stored["author"] == {"id": "u1", "username": "alice.b"}

    @pytest.mark.asyncio
    async def test_username_defaults_to_id(self, test_client):
        body = await _create(test_client, headers={"X-User-ID": "u3"})

        assert body["author"] == {"id": "u3", "username": "u3"}


class TestOperationalEndpoints:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/posts", headers={**ALICE, "X-Request-ID": "abc12345"})

        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_error_envelope_carries_request_id(self, test_client):
        response = await test_client.get(
            f"/posts/{uuid4()}", headers={**ALICE, "X-Request-ID": "req-404"},
        )

        assert response.json()["request_id"] == "req-404"

    @pytest.mark.asyncio
    async def test_unexpected_error_carries_request_id(self):
        from hoots.main import create_app

        app = create_app()

        async def explode():
            raise RuntimeError("boom")

        app.add_api_route("/explode", explode)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/explode", headers={"X-Request-ID": "req-500"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "req-500"
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "req-500"
        assert "boom" not in body["message"]
