"""
Post endpoint tests — CRUD, ownership checks, listings and paging over HTTP.

Every post route sits behind bearer authentication, so each test signs up
its own accounts through the ``signup`` fixture.
"""
import pytest
from httpx import AsyncClient

from board.config import settings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_post(client: AsyncClient, headers: dict, title: str = "Title", **extra) -> dict:
    payload = {"title": title, "content": extra.pop("content", "Content"), **extra}
    resp = await client.post("/api/v1/posts", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_posts_require_token(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/posts")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"
    body = resp.json()
    assert set(body) == {"timestamp", "message", "details"}
    assert body["details"] == "uri=/api/v1/posts"


@pytest.mark.asyncio
async def test_posts_reject_garbage_token(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/v1/posts/all", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_post(async_client: AsyncClient, signup):
    account_id, headers = await signup("writer")

    post = await _create_post(async_client, headers, "T", content="C", is_anonymous=False)
    assert post["title"] == "T"
    assert post["content"] == "C"
    assert post["is_anonymous"] is False
    assert post["account_id"] == account_id
    assert post["nickname"] == "writer"
    assert post["like_count"] == 0
    assert "id" in post
    assert "created_at" in post


@pytest.mark.asyncio
async def test_create_post_defaults_to_anonymous(async_client: AsyncClient, signup):
    _, headers = await signup("shy")

    post = await _create_post(async_client, headers)
    assert post["is_anonymous"] is True
    assert post["nickname"] is None


@pytest.mark.asyncio
async def test_create_post_validation(async_client: AsyncClient, signup):
    _, headers = await signup("sloppy")

    resp = await async_client.post("/api/v1/posts", json={"title": "", "content": "C"}, headers=headers)
    assert resp.status_code == 422

    resp = await async_client.post("/api/v1/posts", json={"title": "No content"}, headers=headers)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_post(async_client: AsyncClient, signup):
    _, headers = await signup("reader")
    created = await _create_post(async_client, headers, "Readable")

    resp = await async_client.get(f"/api/v1/posts/{created['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "Readable"


@pytest.mark.asyncio
async def test_get_missing_post(async_client: AsyncClient, signup):
    _, headers = await signup("reader")

    resp = await async_client.get("/api/v1/posts/99999", headers=headers)
    assert resp.status_code == 404
    body = resp.json()
    assert "99999" in body["message"]
    assert body["details"] == "uri=/api/v1/posts/99999"


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_post_by_owner(async_client: AsyncClient, signup):
    _, headers = await signup("owner")
    created = await _create_post(async_client, headers, "Before")

    resp = await async_client.put(
        f"/api/v1/posts/{created['id']}",
        json={"title": "After", "content": "Edited", "is_anonymous": False},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "After"
    assert body["content"] == "Edited"
    assert body["nickname"] == "owner"


@pytest.mark.asyncio
async def test_update_post_by_other_account(async_client: AsyncClient, signup):
    _, owner_headers = await signup("owner")
    _, other_headers = await signup("other")
    created = await _create_post(async_client, owner_headers, "Mine")

    resp = await async_client.put(
        f"/api/v1/posts/{created['id']}",
        json={"title": "Yours now", "content": "Edited"},
        headers=other_headers,
    )
    assert resp.status_code == 403

    detail = await async_client.get(f"/api/v1/posts/{created['id']}", headers=owner_headers)
    assert detail.json()["title"] == "Mine"


@pytest.mark.asyncio
async def test_delete_post(async_client: AsyncClient, signup):
    _, owner_headers = await signup("owner")
    _, other_headers = await signup("other")
    created = await _create_post(async_client, owner_headers)
    url = f"/api/v1/posts/{created['id']}"

    assert (await async_client.delete(url, headers=other_headers)).status_code == 403
    assert (await async_client.get(url, headers=owner_headers)).status_code == 200

    assert (await async_client.delete(url, headers=owner_headers)).status_code == 204
    assert (await async_client.get(url, headers=owner_headers)).status_code == 404
    assert (await async_client.delete(url, headers=owner_headers)).status_code == 404


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_my_posts(async_client: AsyncClient, signup):
    me, my_headers = await signup("me")
    _, other_headers = await signup("someone")
    first = await _create_post(async_client, my_headers, "first")
    await _create_post(async_client, other_headers, "not mine")
    second = await _create_post(async_client, my_headers, "second")

    resp = await async_client.get("/api/v1/posts/mine", headers=my_headers)
    assert resp.status_code == 200
    posts = resp.json()
    assert [p["id"] for p in posts] == [second["id"], first["id"]]
    assert all(p["account_id"] == me for p in posts)


@pytest.mark.asyncio
async def test_list_all_posts(async_client: AsyncClient, signup):
    _, a_headers = await signup("alpha")
    _, b_headers = await signup("beta")
    await _create_post(async_client, a_headers, "from alpha")
    await _create_post(async_client, b_headers, "from beta")

    resp = await async_client.get("/api/v1/posts/all", headers=a_headers)
    assert resp.status_code == 200
    assert sorted(p["title"] for p in resp.json()) == ["from alpha", "from beta"]


@pytest.mark.asyncio
async def test_paged_listing(async_client: AsyncClient, signup):
    _, headers = await signup("pager")
    for i in range(5):
        await _create_post(async_client, headers, f"Post {i}")

    resp = await async_client.get("/api/v1/posts?page=0&size=2&order=createdAt", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["current_page"] == 0
    assert body["current_size"] == 2
    assert body["has_next_page"] is True
    assert [p["title"] for p in body["posts"]] == ["Post 4", "Post 3"]

    resp = await async_client.get("/api/v1/posts?page=2&size=2", headers=headers)
    body = resp.json()
    assert body["current_size"] == 1
    assert body["has_next_page"] is False


@pytest.mark.asyncio
async def test_paged_listing_defaults(async_client: AsyncClient, signup):
    _, headers = await signup("pager")
    await _create_post(async_client, headers)

    resp = await async_client.get("/api/v1/posts", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["current_page"] == 0
    assert body["current_size"] == 1
    assert body["has_next_page"] is False


@pytest.mark.asyncio
async def test_paged_listing_rejects_unknown_order(async_client: AsyncClient, signup):
    _, headers = await signup("pager")

    resp = await async_client.get("/api/v1/posts?order=views", headers=headers)
    assert resp.status_code == 400
    assert "views" in resp.json()["message"]


@pytest.mark.asyncio
async def test_paged_listing_parameter_bounds(async_client: AsyncClient, signup):
    _, headers = await signup("pager")

    assert (await async_client.get("/api/v1/posts?page=-1", headers=headers)).status_code == 422
    assert (await async_client.get("/api/v1/posts?size=0", headers=headers)).status_code == 422
    too_big = settings.MAX_PAGE_SIZE + 1
    assert (await async_client.get(f"/api/v1/posts?size={too_big}", headers=headers)).status_code == 422
    assert (
        await async_client.get(f"/api/v1/posts?size={settings.MAX_PAGE_SIZE}", headers=headers)
    ).status_code == 200


# ---------------------------------------------------------------------------
# OpenAPI
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_openapi_documents_errors_and_page_size_cap(async_client: AsyncClient):
    resp = await async_client.get("/openapi.json")
    assert resp.status_code == 200
    schema = resp.json()

    assert "ErrorResponse" in schema["components"]["schemas"]
    get_post = schema["paths"]["/api/v1/posts/{post_id}"]["get"]
    for status in ("401", "403", "404"):
        ref = get_post["responses"][status]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/ErrorResponse")

    list_params = schema["paths"]["/api/v1/posts"]["get"]["parameters"]
    size = next(p for p in list_params if p["name"] == "size")
    assert size["schema"]["maximum"] == settings.MAX_PAGE_SIZE
