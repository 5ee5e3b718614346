"""Async client for the Quillpost HTTP API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from quillpost.client.session import ClientSession, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000/api"

# (filename, content, content_type) as accepted by httpx multipart uploads
CoverFile = tuple[str, bytes, str]


class ApiClientError(Exception):
    """The API answered with a failure envelope or could not be reached."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class BlogApiClient:
    """Thin async wrapper over the REST endpoints.

    The session is passed in explicitly; login and registration populate it
    and, when a store is given, persist it.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session: ClientSession | None = None,
        store: SessionStore | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.session = session or (store.load() if store else ClientSession())
        self.store = store
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> BlogApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        if self.session.token:
            return {"Authorization": f"Bearer {self.session.token}"}
        return {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and unwrap the ``data`` member of the envelope.

        Raises:
            ApiClientError: On transport failures or when ``success`` is false.
        """
        try:
            response = await self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            raise ApiClientError(0, f"Could not reach the server: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise ApiClientError(response.status_code, response.reason_phrase or "Unexpected response")
        if response.is_error or not body.get("success", False):
            raise ApiClientError(response.status_code, str(body.get("message") or "Request failed"))
        return body.get("data")

    def _remember(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.session.token = payload["token"]
        self.session.user = dict(payload["user"])
        if self.store is not None:
            self.store.save(self.session)
        return payload["user"]

    # Authentication

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        payload = await self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        return self._remember(payload)

    async def login(self, email: str, password: str) -> dict[str, Any]:
        payload = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._remember(payload)

    def logout(self) -> None:
        """Drop the token locally; tokens are stateless so the server is not told."""
        self.session = ClientSession()
        if self.store is not None:
            self.store.clear()

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/auth/me")

    async def update_profile(self, **fields: Any) -> dict[str, Any]:
        """Update profile fields and merge the result into the session."""
        changes = {key: value for key, value in fields.items() if value is not None}
        profile = await self._request("PUT", "/auth/profile", json=changes)
        self.session.merge_user(profile)
        if self.store is not None:
            self.store.save(self.session)
        return profile

    # Posts

    async def list_posts(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        sort_by: str = "createdAt",
        order: str = "desc",
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"page": page, "limit": limit, "sortBy": sort_by, "order": order}
        if search:
            params["search"] = search
        return await self._request("GET", "/blogs", params=params)

    async def get_post(self, post_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/blogs/{post_id}")

    async def my_posts(
        self,
        *,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        return await self._request("GET", "/blogs/my-blogs", params=params)

    async def posts_by_author(self, user_id: int, *, page: int = 1, limit: int = 10) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/blogs/user/{user_id}",
            params={"page": page, "limit": limit},
        )

    async def create_post(
        self,
        title: str,
        content: str,
        *,
        cover: CoverFile | None = None,
        status: str = "published",
    ) -> dict[str, Any]:
        files = {"coverImage": cover} if cover else None
        return await self._request(
            "POST",
            "/blogs",
            data={"title": title, "content": content, "status": status},
            files=files,
        )

    async def update_post(
        self,
        post_id: int,
        *,
        title: str | None = None,
        content: str | None = None,
        cover: CoverFile | None = None,
        status: str | None = None,
    ) -> dict[str, Any]:
        form = {"title": title, "content": content, "status": status}
        files = {"coverImage": cover} if cover else None
        return await self._request(
            "PUT",
            f"/blogs/{post_id}",
            data={key: value for key, value in form.items() if value is not None},
            files=files,
        )

    async def publish(self, post_id: int) -> dict[str, Any]:
        return await self.update_post(post_id, status="published")

    async def unpublish(self, post_id: int) -> dict[str, Any]:
        return await self.update_post(post_id, status="draft")

    async def delete_post(self, post_id: int) -> None:
        await self._request("DELETE", f"/blogs/{post_id}")

    async def status_counts(self) -> dict[str, int]:
        """Count the caller's published and draft posts with concurrent queries."""
        published, drafts = await asyncio.gather(
            self.my_posts(status="published", limit=1),
            self.my_posts(status="draft", limit=1),
        )
        return {
            "published": published["pagination"]["total"],
            "draft": drafts["pagination"]["total"],
        }

    async def analytics(self, user_id: int | None = None) -> dict[str, Any]:
        """Return engagement totals for ``user_id``, defaulting to the signed-in user."""
        target = user_id if user_id is not None else self.session.user_id
        if target is None:
            raise ApiClientError(401, "Log in or pass a user id")
        return await self._request("GET", f"/blogs/user/{target}/analytics")

    # Engagement

    async def toggle_like(self, post_id: int) -> dict[str, Any]:
        return await self._request("POST", f"/blogs/{post_id}/like")

    async def like_status(self, post_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/blogs/{post_id}/like-status")

    async def list_comments(self, post_id: int) -> list[dict[str, Any]]:
        return await self._request("GET", f"/blogs/{post_id}/comments")

    async def add_comment(self, post_id: int, content: str) -> dict[str, Any]:
        return await self._request("POST", f"/blogs/{post_id}/comments", json={"content": content})

    async def update_comment(self, comment_id: int, content: str) -> dict[str, Any]:
        return await self._request(
            "PUT",
            f"/blogs/comments/{comment_id}",
            json={"content": content},
        )

    async def delete_comment(self, comment_id: int) -> None:
        await self._request("DELETE", f"/blogs/comments/{comment_id}")
