"""Client for the external image host that stores cover images.

The host speaks a Cloudinary-compatible signed REST API:

- ``POST {base_url}/image/upload`` takes a multipart ``file`` plus signed
  form parameters and answers with ``secure_url`` and ``public_id``.
- ``POST {base_url}/image/destroy`` takes a signed ``public_id`` and answers
  with ``{"result": "ok"}`` or ``{"result": "not found"}``.

Requests are issued on the request path with no retry and no idempotency
key; every failure is raised as :class:`MediaHostError`.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import httpx

from quillpost.core.settings import settings

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300


class MediaHostError(RuntimeError):
    """Raised when the image host rejects a request or cannot be reached."""


@dataclass(frozen=True)
class MediaHostConfig:
    """Connection details for the image host."""

    base_url: str | None
    api_key: str | None
    api_secret: str | None
    folder: str
    timeout_seconds: float

    @property
    def enabled(self) -> bool:
        return bool(self.base_url and self.api_key and self.api_secret)


@dataclass(frozen=True)
class UploadedImage:
    """Location of an image stored on the host."""

    url: str
    public_id: str


def load_media_config() -> MediaHostConfig:
    """Build configuration object from global settings."""
    return MediaHostConfig(
        base_url=settings.media_host_url,
        api_key=settings.media_host_api_key,
        api_secret=settings.media_host_api_secret,
        folder=settings.media_folder,
        timeout_seconds=float(settings.media_http_timeout_seconds),
    )


def sign_params(params: Mapping[str, Any], api_secret: str) -> str:
    """Return the request signature for ``params``.

    Parameters are sorted by name, joined as ``k=v`` pairs with ``&``, the
    API secret is appended and the result is SHA-1 hashed.
    """
    to_sign = "&".join(
        f"{key}={params[key]}" for key in sorted(params) if params[key] not in (None, "")
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


def public_id_from_url(url: str) -> str:
    """Derive the host's public id from a stored image URL.

    The public id is the folder plus file name without its extension, i.e.
    the last two path segments: ``.../upload/v17/blog-covers/abc.jpg`` gives
    ``blog-covers/abc``.
    """
    path = urlsplit(url).path
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        raise ValueError(f"Cannot derive a public id from {url!r}")
    tail = "/".join(segments[-2:])
    return tail.rsplit(".", 1)[0] if "." in segments[-1] else tail


class MediaHostClient:
    """Async HTTP wrapper around the image host."""

    def __init__(
        self,
        config: MediaHostConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_media_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    async def _ensure_client(self) -> httpx.AsyncClient:
        if not self.enabled:
            raise MediaHostError("Image host is not configured")

        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=(self.config.base_url or "").rstrip("/"),
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    def _signed(self, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "timestamp": int(time.time())}
        signature = sign_params(params, self.config.api_secret or "")
        return {**params, "api_key": self.config.api_key, "signature": signature}

    async def _post(self, path: str, *, data: dict[str, Any], files: Any = None) -> dict[str, Any]:
        client = await self._ensure_client()
        try:
            response = await client.post(path, data=data, files=files)
        except httpx.HTTPError as exc:
            logger.warning("Image host request %s failed: %s", path, exc)
            raise MediaHostError(f"Image host request failed: {exc}") from exc

        if not HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            logger.warning("Image host responded to %s with %s", path, response.status_code)
            raise MediaHostError(f"Image host responded with {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise MediaHostError("Image host returned a malformed response") from exc
        if not isinstance(body, dict):
            raise MediaHostError("Image host returned a malformed response")
        return body

    async def upload_image(
        self,
        content: bytes,
        *,
        filename: str,
        content_type: str,
        folder: str | None = None,
    ) -> UploadedImage:
        """Upload an image and return where the host stored it."""
        data = self._signed({"folder": folder or self.config.folder})
        body = await self._post(
            "/image/upload",
            data=data,
            files={"file": (filename, content, content_type)},
        )

        url = body.get("secure_url") or body.get("url")
        public_id = body.get("public_id")
        if not url or not public_id:
            raise MediaHostError("Image host upload response is missing the image location")
        logger.info("Uploaded image %s", public_id)
        return UploadedImage(url=str(url), public_id=str(public_id))

    async def delete_image(self, public_id: str) -> bool:
        """Delete an image by public id.

        Returns:
            True if the host removed the image, False if it was already gone.
        """
        body = await self._post("/image/destroy", data=self._signed({"public_id": public_id}))
        result = body.get("result")
        if result == "ok":
            logger.info("Deleted image %s", public_id)
            return True
        if result == "not found":
            logger.info("Image %s was already absent from the host", public_id)
            return False
        raise MediaHostError(f"Image host could not delete {public_id}: {result}")

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _MediaClientSingleton:
    """Singleton wrapper for MediaHostClient."""

    _instance: MediaHostClient | None = None

    @classmethod
    def get_instance(cls) -> MediaHostClient:
        if cls._instance is None:
            cls._instance = MediaHostClient()
        return cls._instance


def get_media_client() -> MediaHostClient:
    """Return a singleton media host client instance."""
    return _MediaClientSingleton.get_instance()
