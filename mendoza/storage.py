"""Object storage client for apartment images (Supabase Storage REST API)."""

import logging
from collections.abc import Sequence
from urllib.parse import quote, unquote, urlencode, urlsplit, urlunsplit

import httpx

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """An object-storage request failed."""


class StorageClient:
    """Thin async wrapper around the storage bucket endpoints.

    The ``httpx.AsyncClient`` is injected so the application owns its
    lifecycle (created in the lifespan, closed on shutdown) and tests can
    pass one backed by ``httpx.MockTransport``.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str, service_key: str, bucket: str) -> None:
        self._http = http
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self._headers = {"Authorization": f"Bearer {service_key}", "apikey": service_key} if service_key else {}

    def _object_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(path)}"

    async def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        *,
        cache_control: str = "3600",
        upsert: bool = False,
    ) -> str:
        """Store ``data`` at ``path`` inside the bucket and return the stored path."""
        headers = {
            **self._headers,
            "Content-Type": content_type,
            "Cache-Control": f"max-age={cache_control}",
            "x-upsert": "true" if upsert else "false",
        }
        try:
            response = await self._http.post(self._object_url(path), content=data, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to upload {path}: {exc}") from exc
        logger.debug("Uploaded %s (%d bytes)", path, len(data))
        return path

    def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    def path_from_public_url(self, url: str) -> str | None:
        """Return the in-bucket path of a public URL, or ``None`` for foreign URLs."""
        marker = f"/{self.bucket}/"
        path = urlsplit(url).path
        if marker not in path:
            return None
        return unquote(path.split(marker, 1)[1]) or None

    async def remove(self, paths: Sequence[str]) -> None:
        """Delete objects by in-bucket path."""
        if not paths:
            return
        try:
            response = await self._http.request(
                "DELETE",
                f"{self.base_url}/storage/v1/object/{self.bucket}",
                json={"prefixes": list(paths)},
                headers=self._headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StorageError(f"Failed to remove {len(paths)} object(s): {exc}") from exc


def get_optimized_image_url(
    image_url: str,
    width: int | None = None,
    height: int | None = None,
    quality: int = 80,
) -> str:
    """Ask the storage CDN for a resized rendition via query parameters.

    Any existing query string on ``image_url`` is replaced.
    """
    params: dict[str, int] = {}
    if width:
        params["width"] = width
    if height:
        params["height"] = height
    params["quality"] = quality
    parts = urlsplit(image_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))
