"""Normalization of ``display_image`` sources into renderer-ready values.

The renderer runs in a sandboxed webview that cannot read the local
filesystem, so file paths are inlined as data URIs. Remote URLs pass through
unless inlining is enabled, in which case they are fetched with httpx.
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging
import mimetypes
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from .config import ServerConfig
from .errors import ImageSourceError

logger = logging.getLogger(__name__)


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode()}"


def probe_dimensions(data: bytes) -> tuple[int, int] | None:
    """Return (width, height) of an encoded image, or None if unreadable."""
    try:
        from PIL import Image, UnidentifiedImageError
    except ImportError:
        logger.warning("Pillow not installed. Skipping image size probe.")
        return None

    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.width, img.height
    except (UnidentifiedImageError, OSError):
        logger.debug("Could not read image dimensions", exc_info=True)
        return None


def _local_path(src: str) -> Path:
    if src.lower().startswith("file://"):
        return Path(url2pathname(urlparse(src).path))
    return Path(src).expanduser()


class ImageSourceResolver:
    """Turns an image ``src`` into something the image renderer can load."""

    def __init__(
        self,
        config: ServerConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            config: Server settings. Defaults are used if None.
            http_client: Client for remote fetches. Created lazily if None.
        """
        self.config = config or ServerConfig()
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.image_timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def resolve(self, image: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of validated image arguments with ``src`` normalized.

        Raises:
            ImageSourceError: If the source cannot be read or is not an image.
        """
        result = dict(image)
        src: str = image["src"]
        if src.startswith("data:"):
            return result

        scheme = urlparse(src).scheme.lower()
        if scheme in ("http", "https"):
            if not self.config.inline_remote_images:
                return result
            data, mime_type = await self._fetch(src)
            result["src"] = to_data_uri(data, mime_type)
            result.setdefault("sizeBytes", len(data))
            return result

        # Single-letter schemes are Windows drive letters.
        if scheme not in ("", "file") and len(scheme) > 1:
            raise ImageSourceError(f"Unsupported image source scheme: {scheme}")

        path = _local_path(src)
        data, mime_type = await asyncio.to_thread(self._read_file, path)
        result["src"] = to_data_uri(data, mime_type)
        result.setdefault("filename", path.name)
        result.setdefault("sizeBytes", len(data))
        if "width" not in result or "height" not in result:
            size = probe_dimensions(data)
            if size:
                result.setdefault("width", size[0])
                result.setdefault("height", size[1])
        logger.info(f"Inlined image file {path} ({len(data)} bytes)")
        return result

    def _read_file(self, path: Path) -> tuple[bytes, str]:
        if not path.is_file():
            raise ImageSourceError(f"Image file not found: {path}")
        mime_type = mimetypes.guess_type(path.name)[0]
        if not mime_type or not mime_type.startswith("image/"):
            raise ImageSourceError(f"Not an image file: {path}")
        size = path.stat().st_size
        if size > self.config.max_image_bytes:
            raise ImageSourceError(
                f"Image file too large: {path} is {size} bytes "
                f"(limit {self.config.max_image_bytes})"
            )
        return path.read_bytes(), mime_type

    async def _fetch(self, url: str) -> tuple[bytes, str]:
        client = await self._get_client()
        timeout = self.config.image_timeout
        try:
            response = await client.get(url, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ImageSourceError(
                f"Image fetch failed: {e.response.status_code} for {url}"
            ) from e
        except httpx.TimeoutException as e:
            raise ImageSourceError(f"Image fetch timed out after {timeout}s: {url}") from e
        except httpx.HTTPError as e:
            raise ImageSourceError(f"Cannot fetch image {url}: {e}") from e

        content_type = response.headers.get("content-type", "")
        mime_type = content_type.split(";")[0].strip().lower()
        if not mime_type.startswith("image/"):
            mime_type = mimetypes.guess_type(urlparse(url).path)[0] or ""
        if not mime_type.startswith("image/"):
            raise ImageSourceError(f"URL did not return an image: {url}")

        data = response.content
        if len(data) > self.config.max_image_bytes:
            raise ImageSourceError(
                f"Image too large: {url} is {len(data)} bytes "
                f"(limit {self.config.max_image_bytes})"
            )
        return data, mime_type
