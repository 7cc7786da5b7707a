"""Tests for image source normalization."""

from __future__ import annotations

import asyncio
import base64
import io
from pathlib import Path
from typing import Any

import httpx
import pytest  # type: ignore[import-not-found]
from PIL import Image

from visuals_mcp.config import ServerConfig
from visuals_mcp.errors import ImageSourceError
from visuals_mcp.images import ImageSourceResolver, probe_dimensions, to_data_uri


def _png_bytes(width: int = 3, height: int = 2) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), "red").save(buf, format="PNG")
    return buf.getvalue()


def _write_png(tmp_path: Path, name: str = "pixel.png") -> Path:
    path = tmp_path / name
    path.write_bytes(_png_bytes())
    return path


def _resolve(resolver: ImageSourceResolver, image: dict[str, Any]) -> dict[str, Any]:
    return asyncio.run(resolver.resolve(image))


def _remote_resolver(handler: Any, **config: Any) -> ImageSourceResolver:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ImageSourceResolver(
        ServerConfig(inline_remote_images=True, **config), http_client=client
    )


class TestHelpers:
    def test_to_data_uri(self) -> None:
        assert to_data_uri(b"abc", "image/gif") == "data:image/gif;base64,YWJj"

    def test_probe_dimensions(self) -> None:
        assert probe_dimensions(_png_bytes(5, 7)) == (5, 7)

    def test_probe_dimensions_unreadable(self) -> None:
        assert probe_dimensions(b"not an image") is None


class TestLocalFiles:
    def test_path_inlined(self, tmp_path: Path) -> None:
        path = _write_png(tmp_path)
        result = _resolve(ImageSourceResolver(), {"src": str(path), "title": "Pixel"})
        assert result["src"].startswith("data:image/png;base64,")
        assert base64.b64decode(result["src"].split(",", 1)[1]) == path.read_bytes()
        assert result["filename"] == "pixel.png"
        assert result["sizeBytes"] == path.stat().st_size
        assert (result["width"], result["height"]) == (3, 2)
        assert result["title"] == "Pixel"

    def test_file_uri(self, tmp_path: Path) -> None:
        path = _write_png(tmp_path)
        result = _resolve(ImageSourceResolver(), {"src": path.as_uri()})
        assert result["src"].startswith("data:image/png;base64,")

    def test_explicit_fields_kept(self, tmp_path: Path) -> None:
        path = _write_png(tmp_path)
        image = {"src": str(path), "filename": "shown.png", "width": 300, "height": 200}
        result = _resolve(ImageSourceResolver(), image)
        assert result["filename"] == "shown.png"
        assert (result["width"], result["height"]) == (300, 200)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImageSourceError, match="Image file not found"):
            _resolve(ImageSourceResolver(), {"src": str(tmp_path / "nope.png")})

    def test_not_an_image(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(ImageSourceError, match="Not an image file"):
            _resolve(ImageSourceResolver(), {"src": str(path)})

    def test_too_large(self, tmp_path: Path) -> None:
        path = _write_png(tmp_path)
        resolver = ImageSourceResolver(ServerConfig(max_image_bytes=10))
        with pytest.raises(ImageSourceError, match="too large"):
            _resolve(resolver, {"src": str(path)})

    def test_unsupported_scheme(self) -> None:
        with pytest.raises(ImageSourceError, match="Unsupported image source scheme: ftp"):
            _resolve(ImageSourceResolver(), {"src": "ftp://example.com/a.png"})


class TestPassthrough:
    def test_data_uri(self) -> None:
        image = {"src": "data:image/png;base64,AAAA"}
        assert _resolve(ImageSourceResolver(), image) == image

    def test_remote_url_not_fetched_by_default(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("should not fetch")

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        resolver = ImageSourceResolver(ServerConfig(), http_client=client)
        image = {"src": "https://example.com/a.png"}
        assert _resolve(resolver, image) == image


class TestRemoteInlining:
    def test_inlines_remote_image(self) -> None:
        payload = _png_bytes()

        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://example.com/logo"
            return httpx.Response(
                200, content=payload, headers={"content-type": "image/png; charset=binary"}
            )

        result = _resolve(_remote_resolver(handler), {"src": "https://example.com/logo"})
        assert result["src"] == to_data_uri(payload, "image/png")
        assert result["sizeBytes"] == len(payload)

    def test_mime_from_extension(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, content=b"GIF89a", headers={"content-type": "application/octet-stream"}
            )

        result = _resolve(_remote_resolver(handler), {"src": "https://example.com/a.gif"})
        assert result["src"].startswith("data:image/gif;base64,")

    def test_http_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="missing")

        with pytest.raises(ImageSourceError, match="404"):
            _resolve(_remote_resolver(handler), {"src": "https://example.com/a.png"})

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ImageSourceError, match="Cannot fetch image"):
            _resolve(_remote_resolver(handler), {"src": "https://example.com/a.png"})

    def test_not_an_image_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html></html>", headers={"content-type": "text/html"})

        with pytest.raises(ImageSourceError, match="did not return an image"):
            _resolve(_remote_resolver(handler), {"src": "https://example.com/page"})

    def test_remote_too_large(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x" * 64, headers={"content-type": "image/png"})

        resolver = _remote_resolver(handler, max_image_bytes=16)
        with pytest.raises(ImageSourceError, match="too large"):
            _resolve(resolver, {"src": "https://example.com/a.png"})
