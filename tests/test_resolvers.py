from pathlib import Path
from typing import Any

import pytest

from chatwright.core.types import FileSourceType
from chatwright.errors import ResolverError
from chatwright.resolvers import HttpUrlResolver, LocalFileResolver
from chatwright.resolvers import url as url_module
from chatwright.resolvers.url import normalize_url


class _Headers:
    def get_content_charset(self) -> str:
        return "utf-8"


class _Response:
    def __init__(self, body: bytes) -> None:
        self._body = body
        self.headers = _Headers()

    def read(self, size: int = -1) -> bytes:
        return self._body if size < 0 else self._body[:size]

    def __enter__(self) -> "_Response":
        return self

    def __exit__(self, *exc: object) -> None:
        return None


def test_normalize_url() -> None:
    assert normalize_url("https://a.com/x") == "https://a.com/x"
    assert normalize_url("example.com") == "https://example.com"
    assert normalize_url("ftp://a.com") is None
    assert normalize_url("  ") is None


@pytest.mark.asyncio
async def test_http_url_resolver_converts_html(monkeypatch: pytest.MonkeyPatch) -> None:
    requested: list[Any] = []

    def _urlopen(request: Any, timeout: float) -> _Response:
        requested.append(request)
        return _Response(b"<html><body><h1>Docs</h1><p>Install it.</p></body></html>")

    monkeypatch.setattr(url_module.urllib_request, "urlopen", _urlopen)

    text = await HttpUrlResolver().fetch("docs.example.com")

    assert "Docs" in text
    assert "Install it." in text
    assert requested[0].full_url == "https://docs.example.com"
    assert requested[0].get_header("User-agent") == url_module.USER_AGENT


@pytest.mark.asyncio
async def test_http_url_resolver_truncates_large_bodies(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        url_module.urllib_request,
        "urlopen",
        lambda request, timeout: _Response(b"<p>" + b"a" * 500 + b"</p>"),
    )

    text = await HttpUrlResolver(max_bytes=100).fetch("https://a.com")

    assert text.endswith("[truncated: response exceeded byte limit]")


@pytest.mark.asyncio
async def test_http_url_resolver_rejects_bad_scheme() -> None:
    with pytest.raises(ResolverError, match="invalid url"):
        await HttpUrlResolver().fetch("file:///etc/passwd")


@pytest.mark.asyncio
async def test_http_url_resolver_wraps_network_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _urlopen(request: Any, timeout: float) -> _Response:
        raise OSError("connection refused")

    monkeypatch.setattr(url_module.urllib_request, "urlopen", _urlopen)

    with pytest.raises(ResolverError, match="connection refused"):
        await HttpUrlResolver().fetch("https://a.com")


@pytest.mark.asyncio
async def test_local_file_resolver_reads_bucket_file(tmp_path: Path) -> None:
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "guide.txt").write_text("hello guide", encoding="utf-8")
    (tmp_path / "docs" / "blob.bin").write_bytes(b"\xff\xfe\x00")
    resolver = LocalFileResolver(tmp_path)

    assert await resolver.fetch("guide.txt", FileSourceType.LOCAL, "docs") == "hello guide"
    assert await resolver.fetch("blob.bin", FileSourceType.LOCAL, "docs") == b"\xff\xfe\x00"


@pytest.mark.asyncio
async def test_local_file_resolver_rejects_escape_and_missing(tmp_path: Path) -> None:
    resolver = LocalFileResolver(tmp_path / "root")

    with pytest.raises(ResolverError, match="outside storage root"):
        await resolver.fetch("../../secret.txt", FileSourceType.LOCAL, "docs")
    with pytest.raises(ResolverError, match="file not found"):
        await resolver.fetch("nope.txt", FileSourceType.LOCAL, "docs")
    with pytest.raises(ResolverError, match="unsupported file source"):
        await resolver.fetch("a.txt", FileSourceType.DB, "default")
