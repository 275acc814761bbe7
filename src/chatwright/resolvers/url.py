"""URL directive resolver."""

from __future__ import annotations

import asyncio
from typing import cast
from urllib import error as urllib_error
from urllib import parse as urllib_parse
from urllib import request as urllib_request

import html2markdown
from loguru import logger

from chatwright.errors import ResolverError

REQUEST_TIMEOUT_SECONDS = 20
MAX_FETCH_BYTES = 1_000_000
USER_AGENT = "chatwright-url-resolver/1.0"
ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ALLOWED_SCHEMES = frozenset({"http", "https"})
TRUNCATION_NOTICE = "[truncated: response exceeded byte limit]"


def normalize_url(raw_url: str) -> str | None:
    """Return an http(s) URL, assuming https for bare hosts; `None` otherwise."""

    candidate = raw_url.strip()
    if not candidate:
        return None
    if "://" not in candidate and not candidate.startswith("//"):
        candidate = f"https://{candidate}"
    parsed = urllib_parse.urlparse(candidate)
    if parsed.scheme not in ALLOWED_SCHEMES or not parsed.netloc:
        return None
    return candidate


class HttpUrlResolver:
    """Fetch a page and hand back its body as markdown."""

    def __init__(
        self,
        *,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        max_bytes: int = MAX_FETCH_BYTES,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._max_bytes = max_bytes

    async def fetch(self, url: str) -> str:
        normalized = normalize_url(url)
        if normalized is None:
            raise ResolverError(f"invalid url: {url}")
        html, truncated = await asyncio.to_thread(self._download, normalized)
        markdown = cast(str, html2markdown.convert(html)).strip()
        if not markdown:
            raise ResolverError("empty response body")
        logger.debug("resolver.url.fetched url={} chars={} truncated={}", normalized, len(markdown), truncated)
        return f"{markdown}\n\n{TRUNCATION_NOTICE}" if truncated else markdown

    def _download(self, url: str) -> tuple[str, bool]:
        request = urllib_request.Request(  # noqa: S310 - scheme is checked by normalize_url.
            url,
            headers={"User-Agent": USER_AGENT, "Accept": ACCEPT_HEADER},
        )
        try:
            with urllib_request.urlopen(request, timeout=self._timeout_seconds) as response:  # noqa: S310
                body = response.read(self._max_bytes + 1)
                charset = response.headers.get_content_charset() or "utf-8"
        except urllib_error.HTTPError as exc:
            raise ResolverError(f"http {exc.code} for {url}") from exc
        except (urllib_error.URLError, OSError) as exc:
            raise ResolverError(f"fetch failed: {exc!s}") from exc
        truncated = len(body) > self._max_bytes
        return body[: self._max_bytes].decode(charset, errors="replace"), truncated
