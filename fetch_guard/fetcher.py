"""Reference fetcher: validates before connecting and before every redirect hop."""

import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx

from fetch_guard._errors import UnsafeUrlError, require_url_argument
from fetch_guard._resolution import Resolver
from fetch_guard.config import Settings, get_settings
from fetch_guard.validator import validate

logger = logging.getLogger(__name__)

REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})


@dataclass(frozen=True)
class FetchResult:
    url: str
    status_code: int
    headers: httpx.Headers
    content: bytes
    truncated: bool
    hops: tuple[str, ...]   # every URL requested, first to last

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def redirects(self) -> int:
        return len(self.hops) - 1


async def _read_capped(resp: httpx.Response, max_bytes: int) -> tuple[bytes, bool]:
    chunks: list[bytes] = []
    total = 0
    async for chunk in resp.aiter_bytes():
        chunks.append(chunk)
        total += len(chunk)
        if total > max_bytes:
            break
    data = b"".join(chunks)
    return data[:max_bytes], total > max_bytes


def _redirect_target(current: str, location: str) -> str:
    try:
        return urljoin(current, location.strip())
    except ValueError:
        # Let the validator reject it as an invalid URL.
        return location


class SafeFetcher:
    """GET a user-supplied URL without ever connecting to a blocked address.

    Redirects are followed by hand so each target goes through
    ``validate()`` first. A blocked hop raises UnsafeUrlError; transport
    failures propagate as httpx.HTTPError.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        resolver: Resolver | None = None,
        settings: Settings | None = None,
    ):
        self._client = client
        self._resolver = resolver
        self._settings = settings or get_settings()

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._settings.fetch_user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }

    async def fetch(self, url: str) -> FetchResult:
        if self._client is not None:
            return await self._fetch(self._client, url)
        async with httpx.AsyncClient(
            timeout=self._settings.fetch_timeout_seconds,
            follow_redirects=False,
        ) as client:
            return await self._fetch(client, url)

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> FetchResult:
        max_redirects = self._settings.fetch_max_redirects
        hops: list[str] = []
        current = require_url_argument(url).strip()
        last_request: httpx.Request | None = None

        for _ in range(max_redirects + 1):
            verdict = await validate(
                current,
                resolver=self._resolver,
                timeout=self._settings.dns_timeout_seconds,
            )
            if not verdict.safe:
                raise UnsafeUrlError(current, verdict)
            current = verdict.url.text
            hops.append(current)

            async with client.stream(
                "GET", current, headers=self._headers(), follow_redirects=False,
            ) as resp:
                last_request = resp.request
                location = resp.headers.get("location")
                if resp.status_code in REDIRECT_STATUS_CODES and location:
                    target = _redirect_target(current, location)
                    logger.info("redirect %d %s -> %s", resp.status_code, current, target)
                    current = target
                    continue

                content, truncated = await _read_capped(resp, self._settings.fetch_max_bytes)
                return FetchResult(
                    url=current,
                    status_code=resp.status_code,
                    headers=resp.headers,
                    content=content,
                    truncated=truncated,
                    hops=tuple(hops),
                )

        raise httpx.TooManyRedirects(
            f"Exceeded {max_redirects} redirects fetching {url}", request=last_request,
        )
