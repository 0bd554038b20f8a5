"""HTTP fetch capability shared by all host resolvers.

Wraps one ``httpx.AsyncClient`` with the configured default headers and
timeout, and races every request against an optional abort signal
(an ``asyncio.Event`` owned by the request being served).  Once the
signal is set, in-flight requests are cancelled and
``FetchAbortedError`` is raised so the calling resolver unwinds promptly.

Non-2xx responses are returned, not raised: each resolver decides what
a 404 or a 500 means for its host.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from vegalink.domain.exceptions import FetchAbortedError, FetchError
from vegalink.infrastructure.config.schema import HttpSettings

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FetchResponse:
    """Status, final URL and decoded body of a fetched page."""

    status: int
    body: str
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON; raises ``ValueError`` on malformed data."""
        return json.loads(self.body)


class HttpFetcher:
    """``fetch(url, headers, signal) -> FetchResponse`` over a shared client."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: HttpSettings | None = None,
    ) -> None:
        self._http = http_client
        self._settings = settings or HttpSettings()

    @property
    def settings(self) -> HttpSettings:
        return self._settings

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        signal: asyncio.Event | None = None,
    ) -> FetchResponse:
        """Fetch *url* with default headers merged under *headers*.

        Raises:
            FetchAbortedError: *signal* was set before or during the request.
            FetchError: transport-level failure (DNS, reset, timeout).
        """
        if signal is not None and signal.is_set():
            raise FetchAbortedError(url)

        request = self._send(
            method, url, headers=headers, params=params, json_body=json_body
        )
        if signal is None:
            return await request

        request_task = asyncio.ensure_future(request)
        abort_task = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait(
                {request_task, abort_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            abort_task.cancel()
            if not request_task.done():
                request_task.cancel()

        if request_task in done:
            return request_task.result()

        log.debug("fetch_aborted", url=url)
        raise FetchAbortedError(url)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None,
        params: dict[str, str] | None,
        json_body: Any,
    ) -> FetchResponse:
        merged = self._settings.default_headers()
        if headers:
            merged.update(headers)
        try:
            resp = await self._http.request(
                method,
                url,
                headers=merged,
                params=params,
                json=json_body,
                timeout=self._settings.timeout_seconds,
                follow_redirects=self._settings.follow_redirects,
            )
        except httpx.TimeoutException as exc:
            raise FetchError(f"timeout fetching {url}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"error fetching {url}: {exc}") from exc
        return FetchResponse(status=resp.status_code, body=resp.text, url=str(resp.url))
