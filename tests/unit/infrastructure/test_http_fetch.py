"""Tests for HttpFetcher (default headers, error mapping, abort signal)."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from vegalink.domain.exceptions import FetchAbortedError, FetchError
from vegalink.infrastructure.common.http_fetch import FetchResponse, HttpFetcher
from vegalink.infrastructure.config import HttpSettings

_URL = "https://host.example/page"


class TestFetchResponse:
    def test_ok_range(self) -> None:
        assert FetchResponse(204, "", _URL).ok
        assert not FetchResponse(404, "", _URL).ok

    def test_json(self) -> None:
        assert FetchResponse(200, '{"a": 1}', _URL).json() == {"a": 1}

    def test_json_malformed_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            FetchResponse(200, "<html>", _URL).json()


class TestHttpFetcher:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_sends_default_headers(self, fetcher: HttpFetcher) -> None:
        route = respx.get(_URL).respond(200, text="hello")

        resp = await fetcher.fetch(_URL, headers={"Referer": "https://ref.example/"})

        assert resp.status == 200
        assert resp.body == "hello"
        sent = route.calls.last.request.headers
        assert sent["User-Agent"] == fetcher.settings.user_agent
        assert sent["Referer"] == "https://ref.example/"
        assert "Accept-Language" in sent

    @respx.mock
    @pytest.mark.asyncio()
    async def test_non_2xx_is_returned(self, fetcher: HttpFetcher) -> None:
        respx.get(_URL).respond(503, text="busy")

        resp = await fetcher.fetch(_URL)

        assert resp.status == 503
        assert not resp.ok

    @respx.mock
    @pytest.mark.asyncio()
    async def test_post_json_body(self, fetcher: HttpFetcher) -> None:
        route = respx.post(_URL).respond(200, json={"ok": True})

        resp = await fetcher.fetch(_URL, method="POST", json_body={"x": 1})

        assert resp.json() == {"ok": True}
        assert json.loads(route.calls.last.request.content) == {"x": 1}

    @respx.mock
    @pytest.mark.asyncio()
    async def test_transport_error_maps_to_fetch_error(self, fetcher: HttpFetcher) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(FetchError):
            await fetcher.fetch(_URL)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_timeout_maps_to_fetch_error(self, fetcher: HttpFetcher) -> None:
        respx.get(_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(FetchError, match="timeout"):
            await fetcher.fetch(_URL)

    @pytest.mark.asyncio()
    async def test_already_set_signal_aborts_without_request(self) -> None:
        signal = asyncio.Event()
        signal.set()
        async with httpx.AsyncClient() as client:
            fetcher = HttpFetcher(client)
            with respx.mock(assert_all_called=False) as mock:
                route = mock.get(_URL).respond(200)
                with pytest.raises(FetchAbortedError):
                    await fetcher.fetch(_URL, signal=signal)
                assert not route.called

    @pytest.mark.asyncio()
    async def test_signal_set_mid_flight_aborts(self) -> None:
        signal = asyncio.Event()
        started = asyncio.Event()

        async def _slow(*args: object, **kwargs: object) -> httpx.Response:
            started.set()
            await asyncio.sleep(5)
            return httpx.Response(200)

        client = MagicMock(spec=httpx.AsyncClient)
        client.request = _slow
        fetcher = HttpFetcher(client, HttpSettings(timeout_seconds=10))

        task = asyncio.create_task(fetcher.fetch(_URL, signal=signal))
        await started.wait()
        signal.set()

        with pytest.raises(FetchAbortedError):
            await asyncio.wait_for(task, timeout=1)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_unset_signal_lets_request_complete(self, fetcher: HttpFetcher) -> None:
        respx.get(_URL).respond(200, text="done")

        resp = await fetcher.fetch(_URL, signal=asyncio.Event())

        assert resp.body == "done"
