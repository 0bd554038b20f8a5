"""Stremio addon API endpoints (manifest, stream, subtitles).

Every route is also served under a ``/{user_config}`` prefix: Stremio's
configurable addons put the user's settings into the first path segment,
either as URL-encoded JSON or as ``key=value|key=value`` pairs.
"""

from __future__ import annotations

import json
from typing import Any, cast
from urllib.parse import unquote

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from vegalink import __version__
from vegalink.domain.entities.streams import StremioContentType, StremioStreamRequest
from vegalink.domain.ports.provider import StreamProviderPort
from vegalink.infrastructure.config import AddonConfig
from vegalink.infrastructure.stremio import stream_to_stremio
from vegalink.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["stremio"])

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "*",
}

_LOGO = "https://raw.githubusercontent.com/vega-org/vega-app/main/assets/icon.png"


def _build_manifest(
    addon: AddonConfig,
    providers: list[StreamProviderPort],
) -> dict[str, Any]:
    """Build the Stremio addon manifest with one checkbox per provider."""
    return {
        "id": addon.addon_id,
        "version": __version__,
        "name": addon.addon_name,
        "description": (
            "Streams from hosting pages with size, quality and language detection."
        ),
        "types": ["movie", "series"],
        "resources": ["stream", "subtitles"],
        "idPrefixes": ["tt"],
        "catalogs": [],
        "logo": _LOGO,
        "background": _LOGO,
        "behaviorHints": {
            "configurable": True,
            "configurationRequired": False,
        },
        "config": [
            {
                "key": p.value,
                "type": "checkbox",
                "default": "true",
                "title": p.name,
            }
            for p in providers
        ],
    }


def _parse_stream_id(content_type: str, raw_id: str) -> StremioStreamRequest | None:
    """Parse Stremio stream ID into a StremioStreamRequest.

    Movies: "tt1234567"
    Series: "tt1234567:1:5" (season 1, episode 5)
    """
    if content_type not in ("movie", "series"):
        return None

    ct: StremioContentType = cast(StremioContentType, content_type)

    if not raw_id.startswith("tt"):
        return None

    parts = raw_id.split(":")
    imdb_id = parts[0]

    if ct == "series" and len(parts) == 3:
        try:
            season = int(parts[1])
            episode = int(parts[2])
        except ValueError:
            return None
        return StremioStreamRequest(
            imdb_id=imdb_id,
            content_type=ct,
            season=season,
            episode=episode,
        )

    return StremioStreamRequest(imdb_id=imdb_id, content_type=ct)


def _parse_user_config(raw: str | None) -> dict[str, Any]:
    """Decode the per-user config path segment.

    Accepts URL-encoded JSON (``{"vega":"false"}``) or Stremio's
    ``key=value|key=value`` form.  Unparsable input gives ``{}``.
    """
    if not raw:
        return {}
    text = unquote(raw).strip()
    if text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError:
            log.debug("stremio_user_config_invalid", raw=raw)
            return {}
        return data if isinstance(data, dict) else {}

    out: dict[str, Any] = {}
    for pair in text.split("|"):
        key, sep, value = pair.partition("=")
        if sep and key.strip():
            out[key.strip()] = value.strip()
    return out


async def _manifest(request: Request) -> JSONResponse:
    state = cast(AppState, request.app.state)
    manifest = _build_manifest(state.config.addon, state.providers.all())
    return JSONResponse(content=manifest, headers=_CORS_HEADERS)


async def _streams(
    request: Request,
    content_type: str,
    stream_id: str,
    user_config: str | None,
) -> JSONResponse:
    state = cast(AppState, request.app.state)

    parsed = _parse_stream_id(content_type, stream_id)
    if parsed is None:
        return JSONResponse(content={"streams": []}, headers=_CORS_HEADERS)

    log.info(
        "stremio_stream_request",
        imdb_id=parsed.imdb_id,
        content_type=parsed.content_type,
        season=parsed.season,
        episode=parsed.episode,
    )

    try:
        streams = await state.stream_listing_uc.execute(
            parsed, _parse_user_config(user_config)
        )
    except Exception:
        log.warning("stremio_stream_failed", imdb_id=parsed.imdb_id, exc_info=True)
        return JSONResponse(content={"streams": []}, headers=_CORS_HEADERS)

    log.info(
        "stremio_stream_response",
        imdb_id=parsed.imdb_id,
        streams_returned=len(streams),
    )
    return JSONResponse(
        content={"streams": [stream_to_stremio(s) for s in streams]},
        headers=_CORS_HEADERS,
    )


async def _subtitles(
    request: Request,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    state = cast(AppState, request.app.state)

    parsed = _parse_stream_id(content_type, stream_id)
    if parsed is None:
        return JSONResponse(content={"subtitles": []}, headers=_CORS_HEADERS)

    try:
        subtitles = await state.subtitle_listing_uc.execute(parsed)
    except Exception:
        log.warning("stremio_subtitles_failed", imdb_id=parsed.imdb_id, exc_info=True)
        subtitles = []

    return JSONResponse(content={"subtitles": subtitles}, headers=_CORS_HEADERS)


@router.get("/manifest.json")
async def stremio_manifest(request: Request) -> JSONResponse:
    """Serve the Stremio addon manifest."""
    return await _manifest(request)


@router.get("/{user_config}/manifest.json")
async def stremio_manifest_configured(request: Request, user_config: str) -> JSONResponse:
    """Serve the manifest for a configured install (config is not echoed)."""
    return await _manifest(request)


@router.get("/stream/{content_type}/{stream_id}.json")
async def stremio_stream(
    request: Request,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    """Resolve streams for a movie or episode with every provider enabled."""
    return await _streams(request, content_type, stream_id, None)


@router.get("/{user_config}/stream/{content_type}/{stream_id}.json")
async def stremio_stream_configured(
    request: Request,
    user_config: str,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    """Resolve streams honouring the user's provider toggles."""
    return await _streams(request, content_type, stream_id, user_config)


@router.get("/subtitles/{content_type}/{stream_id}.json")
async def stremio_subtitles(
    request: Request,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    """Serve external subtitles for a movie or episode."""
    return await _subtitles(request, content_type, stream_id)


@router.get("/{user_config}/subtitles/{content_type}/{stream_id}.json")
async def stremio_subtitles_configured(
    request: Request,
    user_config: str,
    content_type: str,
    stream_id: str,
) -> JSONResponse:
    return await _subtitles(request, content_type, stream_id)
