from __future__ import annotations

from typing import AbstractSet

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from relay.services import read_payload
from relay.services.classifier import SVG_ROUTE_KINDS, TEX_ROUTE_KINDS, TEXT_ROUTE_KINDS
from relay.types import (
    ContentKind,
    ExecutionMode,
    GeoResponse,
    InboundPayload,
    JsonMessageRequest,
    RateDecision,
    RateLimited,
)


async def enforce_rate_limit(request: Request) -> RateDecision:
    """Admission control. Runs before the body is read or anything is sent."""
    state = request.app.state
    decision = await state.rate_limiter.check(state.settings.rate_limit_key)
    if not decision.allowed:
        raise RateLimited(f"Rate limit exceeded for key {decision.key!r}")
    return decision


router = APIRouter(prefix="", tags=["relay"], dependencies=[Depends(enforce_rate_limit)])


async def _dispatch(request: Request, route: str, payload: InboundPayload) -> PlainTextResponse:
    """Hand a classified payload to the pipeline in the configured mode.

    Geo context is resolved here so the background task only ever sees
    immutable values captured from the request.
    """
    state = request.app.state
    geo = state.geo_lookup.lookup(request.headers)
    pipeline = state.pipeline

    if state.settings.mode == ExecutionMode.SYNC:
        await pipeline.run_sync(route, payload, geo)
    else:
        state.scheduler.spawn(pipeline.run_detached(route, payload, geo), name=f"relay {route}")
    return PlainTextResponse("ok")


async def _relay(request: Request, accepted: AbstractSet[ContentKind]) -> PlainTextResponse:
    route = request.url.path
    payload = await read_payload(request, accepted)
    return await _dispatch(request, route, payload)


@router.post("/text", response_class=PlainTextResponse)
async def relay_text(request: Request) -> PlainTextResponse:
    """Relay `text/plain` bodies or `multipart/form-data` fields as a text message."""
    return await _relay(request, TEXT_ROUTE_KINDS)


@router.post("/svg", response_class=PlainTextResponse)
async def relay_svg(request: Request) -> PlainTextResponse:
    """Relay an `image/svg+xml` body as an attachment."""
    return await _relay(request, SVG_ROUTE_KINDS)


@router.post("/tex-to-png", response_class=PlainTextResponse)
async def relay_tex(request: Request) -> PlainTextResponse:
    """Render LaTeX source to PNG and relay the image.

    Accepts `application/x-tex` bodies or a multipart upload with a
    `.tex`-named file field.
    """
    return await _relay(request, TEX_ROUTE_KINDS)


@router.post("/", response_class=PlainTextResponse)
async def relay_json_message(request: Request) -> PlainTextResponse:
    """Relay `{"message": ...}` through the text path.

    The body is parsed in the handler, after the router's admission check.
    """
    raw = (await request.body()).decode("utf-8", errors="replace")
    try:
        body = JsonMessageRequest.model_validate_json(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from None
    payload = InboundPayload(
        kind=ContentKind.TEXT,
        content_type=request.headers.get("content-type", ""),
        body=body.message.encode("utf-8"),
    )
    return await _dispatch(request, "/", payload)


@router.get("/")
async def echo_geolocation(request: Request) -> GeoResponse:
    """Return the caller's location as seen by the edge."""
    geo = request.app.state.geo_lookup.lookup(request.headers)
    return GeoResponse(country=geo.country, region=geo.region, city=geo.city)
