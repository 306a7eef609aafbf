"""FastAPI wrapper for the query and aggregation engines."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, FastAPI, Path, Request
from fastapi.responses import JSONResponse

from quake_intel import __version__
from quake_intel.aggregation import AggregationEngine
from quake_intel.catalog import OPERATIONS, get_operation
from quake_intel.config import QuakeIntelConfig
from quake_intel.errors import QuakeIntelError, UpstreamError
from quake_intel.exporters import to_jsonable
from quake_intel.fetchers.usgs import FeedClient
from quake_intel.params import (
    CompareParams,
    NearbyParams,
    RegionalParams,
    ReportParams,
    SearchParams,
    TierParams,
    TopParams,
)
from quake_intel.query import QueryEngine

logger = logging.getLogger(__name__)

PRICE_HEADER = "X-Operation-Price-USD"

router = APIRouter()


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Store startup state for the /health endpoint."""
    application.state.start_time = datetime.now(tz=timezone.utc)
    application.state.request_count = 0
    yield


def _respond(request: Request, operation: str, result: Any) -> JSONResponse:
    request.app.state.request_count = getattr(request.app.state, "request_count", 0) + 1
    return JSONResponse(
        content=to_jsonable(result),
        headers={PRICE_HEADER: str(get_operation(operation).price_usd)},
    )


def _queries(request: Request) -> QueryEngine:
    return request.app.state.queries


def _aggregations(request: Request) -> AggregationEngine:
    return request.app.state.aggregations


async def _handle_quake_intel_error(request: Request, exc: QuakeIntelError) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.warning("Upstream failure on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@router.get("/health")
def health(request: Request) -> dict[str, Any]:
    """Server health check with uptime, version, and request count."""
    state = request.app.state
    now = datetime.now(tz=timezone.utc)
    start = getattr(state, "start_time", now)
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round((now - start).total_seconds(), 1),
        "request_count": getattr(state, "request_count", 0),
    }


@router.get("/operations")
def operations() -> list[dict[str, Any]]:
    return [asdict(op) for op in OPERATIONS]


@router.get("/overview")
def overview(request: Request) -> JSONResponse:
    return _respond(request, "overview", _queries(request).overview())


@router.get("/lookup/{event_id}")
def lookup(
    request: Request,
    event_id: Annotated[str, Path(min_length=1, description="USGS event id.")],
) -> JSONResponse:
    return _respond(request, "lookup", _queries(request).lookup(event_id))


@router.post("/search")
def search(request: Request, params: SearchParams) -> JSONResponse:
    return _respond(request, "search", _queries(request).search(**params.model_dump()))


@router.post("/nearby")
def nearby(request: Request, params: NearbyParams) -> JSONResponse:
    return _respond(request, "nearby", _queries(request).nearby(**params.model_dump()))


@router.post("/top")
def top(request: Request, params: TopParams) -> JSONResponse:
    return _respond(request, "top", _queries(request).top(**params.model_dump()))


@router.post("/magnitude")
def magnitude(request: Request, params: TierParams) -> JSONResponse:
    result = _queries(request).by_magnitude_tier(**params.model_dump())
    return _respond(request, "magnitude", result)


@router.post("/compare")
def compare(request: Request, params: CompareParams) -> JSONResponse:
    result = _aggregations(request).compare(**params.model_dump())
    return _respond(request, "compare", result)


@router.post("/regional")
def regional(request: Request, params: RegionalParams) -> JSONResponse:
    result = _aggregations(request).regional_report(**params.model_dump())
    return _respond(request, "regional", result)


@router.post("/report")
def report(request: Request, params: ReportParams) -> JSONResponse:
    result = _aggregations(request).location_report(**params.model_dump())
    return _respond(request, "report", result)


def create_app(
    config: QuakeIntelConfig | None = None,
    feed_client: FeedClient | None = None,
) -> FastAPI:
    """Build the application around one shared feed client."""
    config = config or QuakeIntelConfig()
    client = feed_client or FeedClient(config)

    application = FastAPI(
        title="Earthquake Intel API",
        description="Real-time earthquake intelligence from the USGS feeds.",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.queries = QueryEngine(client, max_workers=config.max_concurrency)
    application.state.aggregations = AggregationEngine(
        client, max_workers=config.max_concurrency,
    )
    application.add_exception_handler(QuakeIntelError, _handle_quake_intel_error)
    application.include_router(router)
    return application


app = create_app()
