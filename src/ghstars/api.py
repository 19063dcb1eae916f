"""HTTP surface for per-period repository counts."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from ghstars.cache import CacheGateway, FileStore
from ghstars.config import get_settings
from ghstars.errors import GhStarsError, InternalError, MethodError, ValidationError
from ghstars.fetcher import HttpxBatchFetcher
from ghstars.periods import UNKNOWN_FORMAT_ERROR
from ghstars.service import StarsService
from ghstars.shaper import parse_limit

logger = logging.getLogger(__name__)

# Every method is routed so that non-GET requests get a uniform 405 body.
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

router = APIRouter()


def get_stars_service(request: Request) -> StarsService:
    """Return the service attached to the running app."""
    try:
        return request.app.state.stars_service
    except AttributeError as exc:
        raise InternalError("StarsService is not configured") from exc


@router.api_route("/", methods=ROUTED_METHODS)
async def index(request: Request) -> Response:
    """Point callers at the accepted period formats."""
    if request.method != "GET":
        raise MethodError("Method not allowed")
    raise ValidationError(UNKNOWN_FORMAT_ERROR)


@router.api_route("/{identifier}", methods=ROUTED_METHODS)
async def period_counts(
    request: Request,
    identifier: str,
    limit: str | None = None,
    service: StarsService = Depends(get_stars_service),
) -> Response:
    """Return repository counts for a day, week or month."""
    if request.method != "GET":
        raise MethodError("Method not allowed")

    try:
        body = await service.get_counts(identifier, parse_limit(limit))
    except GhStarsError:
        raise
    except Exception as e:
        logger.exception("Error processing request for %s", identifier)
        raise InternalError(str(e)) from e

    return Response(content=body, media_type="application/json")


# Registered after the period route: a `path` parameter would drop a trailing
# newline from single-segment identifiers.
@router.api_route("/{path:path}", methods=ROUTED_METHODS)
async def unknown_path(request: Request, path: str) -> Response:
    """Point callers of multi-segment paths at the accepted formats."""
    if request.method != "GET":
        raise MethodError("Method not allowed")
    raise ValidationError(UNKNOWN_FORMAT_ERROR)


async def validation_error_handler(request: Request, exc: ValidationError) -> PlainTextResponse:
    """Answer invalid period identifiers with 400 and the format hint."""
    return PlainTextResponse(str(exc), status_code=400)


async def method_error_handler(request: Request, exc: MethodError) -> PlainTextResponse:
    """Answer non-GET requests with 405."""
    return PlainTextResponse("Method not allowed", status_code=405)


async def internal_error_handler(request: Request, exc: InternalError) -> PlainTextResponse:
    """Answer server-side faults with 500 and the error message."""
    logger.error("Internal error on %s: %s", request.url.path, exc)
    return PlainTextResponse(f"Internal Server Error: {exc}", status_code=500)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    if getattr(app.state, "stars_service", None) is not None:
        yield
        return

    settings = get_settings()
    store = FileStore(settings.cache_dir)
    async with HttpxBatchFetcher(settings.fetch_concurrency, settings.fetch_timeout) as fetcher:
        app.state.stars_service = StarsService(CacheGateway(store), fetcher, settings)
        logger.info("Serving counts with cache at %s", settings.cache_dir)
        yield


def create_app(service: StarsService | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service: Service to serve requests with. When omitted, one backed
            by the file store and the httpx batch fetcher is built from
            settings at startup.

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(title="ghstars", lifespan=_lifespan)
    if service is not None:
        app.state.stars_service = service

    app.include_router(router)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(MethodError, method_error_handler)
    app.add_exception_handler(InternalError, internal_error_handler)
    return app
