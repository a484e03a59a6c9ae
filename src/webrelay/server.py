"""
Proxy service — fetches pages for the host's sandboxed frame.

The document comes back JSON-encoded so the host can set it into the frame
instead of pointing the frame at the network.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from . import __version__
from .core import Fetcher, HttpFetcher
from .errors import InvalidInput
from .models import TargetURL
from .packager import ProxyPipeline, error_status, fetch_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=400)


def _pipeline(request: Request) -> ProxyPipeline:
    return request.app.state.pipeline


@router.post("/proxy")
async def proxy_page(request: Request):
    try:
        body = await request.json()
    except ValueError:
        return _bad_request("Request body must be JSON")

    if not isinstance(body, dict):
        return _bad_request("Request body must be a JSON object")

    raw_url = body.get("url")
    if not isinstance(raw_url, str) or not raw_url.strip():
        return _bad_request("Missing 'url'")

    try:
        url = TargetURL.parse(raw_url.strip())
    except InvalidInput as e:
        return _bad_request(str(e))

    method = str(body.get("method") or "GET").upper()
    if method not in ("GET", "POST"):
        return _bad_request(f"Unsupported method: {method}")

    form_data = body.get("formData")
    if form_data is not None and not isinstance(form_data, dict):
        return _bad_request("'formData' must be an object")
    if form_data is not None:
        form_data = {str(k): str(v) for k, v in form_data.items()}

    reply = await _pipeline(request).run(url, method=method, form_data=form_data)
    if reply.degraded:
        logger.info("Served %s without rewriting", reply.url)
    return JSONResponse(reply.payload(), status_code=reply.status_code)


@router.get("/raw")
async def raw_asset(request: Request, url: str = Query(..., description="Asset URL to pass through")):
    try:
        target = TargetURL.parse(url)
    except InvalidInput as e:
        return _bad_request(str(e))

    result = await _pipeline(request).fetcher.load(str(target))
    if not result.ok:
        error = fetch_error(result)
        return JSONResponse({"error": str(error), "kind": error.kind}, status_code=error_status(error))

    return Response(
        content=result.body,
        status_code=result.http_status,
        media_type=result.content_type or "application/octet-stream",
    )


@router.get("/healthz")
async def healthz():
    return {"status": "ok"}


def create_app(fetcher: Fetcher | None = None) -> FastAPI:
    """Build the proxy app around ``fetcher`` (a shared HttpFetcher by default)."""
    fetcher = fetcher or HttpFetcher()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        close = getattr(fetcher, "close", None)
        if close is not None:
            await close()

    app = FastAPI(title="web-relay", version=__version__, lifespan=lifespan)
    app.state.pipeline = ProxyPipeline(fetcher)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app
