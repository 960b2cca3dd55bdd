from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import Cfg, load_config
from .schemas import Envelope, EndpointIndex
from .service import PortfolioNotFound, PortfolioService
from .store import RecordStore, StoreError

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
log = logging.getLogger("portfolio")
if not log.handlers:
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    log.addHandler(h)
log.setLevel(logging.INFO)

ENDPOINTS = {
    "POST /api/portfolios": "Create a new portfolio",
    "GET /api/portfolios": "Get all portfolios",
    "DELETE /api/portfolios/:id": "Delete a portfolio by ID",
}


def _envelope(status_code: int, **fields) -> JSONResponse:
    env = Envelope(**fields)
    # only keys that were actually given; record fields may be null
    return JSONResponse(status_code=status_code, content=env.model_dump(include=env.model_fields_set))


def _server_error(exc: BaseException) -> JSONResponse:
    return _envelope(500, success=False, message="Internal server error", error=str(exc))


def get_service(request: Request) -> PortfolioService:
    return request.app.state.service


class BodyParseError(ValueError):
    pass


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _parse_body(raw: bytes) -> Dict[str, Any]:
    if not raw.strip():
        return {}
    payload = json.loads(raw, parse_constant=_reject_constant)
    if not isinstance(payload, dict):
        raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    return payload


async def json_body(request: Request) -> Dict[str, Any]:
    # only JSON bodies are read; any other content type counts as {}
    ctype = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if ctype != "application/json":
        return {}
    try:
        return _parse_body(await request.body())
    except ValueError as e:
        raise BodyParseError(str(e)) from e


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------
router = APIRouter()

@router.get("/")
def index():
    return EndpointIndex(message="Portfolio API Server", version=__version__,
                         endpoints=ENDPOINTS).model_dump()

@router.post("/api/portfolios")
def create_portfolio(payload: Dict[str, Any] = Depends(json_body),
                     svc: PortfolioService = Depends(get_service)):
    try:
        record = svc.create(payload)
    except Exception as e:
        log.exception("Error creating portfolio: %s", e)
        return _server_error(e)
    return _envelope(201, success=True, message="Portfolio created successfully", data=record)

@router.get("/api/portfolios")
def list_portfolios(svc: PortfolioService = Depends(get_service)):
    try:
        rows = svc.list_all()
    except Exception as e:
        log.exception("Error retrieving portfolios: %s", e)
        return _server_error(e)
    return _envelope(200, success=True, message="Portfolios retrieved successfully",
                     data=rows, count=len(rows))

@router.delete("/api/portfolios/{pid}")
def delete_portfolio(pid: str, svc: PortfolioService = Depends(get_service)):
    try:
        removed = svc.delete_by_id(pid)
    except PortfolioNotFound:
        return _envelope(404, success=False, message="Portfolio not found")
    except Exception as e:
        log.exception("Error deleting portfolio: %s", e)
        return _server_error(e)
    return _envelope(200, success=True, message="Portfolio deleted successfully", data=removed)


# ---- Unmatched routes and the last-resort 500
async def _endpoint_not_found(request: Request, exc: StarletteHTTPException):
    # unknown paths and known paths with another method both land here
    if exc.status_code in (404, 405):
        return _envelope(404, success=False, message="Endpoint not found")
    return _envelope(exc.status_code, success=False, message=str(exc.detail))

async def _bad_body(request: Request, exc: BodyParseError):
    log.error("Error parsing request body on %s %s: %s", request.method, request.url.path, exc)
    return _server_error(exc)

async def _unhandled(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return _server_error(exc)


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
def create_app(cfg: Optional[Cfg] = None) -> FastAPI:
    cfg = cfg or load_config()
    log.setLevel(cfg.log_level)
    store = RecordStore(cfg.data_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.initialize()
        yield

    app = FastAPI(title="Portfolio API Server", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins, allow_methods=["*"], allow_headers=["*"],
    )
    app.state.cfg = cfg
    app.state.store = store
    app.state.service = PortfolioService(store)
    app.include_router(router)
    app.add_exception_handler(StarletteHTTPException, _endpoint_not_found)
    app.add_exception_handler(BodyParseError, _bad_body)
    app.add_exception_handler(Exception, _unhandled)
    return app


app = create_app()


def run(cfg: Optional[Cfg] = None) -> None:
    import uvicorn

    cfg = cfg or load_config()
    application = create_app(cfg)
    store: RecordStore = application.state.store
    try:
        store.initialize()
    except StoreError as e:
        log.error("Failed to start server: %s", e)
        sys.exit(1)

    log.info("Server is running on http://localhost:%d", cfg.port)
    log.info("Data will be stored in: %s", store.path.resolve())
    log.info("Available endpoints:")
    log.info("  POST   /api/portfolios     - Create portfolio")
    log.info("  GET    /api/portfolios     - Get all portfolios")
    log.info("  DELETE /api/portfolios/:id - Delete portfolio")
    uvicorn.run(application, host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())
