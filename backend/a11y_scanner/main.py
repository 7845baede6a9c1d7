import asyncio
import json
import traceback
import uuid
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from a11y_scanner.core.config import Settings, load_settings
from a11y_scanner.core.engine import parse_scan_request, run_scan
from a11y_scanner.core.errors import InvalidScanRequest, ScanFailure
from a11y_scanner.core.logger import clear_request_id, configure_logging, get_logger, set_request_id
from a11y_scanner.models.schemas import ErrorResponse

logger = get_logger(__name__)

MAX_BODY_BYTES = 1024 * 1024


def _log_background_error(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    exc = context.get("exception")
    logger.error("unhandled background error", message=context.get("message"),
                 error=repr(exc) if exc else None)


@asynccontextmanager
async def lifespan(app: FastAPI):
    asyncio.get_running_loop().set_exception_handler(_log_background_error)
    app.state.scan_slots = asyncio.Semaphore(app.state.settings.max_concurrent_scans)
    logger.info("A11y Site Scanner ready", port=app.state.settings.port)
    yield


async def read_body(request: Request, limit: int = MAX_BODY_BYTES) -> Optional[bytes]:
    """Request body, or None once it is known to exceed ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        return None
    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def _error(status: int, error: str, message: str, stack: Optional[str] = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, stack=stack)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


def create_app(
    settings: Optional[Settings] = None,
    *,
    session_factory: Optional[Callable[..., Any]] = None,
    rule_engine: Any = None,
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level, settings.json_logs)

    app = FastAPI(
        title="A11y Site Scanner",
        version="1.0.0",
        lifespan=lifespan,
        openapi_url=None,  # /openapi.json is the static file below
        docs_url=None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {"ok": True, "message": "A11y Site Scanner ready. POST /scan { url }"}

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.get("/openapi.json")
    def openapi_spec():
        path = settings.openapi_path
        if not path.is_file():
            return PlainTextResponse("openapi.json not found", status_code=404)
        return FileResponse(path, media_type="application/json")

    @app.post("/scan")
    async def scan(request: Request):
        raw = await read_body(request)
        if raw is None:
            return _error(413, "payload_too_large", "Request body exceeds 1mb")
        try:
            body = json.loads(raw) if raw else None
        except ValueError:
            body = None

        try:
            scan_request = parse_scan_request(body)
        except InvalidScanRequest as e:
            return _error(400, e.error, e.message)

        set_request_id(uuid.uuid4().hex)
        try:
            result = await run_scan(
                scan_request,
                settings,
                session_factory=session_factory,
                rule_engine=rule_engine,
                slots=getattr(request.app.state, "scan_slots", None),
            )
        except ScanFailure as e:
            stack = "".join(traceback.format_exception(e)) if settings.expose_stack else None
            return _error(500, e.error, str(e), stack)
        finally:
            clear_request_id()
        return JSONResponse(content=result.model_dump(mode="json", by_alias=True))

    return app


app = create_app()
