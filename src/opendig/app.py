import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

# FastAPI creates the app object and defines the routes
from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
# Static index page and JSON/PNG responses
from fastapi.responses import FileResponse, JSONResponse, Response
# Enables hosting UI assets (JS/CSS/images) from a folder
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

# The engine that runs dig and turns its output into records
from digtool import DigExecutionError, DigService
from subnets import SubnetFanout, SubnetInfo, load_registry

# input validation
from reporting.targets import validate_query_params

# Shape results into the {"success", "data"} / {"code", "message"} envelopes
from reporting.assembler import DIG_COMMAND_FAILED, INVALID_PARAMETERS, STATUS_CHECK_FAILED, Assemble
from reporting.charts import ComparisonCharts
from reporting.comparison import Comparison, fanout_frame

from .config import Settings
from .logs import setup_logging, startup_info

BASE_DIR = Path(__file__).resolve().parent
STATIC_DIR = BASE_DIR / "static"

logger = logging.getLogger(__name__)


class DigQuery(BaseModel):
    # Everything optional here so that missing/blank fields reach our own validator
    # and come back as InvalidParameters instead of a framework 422.
    domain: Optional[str] = None
    recordType: Optional[str] = "A"
    subnet: Optional[str] = None


def request_errors(errors: Sequence[Dict[str, Any]]) -> List[str]:
    """Turn FastAPI/pydantic validation errors into readable messages."""
    messages: List[str] = []
    for err in errors:
        kind = err.get("type", "")
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        if kind == "json_invalid":
            messages.append("Request body must be valid JSON")
        elif not loc and kind in ("model_attributes_type", "dict_type"):
            messages.append("Request body must be a JSON object")
        elif loc:
            messages.append(f"{'.'.join(loc)}: {err.get('msg', 'invalid value')}")
        else:
            messages.append(err.get("msg", "Invalid request"))
    return messages or ["Invalid request"]


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[DigService] = None,
    subnets: Optional[Sequence[SubnetInfo]] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings)

    # Query objects: created once, shared read-only by every request
    service = service or DigService(
        server=settings.default_server,
        dig_path=settings.dig_path,
        query_timeout=settings.query_timeout,
        process_timeout=settings.process_timeout,
    )
    registry = tuple(subnets) if subnets is not None else load_registry(settings.subnets_file)
    fanout = SubnetFanout(service, registry, max_concurrency=settings.max_concurrency)
    assembler = Assemble()
    charts = ComparisonCharts()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        startup_info.initialize(settings)
        logger.info("subnet registry: %d entries", len(registry))
        yield

    app = FastAPI(title="OpenDig", lifespan=lifespan)

    # Serve static front-end
    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.exception_handler(RequestValidationError)
    async def bad_request(_: Request, exc: RequestValidationError):
        logger.debug("rejected request: %s", exc.errors())
        return JSONResponse(
            status_code=400,
            content=assembler.error(INVALID_PARAMETERS, "Parameter validation failed", request_errors(exc.errors())),
        )

    # Anything that escapes a route still gets the JSON error envelope
    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error: %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=assembler.error(DIG_COMMAND_FAILED, "Failed to execute dig command"))

    # Home page
    @app.get("/")
    def home():
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/health")
    def health():
        return {"ok": True}

    # Run a query: one subnet if given, otherwise every registry entry
    @app.post("/api/dig")
    async def dig(body: DigQuery):
        v = validate_query_params(body.domain, body.recordType, body.subnet)
        if not v.valid:
            return JSONResponse(
                status_code=400,
                content=assembler.error(INVALID_PARAMETERS, "Parameter validation failed", v.errors),
            )

        options = v.to_options()
        try:
            if options.subnet:
                result = await service.execute(options)
            else:
                result = await fanout.query_all(options.domain, options.record_type)
        except DigExecutionError:
            # details were logged where the command ran
            return JSONResponse(status_code=500, content=assembler.error(DIG_COMMAND_FAILED, "Failed to execute dig command"))
        except Exception:
            logger.exception(
                "API request failed: domain=%s type=%s subnet=%s",
                options.domain, options.record_type, options.subnet,
            )
            return JSONResponse(status_code=500, content=assembler.error(DIG_COMMAND_FAILED, "Failed to execute dig command"))

        return JSONResponse(content=assembler.success(result))

    @app.get("/api/status")
    async def status():
        try:
            info = await service.tool_info()
        except Exception:
            logger.exception("Status check failed")
            return JSONResponse(status_code=500, content=assembler.error(STATUS_CHECK_FAILED, "Failed to check system status"))
        return JSONResponse(content=assembler.status(info, platform=sys.platform, default_server=settings.default_server))

    # Fan out and plot how answers differ across vantage points
    @app.get("/api/dig/compare.png")
    async def compare_png(
        domain: str = Query(..., min_length=1, max_length=253),
        recordType: str = Query("A"),
    ):
        v = validate_query_params(domain, recordType)
        if not v.valid:
            return JSONResponse(
                status_code=400,
                content=assembler.error(INVALID_PARAMETERS, "Parameter validation failed", v.errors),
            )

        try:
            result = await fanout.query_all(v.domain, v.record_type)
        except Exception:
            logger.exception("Comparison query failed: domain=%s type=%s", v.domain, v.record_type)
            return JSONResponse(status_code=500, content=assembler.error(DIG_COMMAND_FAILED, "Failed to execute dig command"))

        analytics = Comparison.compute(fanout_frame(result))
        png = await run_in_threadpool(charts.render_png, analytics, f"{v.domain} {v.record_type}")
        return Response(content=png, media_type="image/png")

    return app


app = create_app()
