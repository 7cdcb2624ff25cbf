"""
Server entry point: FastAPI app setup and route configuration.

Serves the enable toggle and usage counters, plus an SSE endpoint
that opens a page in a browser and auto-accepts its consent banner.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator

import dotenv
import fastapi
import uvicorn
from fastapi.middleware import cors
from starlette import responses

from cookie_cutter import config
from cookie_cutter.models import status
from cookie_cutter.pipeline import stream
from cookie_cutter.usage import store as store_mod
from cookie_cutter.utils import logger

dotenv.load_dotenv()

log = logger.create_logger("Server")

server_settings = config.ServerSettings()
engine_settings = config.EngineSettings()
usage_store = store_mod.UsageStore(server_settings.stats_path)


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Log server start on startup."""
    log.section("Cookie Cutter Server Started")
    log.info(
        "Environment",
        {
            "env": "production" if server_settings.is_production else "development",
            "statsPath": str(usage_store.path),
        },
    )
    yield


app = fastapi.FastAPI(title="Cookie Cutter Server", lifespan=lifespan)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    cors.CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# API Routes
# ============================================================================


class StatusUpdate(status.StatusResponse):
    """Body of ``PUT /api/status``."""


@app.get("/api/status")
async def get_status() -> status.StatusResponse:
    return status.StatusResponse(enabled=usage_store.enabled)


@app.put("/api/status")
async def put_status(update: StatusUpdate) -> status.StatusResponse:
    usage_store.set_enabled(update.enabled)
    return status.StatusResponse(enabled=usage_store.enabled)


@app.get("/api/stats", response_model_by_alias=True)
async def get_stats() -> status.StatsSummary:
    return usage_store.summary()


@app.get("/api/accept-stream")
async def accept_endpoint(
    url: str = fastapi.Query(..., description="The URL to open"),
    device: str = fastapi.Query(server_settings.default_device, description="Device type to emulate"),
) -> responses.StreamingResponse:
    """
    Open a page and auto-accept its consent banner, streaming progress via SSE.
    """
    log.info("Incoming accept request", {"url": url, "device": device})

    async def event_generator():
        async for event_str in stream.accept_url_stream(
            url,
            device,
            store=usage_store,
            engine_settings=engine_settings,
            headless=server_settings.headless,
        ):
            yield event_str

    return responses.StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "Access-Control-Allow-Origin": "*",
        },
    )


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "cookie_cutter.main:app",
        host=server_settings.host,
        port=server_settings.port,
        reload=not server_settings.is_production,
    )
