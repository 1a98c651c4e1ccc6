"""
NewsHippo HTTP API

FastAPI service that provides:
1. POST /v1/articles - Ingest an article url and fan out its enrichment
2. GET /v1/articles - Read an article
3. DELETE /v1/articles - Delete an article
4. GET /v1/news-sources - List news sources
5. /health - Health check

Architecture:
- Redis for article and news source records
- RabbitMQ to hand enrichment requests to the worker process
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from newshippo.api.routes import router, to_response
from newshippo.bus import RabbitMQBus
from newshippo.config import settings
from newshippo.errors import ValidationError
from newshippo.fanout import default_channels
from newshippo.reporting import LoggingReporter, finish
from newshippo.services import Services
from newshippo.store import RedisRecordStore

logger = logging.getLogger(__name__)

# Global services, built on startup
services: Optional[Services] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    global services
    load_dotenv()
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info("🚀 Starting NewsHippo API...")

    bus = RabbitMQBus(channels=default_channels().values())
    bus.connect(max_retries=3)
    services = Services(store=RedisRecordStore(), bus=bus)
    logger.info("✅ All services initialized")

    yield

    logger.info("🔄 Shutting down...")
    bus.close()
    logger.info("✅ Shutdown complete")


app = FastAPI(
    title="NewsHippo API",
    description="Article ingestion with asynchronous text enrichment",
    version="1.0.0",
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Request logging middleware."""
    start = time.time()
    response = await call_next(request)
    duration = time.time() - start
    logger.info(f"{request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)")
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed parameters or body are reported like any other ValidationError."""
    reporter = services.reporter if services is not None else LoggingReporter()
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    result = finish(
        reporter,
        f"{request.method} {request.url.path}",
        time.monotonic(),
        error=ValidationError(f"Invalid request: {problems}"),
        request=dict(request.query_params),
    )
    return to_response(result)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all exceptions."""
    logger.error(f"❌ Error in {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "error": "Internal server error", "error_type": "InternalError"}
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "newshippo-api"}


app.include_router(router, prefix="/v1")


def run() -> None:
    import uvicorn
    uvicorn.run("newshippo.api.main:app", host="0.0.0.0", port=8082)


if __name__ == "__main__":
    run()
