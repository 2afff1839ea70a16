"""
FastAPI application entry point.

Wire up routers, middleware, and lifecycle hooks.
Serves as the single ASGI application for the meeting summarization and Q&A
backend.

CORS: Configured via CORS_ORIGINS env, applied before any route.
Middleware order: logging (innermost) then CORS (outermost) so all responses get CORS headers.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meetinglens import __version__
from meetinglens.config.settings import settings
from meetinglens.utils.log_utils import configure_logging, hash_identifier

logger = configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Manages startup and shutdown events.
    """
    logger.info("[MeetingLens API] Starting up...")
    logger.info("[MeetingLens API] Environment: %s", settings.app_env)
    logger.info("[MeetingLens API] Provider: %s", settings.llm_provider)
    logger.info("[MeetingLens API] API prefix: %s", settings.normalized_api_prefix or "(root)")
    logger.info("[MeetingLens API] CORS origins: %s", settings.cors_origins_list)
    yield
    logger.info("[MeetingLens API] Shutting down...")


# Create app first; middleware and routes are added below in correct order.
app = FastAPI(
    title="MeetingLens - Meeting Summarization & Q&A API",
    description="Transcript → chunked LLM summary → redacted multi-format document. Grounded transcript Q&A.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# 1) Request logging middleware (innermost) – runs first on request, last on response
@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    client_host = request.client.host if request.client else None
    logger.info("[REQ] %s %s client=%s", request.method, request.url.path, hash_identifier(client_host))
    response = await call_next(request)
    logger.info("[RES] %s %.0fms", response.status_code, (time.perf_counter() - started) * 1000)
    return response

# 2) CORS middleware (outermost) – MUST be registered before routers so all responses get CORS headers.
#    Parsed from ENV: CORS_ORIGINS is split into a list; never pass a raw string to allow_origins.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3) Global exception handler – ensures 500 responses are JSON and still go through CORS
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )

# 4) Root endpoint (no prefix)
@app.get("/", include_in_schema=False)
async def root():
    prefix = settings.normalized_api_prefix
    return JSONResponse(
        content={
            "service": "MeetingLens API",
            "version": __version__,
            "status": "ok",
            "docs": "/docs" if not settings.is_production else None,
            "api_prefix": prefix or "(root)",
            "endpoints": {
                "health": f"{prefix}/health",
                "languages": f"{prefix}/languages",
                "summarize": f"{prefix}/summarize",
                "ask": f"{prefix}/ask",
                "translate": f"{prefix}/translate",
                "detect_language": f"{prefix}/detect-language",
            },
        }
    )

# 5) Include routers ONLY after CORS and middleware.
from meetinglens.api.routes import router as api_router  # noqa: E402

app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "meetinglens.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=not settings.is_production,
    )
