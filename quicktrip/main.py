import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from quicktrip.api.v1.router import api_router
from quicktrip.core.config import settings
from quicktrip.core.exceptions import QuickTripError
from quicktrip.core.logging import configure_logging
from quicktrip.core.tracing import trace_context, trace_id_from_headers

logger = configure_logging("quicktrip", settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting QuickTrip API...")
    logger.info("Environment: %s", settings.ENVIRONMENT)
    logger.info("Overpass endpoint: %s", settings.OVERPASS_URL)

    if not settings.OPENROUTESERVICE_API_KEY:
        logger.warning(
            "OpenRouteService API key not configured. "
            "Travel times and isochrones will be estimated from mode speed."
        )

    logger.info("QuickTrip API ready!")

    yield

    logger.info("Shutting down QuickTrip API...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    logger.info(
        "%s %s - status=%s duration=%.3fs",
        request.method,
        request.url.path,
        response.status_code,
        duration,
    )

    return response


@app.middleware("http")
async def trace_middleware(request: Request, call_next):
    trace_id = trace_id_from_headers(request.headers)
    with trace_context(trace_id):
        response = await call_next(request)
    response.headers.setdefault("X-Trace-Id", trace_id)
    return response


@app.exception_handler(QuickTripError)
async def quicktrip_error_handler(request: Request, exc: QuickTripError) -> ORJSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return ORJSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Instrumentator().instrument(app).expose(app, endpoint="/metrics")

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "routing_key_configured": bool(settings.OPENROUTESERVICE_API_KEY),
    }


@app.get("/")
async def root():
    return {
        "message": "QuickTrip API",
        "version": settings.VERSION,
        "docs": "/docs",
    }
