"""FastAPI application exposing the course, member and gallery endpoints."""

import logging
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from limits import parse as parse_limit
from prometheus_client import Counter, make_asgi_app
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import Settings, settings as default_settings
from .database import init_db, make_engine, make_session_factory
from .errors import RateLimited, install_error_handlers
from .routers import auth, courses, gallery, members
from .session import SessionCodec


logger = logging.getLogger(__name__)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


async def log_requests(request: Request, call_next):
    """Log incoming requests and their outcomes while updating metrics."""
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        REQUEST_COUNTER.labels(method=request.method, endpoint=request.url.path, status="500").inc()
        logger.exception("error handling %s %s", request.method, request.url.path)
        raise
    REQUEST_COUNTER.labels(
        method=request.method,
        endpoint=request.url.path,
        status=str(response.status_code),
    ).inc()
    logger.info("response %s %s status %s", request.method, request.url.path, response.status_code)
    return response


def enforce_rate_limit(request: Request) -> None:
    """Count the request against the client's shared budget for all API routes."""
    limiter: Limiter = request.app.state.limiter
    if not limiter.enabled:
        return
    limit = request.app.state.rate_limit
    if not limiter.limiter.hit(limit, "global", get_remote_address(request)):
        logger.warning("rate limit exceeded for %s", get_remote_address(request))
        raise RateLimited(f"Rate limit exceeded: {limit}")


async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application for ``settings`` (the environment by default)."""
    settings = settings or default_settings

    app = FastAPI(title=settings.api_title)
    app.state.settings = settings

    engine = make_engine(settings.database_url)
    init_db(engine)
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.codec = SessionCodec(settings.session_secret, settings.session_algorithm)

    app.state.limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
    app.state.rate_limit = parse_limit(settings.rate_limit)
    install_error_handlers(app)

    # the last middleware added runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.middleware("http")(log_requests)
    app.middleware("http")(add_security_headers)

    # /api/health and the mounts below are not rate limited
    rate_limited = [Depends(enforce_rate_limit)]
    for router in (courses.router, members.router, gallery.router, auth.router):
        app.include_router(router, prefix="/api", dependencies=rate_limited)

    @app.get("/api/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": settings.api_title}

    app.mount("/metrics", make_asgi_app())

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.upload_url_prefix, StaticFiles(directory=str(upload_dir)), name="uploads")

    if settings.session_secret == Settings.model_fields["session_secret"].default:
        logger.warning("using the development session secret; set SESSION_SECRET in production")
    return app


app = create_app()
