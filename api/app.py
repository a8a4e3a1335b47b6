import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from api.core.config import Settings, get_settings
from api.core.log import configure_logging
from api.core.rate_limiter import RateLimiter
from api.repositories import build_storage
from api.repositories.base import Storage
from api.routers import activities as activities_router
from api.routers import social as social_router
from api.routers import users as users_router
from api.routers import water as water_router

logger = logging.getLogger(__name__)

DEV_ORIGINS = {
    "http://localhost:5000",
    "http://127.0.0.1:5000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, nosniff, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"message": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse({"message": message, "errors": errors}, status_code=400)


def _integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse({"message": "Constraint violation"}, status_code=409)


def create_app(storage: Storage | None = None, settings: Settings | None = None) -> FastAPI:
    """Factory compatible with `uvicorn --factory api.app:create_app`."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    storage = storage or build_storage(settings)
    logger.info("starting API with %s storage (env=%s)", storage.name, settings.app_env)

    app = FastAPI(title="Fitness Tracker API")
    app.state.settings = settings
    app.state.storage = storage
    app.state.rate_limiter = RateLimiter()

    allowed_cors = set(settings.cors_origins)
    if settings.app_env != "prod":
        allowed_cors.update(DEV_ORIGINS)
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(IntegrityError, _integrity_error)

    @app.get("/healthz")
    def healthz():
        return {"ok": True, "storage": storage.name}

    app.include_router(users_router.router)
    app.include_router(water_router.router)
    app.include_router(activities_router.router)
    app.include_router(social_router.router)
    return app
