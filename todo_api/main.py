import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

import todo_api.models  # noqa: F401  registers models on Base.metadata
from todo_api.config import Settings, get_settings
from todo_api.database import Base, build_engine, build_session_factory, check_db_connection
from todo_api.services.auth_service import AuthService
from todo_api.services.google_identity import GoogleIdentityVerifier
from todo_api.services.tokens import Clock, TokenIssuer, TokenValidator
from todo_api.utils.exceptions import AppException
from todo_api.utils.security import utc_now
from todo_api.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    generic_exception_handler,
)

from todo_api.api import users
from todo_api.api import projects
from todo_api.api import tasks

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, clock: Clock = utc_now) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Projects & Tasks API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ─── Components ───────────────────────────────────────────────────────────
    # Raises ConfigurationError without JWT_SECRET_KEY, so startup fails early.
    issuer = TokenIssuer(settings, clock)
    validator = TokenValidator(settings, clock)
    engine = build_engine(settings)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_validator = validator
    app.state.auth_service = AuthService(issuer, validator, clock)
    app.state.identity_verifier = GoogleIdentityVerifier(settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CERTS_URL)

    if not settings.GOOGLE_CLIENT_ID:
        logger.warning("GOOGLE_CLIENT_ID is not set; Google sign-in will reject every token")

    # ─── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── Exception Handlers ───────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ─── Routers ──────────────────────────────────────────────────────────────
    PREFIX = "/api"
    app.include_router(users.router,    prefix=PREFIX, tags=["Users"])
    app.include_router(projects.router, prefix=PREFIX, tags=["Projects"])
    app.include_router(tasks.router,    prefix=PREFIX, tags=["Tasks"])

    # ─── Startup ──────────────────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection(engine)
        logger.info("DB connected" if ok else "DB connection FAILED")
        if ok:
            Base.metadata.create_all(bind=engine)

    @app.on_event("shutdown")
    def on_shutdown():
        engine.dispose()

    # ─── Health ───────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": "1.0.0"}

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run("todo_api.main:create_app", factory=True, host=settings.APP_HOST,
                port=settings.APP_PORT, reload=settings.is_development)
