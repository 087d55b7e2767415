import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from fleetbook.config import settings
from fleetbook.database import SessionLocal, check_db_connection, init_db
from fleetbook.seed import seed_demo_data
from fleetbook.utils.exceptions import AppException
from fleetbook.middleware.error_handler import (
    app_exception_handler,
    validation_exception_handler,
    integrity_error_handler,
    generic_exception_handler,
)

from fleetbook.api.v1 import auth
from fleetbook.api.v1 import vehicles
from fleetbook.api.v1 import requests
from fleetbook.api.v1 import stats
from fleetbook.api.v1 import notifications
from fleetbook.api.v1 import access_logs

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Corporate vehicle booking API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

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
    app.include_router(auth.router,          prefix=PREFIX, tags=["Auth"])
    app.include_router(vehicles.router,      prefix=PREFIX, tags=["Vehicles"])
    app.include_router(requests.router,      prefix=PREFIX, tags=["Requests"])
    app.include_router(stats.router,         prefix=PREFIX, tags=["Stats"])
    app.include_router(notifications.router, prefix=PREFIX, tags=["Notifications"])
    app.include_router(access_logs.router,   prefix=PREFIX, tags=["Access Logs"])

    # ─── Startup ──────────────────────────────────────────────────────────────
    @app.on_event("startup")
    def on_startup():
        ok = check_db_connection()
        logger.info("✅ DB connected" if ok else "❌ DB connection FAILED")
        init_db()
        if settings.SEED_DEMO_DATA:
            with SessionLocal() as db:
                seed_demo_data(db)

    # ─── Health ───────────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok", "app": settings.APP_NAME, "version": "1.0.0"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fleetbook.main:app", host=settings.APP_HOST, port=settings.APP_PORT,
                reload=settings.is_development)
