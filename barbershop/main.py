# barbershop/main.py

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, env_presence
from .db import LocalStore
from .lifecycle import AppointmentManager, InvalidTransition
from .notifications import EmailNotifier
from .routers import admin_routes, appointments_routes, contact_routes
from .sheets import SheetsClient, build_sheets_client
from .store import RecordStore, StoreError
from .tasks import RetryRunner

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"[Config] Env presence: {env_presence()}")
    logger.info(f"Email service: {'Configured' if settings.email_configured else 'Not configured'}")
    logger.info(f"Google Sheets: {'Configured' if app.state.store.remote_configured else 'Not configured'}")
    app.state.store.ensure_headers()
    yield
    logger.info("Application shutting down...")


def create_app(settings: Optional[Settings] = None, sheets_client: Optional[SheetsClient] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    if sheets_client is None:
        sheets_client = build_sheets_client(settings)

    app = FastAPI(title="Barbershop API", version="1.0.0", lifespan=lifespan)

    store = RecordStore(LocalStore(), sheets_client, settings)
    notifier = EmailNotifier(settings)
    runner = RetryRunner(settings.task_retry_attempts, settings.task_retry_delay_seconds)
    app.state.settings = settings
    app.state.store = store
    app.state.notifier = notifier
    app.state.runner = runner
    app.state.manager = AppointmentManager(
        store,
        notifier,
        runner,
        default_barber=settings.default_barber,
        reconcile_delay=settings.reconcile_delay_seconds,
        strict_transitions=settings.strict_status_transitions,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            message = error.get("msg", "Invalid value")
            # pydantic prefixes messages raised from validators
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.append({"field": ".".join(loc), "message": message})
        logger.warning(f"Validation error for {request.url.path}: {errors}")
        return JSONResponse(status_code=400, content={"success": False, "errors": errors})

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError):
        logger.error(f"Record store failure on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Failed to save changes"})

    @app.exception_handler(InvalidTransition)
    async def transition_exception_handler(request: Request, exc: InvalidTransition):
        return JSONResponse(status_code=409, content={"success": False, "message": str(exc)})

    @app.get("/api/health")
    def health_check():
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        }

    app.include_router(appointments_routes.router)
    app.include_router(contact_routes.router)
    app.include_router(admin_routes.router)

    uploads_dir = Path(settings.upload_dir)
    (uploads_dir / "work").mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")

    return app


def run():
    import uvicorn

    uvicorn.run("barbershop.main:create_app", factory=True, host="0.0.0.0", port=5000)
