# backend/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings as default_settings
from .monitor import MonitorScheduler
from .routers import alerts, farms, ndvi
from .service import MonitoringService

log = logging.getLogger(__name__)


def create_app(settings: Settings = None, service: MonitoringService = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    service = service or MonitoringService(seed=settings.RANDOM_SEED)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.SEED_ON_STARTUP:
            service.seed(settings.DEFAULT_SIMULATION_DAYS)
        scheduler = None
        if settings.MONITOR_ENABLED:
            scheduler = MonitorScheduler(service.monitor, settings.MONITOR_INTERVAL_SECONDS)
            scheduler.start()
        app.state.scheduler = scheduler
        yield
        if scheduler is not None:
            await scheduler.stop()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.service = service
    app.state.scheduler = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request, exc):
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
        )

    @app.get("/")
    def root():
        return {"success": True, "message": "PMFBY API Server is running"}

    @app.get("/api/health")
    def health():
        return {
            "success": True,
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "farms": len(service.farms),
        }

    app.include_router(farms.router, prefix="/api")
    app.include_router(ndvi.router, prefix="/api")
    app.include_router(alerts.router, prefix="/api")

    return app


app = create_app()
