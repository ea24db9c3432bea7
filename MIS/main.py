import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Core imports
from packages.mis_core.config import MISConfig
from packages.mis_core.logging import get_logger, setup_logging
from packages.mis_core.errors import MISBaseError
from packages.mis_storage.db import init_models

# API Routers
from MIS.api.dependencies import get_database, get_session_service
from MIS.api.health import router as health_router
from MIS.api.results import router as results_router
from MIS.api.session import router as session_router
from MIS.core.error_handler import mis_exception_handler
from MIS.core.request_id import RequestIdMiddleware

# Configuration Load
config = MISConfig.load()
logger = get_logger("MIS.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(config.LOG_DIR)
    if config.USE_DATABASE:
        await init_models(get_database()[0])
    logger.info(f"Starting {config.PROJECT_NAME} v{config.VERSION}...")

    yield

    # Shutdown
    service = get_session_service()
    active = service.active_session_ids()
    await service.shutdown()
    logger.info(f"Server shutting down... ({len(active)} live sessions closed)")


def create_app() -> FastAPI:
    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        lifespan=lifespan,
        docs_url="/docs",       # Dev only
        redoc_url=None
    )

    # Middleware
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],    # Allow all for now (Dev)
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MISBaseError, mis_exception_handler)

    # Routers
    app.include_router(health_router, prefix="", tags=["Status"])
    app.include_router(session_router, prefix="/api/v1")
    app.include_router(results_router, prefix="/api/v1")

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    uvicorn.run("MIS.main:app", host="0.0.0.0", port=8000, reload=True)
