import os
import logging
import logging.handlers
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Core imports
from packages.ivs_core.config import IVSConfig
from packages.ivs_core.logging import get_logger
from packages.ivs_core.errors import IVSBaseError

# API Routers
from IVS.api.errors import ivs_error_handler
from IVS.api.health import router as health_router
from IVS.api.session import router as session_router
from IVS.api.dependencies import get_session_repository, get_interview_client
from packages.ivs_providers.http_client import HttpInterviewServiceClient

# Configuration Load
config = IVSConfig.load()
logger = get_logger("ivs.main")

def setup_runtime_logging():
    """
    Configure runtime logging to logs/runtime/.
    Adds a file handler specifically for runtime logs.
    """
    base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "../"))
    log_dir = os.path.join(base_dir, "logs", "runtime")
    os.makedirs(log_dir, exist_ok=True)

    log_file = os.path.join(log_dir, "runtime.log")

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=30,
        encoding="utf-8"
    )

    formatter = logging.Formatter(
        "[%(asctime)s] [%(levelname)s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.INFO)

    # Attach to root logger to capture all events including uvicorn
    logging.getLogger().addHandler(file_handler)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_runtime_logging()
    logger.info(f"Starting {config.PROJECT_NAME} v{config.VERSION}...")

    yield

    # Shutdown: release every capture device still held
    repository = get_session_repository()
    for session_id in repository.list_ids():
        engine = repository.get(session_id)
        if engine:
            await engine.close()

    client = get_interview_client()
    if isinstance(client, HttpInterviewServiceClient):
        await client.aclose()
    logger.info("Server shutting down...")

def create_app() -> FastAPI:
    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        lifespan=lifespan,
        docs_url="/docs",       # Dev only
        redoc_url=None
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],    # Allow all for now (Dev)
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(IVSBaseError, ivs_error_handler)

    # Routers
    app.include_router(health_router, prefix="", tags=["Status"])
    app.include_router(session_router, prefix="/api/v1", tags=["Session"])

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("IVS.main:app", host="0.0.0.0", port=8000, reload=True)
