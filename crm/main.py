import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crm.core.config import CORS_ORIGINS, HOST, LOG_LEVEL, PORT
from crm.core.database import engine
from crm.core.errors import register_exception_handlers
from crm.core.logging_setup import configure_logging
from crm.core.startup_checks import ensure_schema, validate_database_environment
from crm.middleware.observability import ObservabilityMiddleware
import crm.models  # noqa: F401  models must be registered before create_all

from crm.routers.customers import router as customers_router
from crm.routers.addresses import router as addresses_router
from crm.routers.history import router as history_router
from crm.routers.internal_metrics import router as internal_metrics_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(
    os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini"))
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Customer CRM API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)
register_exception_handlers(app)


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        ensure_schema(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


# Routers
app.include_router(customers_router)
app.include_router(addresses_router)
app.include_router(history_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


def run() -> None:
    import uvicorn

    uvicorn.run("crm.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
