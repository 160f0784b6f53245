from __future__ import annotations

import logging
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from crm.core.config import DATABASE_URL, ENV_NORMALIZED
from crm.core.database import Base

logger = logging.getLogger(__name__)
SCHEMA_PREFIX = "[SCHEMA]"
REQUIRED_TABLES = ("customers", "addresses", "orders", "payments")


def validate_database_environment(database_url: str = DATABASE_URL, env: str = ENV_NORMALIZED) -> None:
    if env in {"prod", "production"} and database_url.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", SCHEMA_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def ensure_foreign_keys_enabled(engine: Engine) -> None:
    if engine.dialect.name != "sqlite":
        return
    with engine.connect() as connection:
        enabled = connection.exec_driver_sql("PRAGMA foreign_keys").scalar()
    if not enabled:
        logger.critical("%s foreign key enforcement is off", SCHEMA_PREFIX)
        raise RuntimeError("SQLite foreign key enforcement is not active")


def create_schema(engine: Engine) -> None:
    """Create the four CRM tables if missing; safe to call on every start."""
    import crm.models  # noqa: F401  registers the models on Base.metadata

    Base.metadata.create_all(bind=engine)
    ensure_foreign_keys_enabled(engine)
    logger.info("%s tables ready: %s", SCHEMA_PREFIX, ",".join(REQUIRED_TABLES))


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path, env: str = ENV_NORMALIZED) -> None:
    if env == "test":
        logger.info("%s skipped migration check in test environment", SCHEMA_PREFIX)
        return

    if not alembic_config_path.exists():
        logger.critical("%s alembic config not found path=%s", SCHEMA_PREFIX, alembic_config_path)
        raise RuntimeError("alembic config not found")

    alembic_cfg = Config(str(alembic_config_path))
    script_directory = ScriptDirectory.from_config(alembic_cfg)
    expected_heads = set(script_directory.get_heads())

    with engine.connect() as connection:
        inspector = inspect(connection)
        if "alembic_version" not in inspector.get_table_names():
            logger.critical("%s alembic_version table missing", SCHEMA_PREFIX)
            raise RuntimeError("Database has no migration state")

        current_rows = connection.exec_driver_sql("SELECT version_num FROM alembic_version").fetchall()

    current_heads = {row[0] for row in current_rows if row and row[0]}
    if current_heads != expected_heads:
        logger.critical(
            "%s pending migration detected current=%s expected=%s",
            SCHEMA_PREFIX,
            sorted(current_heads),
            sorted(expected_heads),
        )
        raise RuntimeError("Pending migrations detected")

    logger.info("%s migration state verified", SCHEMA_PREFIX)


def ensure_schema(*, engine: Engine, alembic_config_path: Path) -> None:
    if engine.dialect.name == "sqlite":
        create_schema(engine)
        return
    ensure_migrations_applied(engine=engine, alembic_config_path=alembic_config_path)
