"""Alembic environment configuration.

Learn: Migrations connect the same way the app does. The URL comes from
Settings (TASKTRACK_DATABASE_URL) unless the caller already put one on the
Alembic config, and the engine is built by tasktrack.db.engine.build_engine,
so pool and echo behaviour match the running server.
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from tasktrack.config import get_settings
from tasktrack.db.engine import build_engine
from tasktrack.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()
url = config.get_main_option("sqlalchemy.url") or settings.database_url
target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = build_engine(settings.model_copy(update={"database_url": url}))
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
