"""Create the local duel test database and its schema.

Run: python scripts/ensure_test_db.py (reads DATABASE_URL)
"""

from __future__ import annotations

import asyncio
import re

import asyncpg
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import get_settings
from app.core.integration_db_safety import inspect_integration_db_target
from app.db.models import Base

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_test_database_url(database_url: str) -> str:
    target = inspect_integration_db_target(database_url)
    if not target.is_safe:
        raise RuntimeError(f"Refusing to prepare database '{target.database_name}': {target.rejection}.")
    if IDENTIFIER_RE.fullmatch(target.database_name) is None:
        raise RuntimeError(
            f"Unsupported database name '{target.database_name}'. "
            "Only [A-Za-z0-9_] identifiers are supported."
        )
    return target.database_name


async def _ensure_database_exists(database_url: str) -> None:
    db_name = validate_test_database_url(database_url)
    parsed = make_url(database_url)
    if parsed.username is None:
        raise RuntimeError("DATABASE_URL username is required.")

    conn = await asyncpg.connect(
        host=parsed.host or "localhost",
        port=int(parsed.port or 5432),
        user=parsed.username,
        password=parsed.password,
        database="postgres",
    )
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if not exists:
            await conn.execute(f'CREATE DATABASE "{db_name}"')
        print(f"ensure_test_db: {'exists' if exists else 'created'} db={db_name}")  # noqa: T201
    finally:
        await conn.close()


async def _ensure_schema(database_url: str) -> None:
    engine = create_async_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()
    print(f"ensure_test_db: schema ready tables={len(Base.metadata.tables)}")  # noqa: T201


async def _ensure(database_url: str) -> None:
    await _ensure_database_exists(database_url)
    await _ensure_schema(database_url)


def main() -> int:
    settings = get_settings()
    asyncio.run(_ensure(settings.database_url))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
