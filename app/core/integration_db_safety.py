from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import URL, make_url

TEST_DB_MARKER = "test"
LOCAL_TEST_HOSTS = frozenset(
    {
        "localhost",
        "127.0.0.1",
        "::1",
        "postgres",
        "duel_arena_postgres",
    }
)


@dataclass(frozen=True, slots=True)
class IntegrationDbTarget:
    database_name: str
    host: str
    backend: str
    rejection: str | None = None

    @property
    def is_safe(self) -> bool:
        return self.rejection is None


def _rejection_for(url: URL, *, database_name: str, host: str) -> str | None:
    if url.get_backend_name() != "postgresql":
        return "only PostgreSQL test databases are supported"
    if not database_name:
        return "database name is empty"
    if TEST_DB_MARKER not in database_name.lower():
        return f"database name must contain '{TEST_DB_MARKER}'"
    if host not in LOCAL_TEST_HOSTS:
        return f"host '{host}' is not a local test host"
    return None


def inspect_integration_db_target(database_url: str) -> IntegrationDbTarget:
    url = make_url(database_url)
    database_name = (url.database or "").strip()
    host = (url.host or "").strip().lower()
    return IntegrationDbTarget(
        database_name=database_name,
        host=host,
        backend=url.get_backend_name(),
        rejection=_rejection_for(url, database_name=database_name, host=host),
    )


def assert_safe_integration_db(database_url: str) -> None:
    target = inspect_integration_db_target(database_url)
    if target.is_safe:
        return
    raise RuntimeError(
        "Refusing to truncate duel tables on a non-test database: "
        f"{target.rejection} (db='{target.database_name}', host='{target.host}'). "
        "Point DATABASE_URL at a local PostgreSQL test database such as 'duel_arena_test'."
    )
