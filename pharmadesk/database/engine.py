import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from pharmadesk.config import Settings, get_settings


app_settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30
_SQLITE_BUSY_TIMEOUT_MS = _SQLITE_BUSY_TIMEOUT_SECONDS * 1000


def _is_memory_database(url) -> bool:
    database = url.database
    if database in (None, "", ":memory:"):
        return True
    return url.query.get("mode") == "memory"


def configure_sqlite(target: Engine, *, memory: bool = False) -> Engine:
    """Pragmas plus explicit BEGIN so SAVEPOINT works under pysqlite."""

    @event.listens_for(target, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        # BEGIN is emitted by the "begin" listener below.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
            if not memory:
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA synchronous=NORMAL")
                except sqlite3.DatabaseError:
                    pass
        finally:
            cursor.close()

    @event.listens_for(target, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return target


def build_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    memory = is_sqlite and _is_memory_database(url)

    connect_args = {}
    engine_kwargs: dict[str, object] = dict(pool_pre_ping=True)
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS}
        if memory:
            engine_kwargs.update(poolclass=StaticPool)

    built = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    if is_sqlite:
        configure_sqlite(built, memory=memory)
    return built


engine = build_engine(app_settings.DATABASE_URL)


# Owner columns added after the first release of the stock tables.
_SQLITE_COLUMN_DEFAULTS = {
    "current_inventory": {
        "purchase_item_id": "INTEGER REFERENCES purchase_items(id) ON DELETE CASCADE",
    },
    "stock_transactions": {
        "purchase_item_id": "INTEGER REFERENCES purchase_items(id) ON DELETE CASCADE",
    },
    "expiry_alerts": {
        "purchase_item_id": "INTEGER REFERENCES purchase_items(id) ON DELETE CASCADE",
        "alert_status": "TEXT",
    },
}


def _escape_sqlite_identifier(value: str) -> str:
    return value.replace('"', '""')


def _get_sqlite_columns(conn, table_name: str):
    escaped_table = _escape_sqlite_identifier(table_name)
    # noinspection SqlNoDataSourceInspection
    result = conn.exec_driver_sql(
        f'PRAGMA table_info("{escaped_table}")'
    ).mappings()
    return {row["name"] for row in result}


def ensure_sqlite_schema(target: Engine | None = None):
    target = target or engine
    if target.dialect.name != "sqlite":
        return []
    added_columns = []
    with target.begin() as conn:
        for table_name, columns in _SQLITE_COLUMN_DEFAULTS.items():
            existing = _get_sqlite_columns(conn, table_name)
            if not existing:
                continue
            for column_name, ddl in columns.items():
                if column_name in existing:
                    continue
                escaped_table = _escape_sqlite_identifier(table_name)
                escaped_column = _escape_sqlite_identifier(column_name)
                # noinspection SqlNoDataSourceInspection
                conn.exec_driver_sql(
                    f'ALTER TABLE "{escaped_table}" ADD COLUMN "{escaped_column}" {ddl}'
                )
                added_columns.append((table_name, column_name))
    for table_name, column_name in added_columns:
        logger.info("Added column %s.%s to existing SQLite schema.", table_name, column_name)
    return added_columns
