from pharmadesk.database.base import Base
from pharmadesk.database.engine import engine, ensure_sqlite_schema
from pharmadesk.database.session import SessionLocal

__all__ = ["Base", "engine", "ensure_sqlite_schema", "SessionLocal"]
