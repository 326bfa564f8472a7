# dbexplorer/db.py
import os
from typing import Dict, List, Set

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError

from dbexplorer.coercion import classify_type
from dbexplorer.schemas import ColumnDescriptor

# Default dev DB; api/index.py points this at /tmp on serverless hosts
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dbexplorer.db")


def _parse_table_list(raw: str) -> Set[str]:
    return {t.strip() for t in raw.split(",") if t.strip()}


# Optional allow-list; empty means every table in the schema is exposed
EXPOSED_TABLES = _parse_table_list(os.getenv("EXPOSED_TABLES", ""))


def _make_engine(url: str) -> Engine:
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


engine = _make_engine(DATABASE_URL)


def reconfigure(url: str):
    """Reconfigure the DB engine at runtime (for tests)."""
    global engine
    engine.dispose()
    engine = _make_engine(url)


def dispose():
    """Release pooled connections. Only called on process shutdown."""
    engine.dispose()


def _is_internal(name: str) -> bool:
    # sqlite_master, sqlite_sequence and friends
    return engine.dialect.name == "sqlite" and name.lower().startswith("sqlite_")


def _is_exposed(name: str) -> bool:
    if _is_internal(name):
        return False
    return not EXPOSED_TABLES or name in EXPOSED_TABLES


def table_exists(name: str) -> bool:
    """
    Ask live schema metadata whether `name` is a table.
    Views and internal tables are not tables here, matching list_tables().
    Driver errors propagate; they are not an "unknown table" answer.
    """
    if not _is_exposed(name):
        return False
    insp = inspect(engine)
    if not insp.has_table(name):
        return False
    return name not in insp.get_view_names()


def list_tables() -> List[str]:
    return [t for t in inspect(engine).get_table_names() if _is_exposed(t)]


def _declared_type_name(col_type, dialect) -> str:
    try:
        return col_type.compile(dialect=dialect)
    except CompileError:
        # NullType and friends have no DDL form
        return getattr(col_type, "__visit_name__", "")


def get_columns(table: str) -> Dict[str, ColumnDescriptor]:
    """Reflect `table` and return its columns keyed by name, in declared order."""
    columns: Dict[str, ColumnDescriptor] = {}
    for col in inspect(engine).get_columns(table):
        type_name = _declared_type_name(col["type"], engine.dialect)
        columns[col["name"]] = ColumnDescriptor(
            name=col["name"],
            type_name=type_name,
            kind=classify_type(type_name),
        )
    return columns
