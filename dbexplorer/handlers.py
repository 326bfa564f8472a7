# dbexplorer/handlers.py
"""
Table operations behind the HTTP surface.

Each handler returns the JSON body for a successful response and raises an
ExplorerError subclass on failure. SQL is built with SQLAlchemy Core: table
and column names come from live reflection and are quoted by the dialect,
while ids, limit/offset and field values are always bound parameters.

Env vars:
- DEFAULT_LIMIT (default: 5): page size when `limit` is absent or invalid
"""

import json
import os
import re
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import column, delete, insert, select, update
from sqlalchemy import table as table_clause
from sqlalchemy.exc import SQLAlchemyError

from dbexplorer import db as dbmod
from dbexplorer import monitoring
from dbexplorer.coercion import fits_int64, validate_fields
from dbexplorer.errors import BadRequest, InternalError, NotFound
from dbexplorer.materializer import materialize_rows
from dbexplorer.schemas import ColumnDescriptor

DEFAULT_LIMIT = int(os.getenv("DEFAULT_LIMIT", "5"))
DEFAULT_OFFSET = 0

ID_FIELD = "id"
_INT_LITERAL = re.compile(r"^[+-]?[0-9]+$")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _parse_id(raw: str) -> int:
    # length cap keeps int() away from its digit limit
    if not _INT_LITERAL.match(raw or "") or len(raw) > 20:
        raise BadRequest("invalid id")
    rid = int(raw)
    if not fits_int64(rid):
        raise BadRequest("invalid id")
    return rid


def _parse_page_param(raw: Optional[str], default: int) -> int:
    """Non-numeric, negative or out-of-range values fall back to the default instead of erroring."""
    if raw is None or not (raw.isascii() and raw.isdigit()) or len(raw) > 19:
        return default
    value = int(raw)
    return value if fits_int64(value) else default


def _decode_object(body: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise BadRequest("failed to decode JSON data") from e
    if not isinstance(payload, dict):
        raise BadRequest("failed to decode JSON data")
    return payload


def _columns(table: str) -> Dict[str, ColumnDescriptor]:
    try:
        return dbmod.get_columns(table)
    except SQLAlchemyError as e:
        monitoring.logger.exception("Column reflection failed", extra={"table": table})
        raise InternalError("failed to get column types") from e


def _table(name: str, columns: Mapping[str, ColumnDescriptor]):
    return table_clause(name, *[column(c) for c in columns])


def _id_column(t):
    if ID_FIELD not in t.c:
        raise BadRequest("table has no id column")
    return t.c[ID_FIELD]


def _materialize(rows, columns):
    try:
        return materialize_rows(rows, columns)
    except (TypeError, ValueError) as e:
        monitoring.logger.exception("Row conversion failed")
        raise InternalError("failed to scan row") from e


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
def list_tables() -> Dict[str, Any]:
    try:
        tables = dbmod.list_tables()
    except SQLAlchemyError as e:
        monitoring.logger.exception("Table listing failed")
        raise InternalError("failed to list tables") from e
    return {"response": {"tables": tables}}


def list_records(table: str, params: Mapping[str, str]) -> Dict[str, Any]:
    limit = _parse_page_param(params.get("limit"), DEFAULT_LIMIT)
    offset = _parse_page_param(params.get("offset"), DEFAULT_OFFSET)

    columns = _columns(table)
    t = _table(table, columns)
    stmt = select(t).limit(limit).offset(offset)
    try:
        with dbmod.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
    except SQLAlchemyError as e:
        monitoring.logger.exception("Record listing failed", extra={"table": table})
        raise InternalError("failed to query records") from e

    records = _materialize(rows, columns)
    monitoring.set_rows_returned(len(records))
    return {"response": {"records": records}}


def get_record(table: str, record_id: str) -> Dict[str, Any]:
    rid = _parse_id(record_id)
    columns = _columns(table)
    t = _table(table, columns)
    stmt = select(t).where(_id_column(t) == rid)
    try:
        with dbmod.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
    except SQLAlchemyError as e:
        monitoring.logger.exception("Record fetch failed", extra={"table": table})
        raise InternalError("failed to get record") from e

    if not rows:
        raise NotFound("record not found")
    return {"response": {"record": _materialize(rows[:1], columns)[0]}}


def create_record(table: str, body: bytes) -> Dict[str, Any]:
    payload = _decode_object(body)
    # id is server-assigned; silently ignore whatever the client sent
    payload.pop(ID_FIELD, None)

    columns = _columns(table)
    validate_fields(columns, payload)
    if not payload:
        raise BadRequest("no fields to create")

    t = _table(table, columns)
    stmt = insert(t).values({t.c[name]: value for name, value in payload.items()})
    use_returning = ID_FIELD in t.c and dbmod.engine.dialect.insert_returning
    if use_returning:
        stmt = stmt.returning(t.c[ID_FIELD])
    try:
        with dbmod.engine.begin() as conn:
            result = conn.execute(stmt)
            new_id = result.scalar_one() if use_returning else result.lastrowid
    except SQLAlchemyError as e:
        monitoring.logger.exception("Record insert failed", extra={"table": table})
        raise InternalError("failed to create record") from e

    if new_id is None:
        raise InternalError("failed to get last inserted ID")
    return {"response": {"id": int(new_id)}}


def update_record(table: str, record_id: str, body: bytes) -> Dict[str, Any]:
    payload = _decode_object(body)
    rid = _parse_id(record_id)
    if payload.get(ID_FIELD) is not None:
        raise BadRequest("id field cannot be updated")

    fields = {k: v for k, v in payload.items() if k != ID_FIELD}
    columns = _columns(table)
    validate_fields(columns, fields)
    if not fields:
        raise BadRequest("no fields to update")

    t = _table(table, columns)
    stmt = (
        update(t)
        .where(_id_column(t) == rid)
        .values({t.c[name]: value for name, value in fields.items()})
    )
    try:
        with dbmod.engine.begin() as conn:
            updated = conn.execute(stmt).rowcount
    except SQLAlchemyError as e:
        monitoring.logger.exception("Record update failed", extra={"table": table})
        raise InternalError("failed to update record") from e

    if updated == 0:
        raise NotFound("record not found")
    return {"response": {"updated": updated}}


def delete_record(table: str, record_id: str) -> Dict[str, Any]:
    rid = _parse_id(record_id)
    columns = _columns(table)
    t = _table(table, columns)
    stmt = delete(t).where(_id_column(t) == rid)
    try:
        with dbmod.engine.begin() as conn:
            deleted = conn.execute(stmt).rowcount
    except SQLAlchemyError as e:
        monitoring.logger.exception("Record delete failed", extra={"table": table})
        raise InternalError("failed to delete record") from e

    # Flat envelope, unlike the other operations; existing clients depend on it
    return {"deleted": deleted}
