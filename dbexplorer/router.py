# dbexplorer/router.py
"""
Maps an HTTP method + path onto a table operation.

Paths have at most two meaningful segments: /{table}/{id}. Extra segments
are ignored. When a table is named, its existence is checked before the
method is even looked at, so an unknown table is always a 404.

    GET    /               -> list_tables
    GET    /{table}        -> list_records
    GET    /{table}/{id}   -> get_record
    PUT    /{table}        -> create_record
    POST   /{table}/{id}   -> update_record
    DELETE /{table}/{id}   -> delete_record
"""

from typing import Any, Dict, Mapping, Tuple

from sqlalchemy.exc import SQLAlchemyError

from dbexplorer import db as dbmod
from dbexplorer import handlers
from dbexplorer import monitoring
from dbexplorer.errors import InternalError, InvalidRequest, MethodNotAllowed, NotFound

LIST_TABLES = "list_tables"
LIST_RECORDS = "list_records"
GET_RECORD = "get_record"
CREATE_RECORD = "create_record"
UPDATE_RECORD = "update_record"
DELETE_RECORD = "delete_record"
INVALID_REQUEST = "invalid_request"
METHOD_NOT_ALLOWED = "method_not_allowed"


def split_path(path: str) -> Tuple[str, str]:
    """Return (table, id); either may be empty."""
    parts = path.strip("/").split("/")
    table = parts[0]
    record_id = parts[1] if len(parts) > 1 else ""
    return table, record_id


def resolve_operation(method: str, table: str, record_id: str) -> str:
    method = method.upper()
    if method == "GET":
        if not table:
            return LIST_TABLES
        return GET_RECORD if record_id else LIST_RECORDS
    if method == "PUT":
        return CREATE_RECORD if table and not record_id else INVALID_REQUEST
    if method == "POST":
        return UPDATE_RECORD if table and record_id else INVALID_REQUEST
    if method == "DELETE":
        return DELETE_RECORD if table and record_id else INVALID_REQUEST
    return METHOD_NOT_ALLOWED


def describe(method: str, path: str) -> str:
    """Operation name for a request, without touching the database (used for metrics labels)."""
    table, record_id = split_path(path)
    return resolve_operation(method, table, record_id)


def ensure_table(table: str) -> None:
    try:
        exists = dbmod.table_exists(table)
    except SQLAlchemyError as e:
        monitoring.logger.exception("Table existence check failed", extra={"table": table})
        raise InternalError("failed to check table existence") from e
    if not exists:
        raise NotFound("unknown table")


def dispatch(method: str, path: str, params: Mapping[str, str], body: bytes = b"") -> Dict[str, Any]:
    """Run the operation selected by method + path and return its JSON body."""
    table, record_id = split_path(path)
    if table:
        ensure_table(table)

    operation = resolve_operation(method, table, record_id)
    if operation == LIST_TABLES:
        return handlers.list_tables()
    if operation == LIST_RECORDS:
        return handlers.list_records(table, params)
    if operation == GET_RECORD:
        return handlers.get_record(table, record_id)
    if operation == CREATE_RECORD:
        return handlers.create_record(table, body)
    if operation == UPDATE_RECORD:
        return handlers.update_record(table, record_id, body)
    if operation == DELETE_RECORD:
        return handlers.delete_record(table, record_id)
    if operation == INVALID_REQUEST:
        raise InvalidRequest("invalid request")
    raise MethodNotAllowed("method not allowed")
