import pytest
from sqlalchemy.exc import OperationalError

from dbexplorer import db as dbmod
from dbexplorer import handlers
from dbexplorer import router
from dbexplorer.errors import InternalError, InvalidRequest, MethodNotAllowed, NotFound


@pytest.mark.parametrize("path,expected", [
    ("", ("", "")),
    ("/", ("", "")),
    ("/items", ("items", "")),
    ("/items/", ("items", "")),
    ("/items/7", ("items", "7")),
    ("items/7/extra", ("items", "7")),
])
def test_split_path(path, expected):
    assert router.split_path(path) == expected


@pytest.mark.parametrize("method,table,rid,expected", [
    ("GET", "", "", router.LIST_TABLES),
    ("GET", "items", "", router.LIST_RECORDS),
    ("GET", "items", "1", router.GET_RECORD),
    ("PUT", "items", "", router.CREATE_RECORD),
    ("PUT", "items", "1", router.INVALID_REQUEST),
    ("PUT", "", "", router.INVALID_REQUEST),
    ("POST", "items", "1", router.UPDATE_RECORD),
    ("POST", "items", "", router.INVALID_REQUEST),
    ("DELETE", "items", "1", router.DELETE_RECORD),
    ("DELETE", "items", "", router.INVALID_REQUEST),
    ("PATCH", "items", "1", router.METHOD_NOT_ALLOWED),
    ("get", "items", "", router.LIST_RECORDS),
])
def test_resolve_operation(method, table, rid, expected):
    assert router.resolve_operation(method, table, rid) == expected


def test_unknown_table_checked_before_method(monkeypatch):
    monkeypatch.setattr(dbmod, "table_exists", lambda name: False)
    for method in ("GET", "PUT", "POST", "DELETE", "PATCH"):
        with pytest.raises(NotFound) as exc:
            router.dispatch(method, "/ghost/1", {})
        assert exc.value.message == "unknown table"


def test_existence_failure_is_internal_error(monkeypatch):
    def boom(name):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr(dbmod, "table_exists", boom)
    with pytest.raises(InternalError) as exc:
        router.dispatch("GET", "/items", {})
    assert exc.value.message == "failed to check table existence"


def test_root_skips_existence_check(monkeypatch):
    def never(name):
        raise AssertionError("existence check must not run for /")

    monkeypatch.setattr(dbmod, "table_exists", never)
    monkeypatch.setattr(handlers, "list_tables", lambda: {"response": {"tables": []}})
    assert router.dispatch("GET", "/", {}) == {"response": {"tables": []}}
    with pytest.raises(InvalidRequest):
        router.dispatch("DELETE", "/", {})
    with pytest.raises(MethodNotAllowed):
        router.dispatch("PATCH", "/", {})


def test_dispatch_routes_to_handler(monkeypatch):
    calls = []
    monkeypatch.setattr(dbmod, "table_exists", lambda name: True)
    monkeypatch.setattr(handlers, "update_record", lambda table, rid, body: calls.append((table, rid, body)) or {"ok": 1})
    assert router.dispatch("POST", "/items/4", {}, b'{"title":"x"}') == {"ok": 1}
    assert calls == [("items", "4", b'{"title":"x"}')]


def test_describe_needs_no_database():
    assert router.describe("GET", "items/3") == router.GET_RECORD
    assert router.describe("TRACE", "") == router.METHOD_NOT_ALLOWED
