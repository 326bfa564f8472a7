# dbexplorer/coercion.py
"""
Column type classification and JSON value validation.

Provides:
- classify_type(type_name) -> ColumnKind
- check_value(columns, name, value) -> bool
- validate_fields(columns, fields) -> raises BadRequest on the first bad field

Only two JSON kinds are accepted for writes: numbers for INTEGER/FLOAT
columns and strings for TEXT columns. Everything else (null, bool, arrays,
objects) is rejected. INTEGER columns additionally need an integral value,
and integers must fit in signed 64 bits.
"""

from typing import Any, Dict, Iterable, Mapping

from dbexplorer.errors import BadRequest
from dbexplorer.schemas import ColumnDescriptor, ColumnKind

INTEGER_TYPES = frozenset({"INT", "INTEGER", "BIGINT", "TINYINT", "MEDIUMINT", "SMALLINT"})
FLOAT_TYPES = frozenset({"FLOAT", "DOUBLE", "DECIMAL"})

# Drivers bind Python ints as signed 64-bit
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def _base_type_name(type_name: str) -> str:
    # "DECIMAL(10, 2)" -> "DECIMAL", "DOUBLE PRECISION" -> "DOUBLE"
    head = (type_name or "").split("(", 1)[0].strip().upper()
    return head.split()[0] if head else ""


def classify_type(type_name: str) -> ColumnKind:
    base = _base_type_name(type_name)
    if base in INTEGER_TYPES:
        return ColumnKind.INTEGER
    if base in FLOAT_TYPES:
        return ColumnKind.FLOAT
    return ColumnKind.TEXT


def fits_int64(n: int) -> bool:
    return INT64_MIN <= n <= INT64_MAX


def is_json_number(value: Any) -> bool:
    # bool is an int subclass but JSON true/false are not numbers
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return fits_int64(value)
    return isinstance(value, float)


def is_json_integer(value: Any) -> bool:
    # 3.0 is accepted, 1.5 would be truncated by the column
    if not is_json_number(value):
        return False
    return isinstance(value, int) or (value.is_integer() and fits_int64(int(value)))


def value_matches(kind: ColumnKind, value: Any) -> bool:
    if kind is ColumnKind.INTEGER:
        return is_json_integer(value)
    if kind is ColumnKind.FLOAT:
        return is_json_number(value)
    if kind is ColumnKind.TEXT:
        return isinstance(value, str)
    return False


def columns_by_name(columns: Iterable[ColumnDescriptor]) -> Dict[str, ColumnDescriptor]:
    return {c.name: c for c in columns}


def check_value(columns: Mapping[str, ColumnDescriptor], name: str, value: Any) -> bool:
    """Return True if `value` may be written to column `name`; unknown columns never match."""
    column = columns.get(name)
    if column is None:
        return False
    return value_matches(column.kind, value)


def validate_fields(columns: Mapping[str, ColumnDescriptor], fields: Mapping[str, Any]) -> None:
    for name, value in fields.items():
        if not check_value(columns, name, value):
            raise BadRequest(f"field {name} have invalid type")
