# dbexplorer/materializer.py
"""
Turn database result rows into plain JSON-ready dicts.

Each value is converted according to its column's ColumnKind:
INTEGER -> int, FLOAT -> float, TEXT -> str, and NULL -> None regardless of kind.
Columns with no descriptor are treated as TEXT.
"""

from typing import Any, Dict, List, Mapping

from dbexplorer.schemas import ColumnDescriptor, ColumnKind, FieldValue


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def convert_value(kind: ColumnKind, value: Any) -> FieldValue:
    if value is None:
        return None
    if kind is ColumnKind.INTEGER:
        return int(value)
    if kind is ColumnKind.FLOAT:
        return float(value)
    return _as_text(value)


def materialize_row(row: Mapping[str, Any], columns: Mapping[str, ColumnDescriptor]) -> Dict[str, FieldValue]:
    record: Dict[str, FieldValue] = {}
    for name, value in row.items():
        column = columns.get(name)
        kind = column.kind if column is not None else ColumnKind.TEXT
        record[name] = convert_value(kind, value)
    return record


def materialize_rows(rows, columns: Mapping[str, ColumnDescriptor]) -> List[Dict[str, FieldValue]]:
    return [materialize_row(row, columns) for row in rows]
