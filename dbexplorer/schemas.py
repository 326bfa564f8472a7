from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict

# Value domain shared by decoded JSON bodies and materialized rows
FieldValue = Union[int, float, str, None]


class ColumnKind(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"


class ColumnDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type_name: str  # declared type as reported by the dialect, e.g. "VARCHAR"
    kind: ColumnKind
