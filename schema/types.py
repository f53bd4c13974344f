"""
Schema column types and the source-type mapper.

Go field types are reduced to a short label by the translator (``string``,
``[]byte``, ``time.Time`` ...) and the label is mapped here onto the closed
set of column types the data-access layer understands.
"""

from enum import Enum
from typing import Dict


class Type(Enum):
    """Column types supported by the schema layer."""

    INVALID = "invalid"
    STRING = "string"
    BLOB = "blob"
    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    DOUBLE = "double"
    TIMESTAMP = "timestamp"
    UUID = "uuid"

    def __str__(self) -> str:
        return self.value


# Type label -> column type. Matching is exact and case-sensitive.
_LABEL_TO_TYPE: Dict[str, Type] = {
    "string": Type.STRING,
    "[]byte": Type.BLOB,
    "bool": Type.BOOL,
    "int32": Type.INT32,
    "int64": Type.INT64,
    "float64": Type.DOUBLE,
    "time.Time": Type.TIMESTAMP,
    "UUID": Type.UUID,
}


def string_to_type(label: str) -> Type:
    """Map a Go type label to a column type.

    Args:
        label: Type label produced by the translator.

    Returns:
        The matching column type, or ``Type.INVALID`` for unsupported labels.

    Example:
        >>> string_to_type("int64")
        <Type.INT64: 'int64'>
        >>> string_to_type("int")
        <Type.INVALID: 'invalid'>
    """
    return _LABEL_TO_TYPE.get(label, Type.INVALID)
