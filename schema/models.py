"""
Data models for extracted entity schemas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from schema.errors import EntityValidationError
from schema.naming import is_valid_name
from schema.types import Type


@dataclass
class ClusteringKey:
    """A clustering column of a primary key and its sort order."""

    name: str
    descending: bool = False

    def __str__(self) -> str:
        return f"{self.name} {'DESC' if self.descending else 'ASC'}"


@dataclass
class PrimaryKey:
    """Primary key made of partition keys followed by clustering keys."""

    partition_keys: List[str] = field(default_factory=list)
    clustering_keys: List[ClusteringKey] = field(default_factory=list)

    def key_columns(self) -> List[str]:
        """Return every column name referenced by the key, in key order."""
        return list(self.partition_keys) + [ck.name for ck in self.clustering_keys]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "partition_keys": list(self.partition_keys),
            "clustering_keys": [
                {"name": ck.name, "descending": ck.descending}
                for ck in self.clustering_keys
            ],
        }

    def __str__(self) -> str:
        if len(self.partition_keys) == 1:
            partition = self.partition_keys[0]
        else:
            partition = "(" + ", ".join(self.partition_keys) + ")"
        parts = [partition] + [str(ck) for ck in self.clustering_keys]
        return "(" + ", ".join(parts) + ")"


@dataclass
class ColumnDefinition:
    """One mapped struct field.

    Attributes:
        name: Schema column name (normalized, or the tag's ``name=`` override)
        type: Column type, never ``Type.INVALID`` once attached to an entity
        field_name: Go field name the column is read from
    """

    name: str
    type: Type
    field_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type.value, "field_name": self.field_name}


@dataclass
class EntityDefinition:
    """Schema-facing description of an entity: name, key and columns."""

    name: str
    key: Optional[PrimaryKey] = None
    columns: List[ColumnDefinition] = field(default_factory=list)

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def ensure_valid(self) -> None:
        """Check the definition is complete and self-consistent.

        Raises:
            EntityValidationError: Describing the first problem found.
        """
        if not is_valid_name(self.name):
            raise EntityValidationError(f"entity name {self.name!r} is invalid")
        if not self.columns:
            raise EntityValidationError(f"entity {self.name!r} has no columns")

        seen = set()
        for column in self.columns:
            if not is_valid_name(column.name):
                raise EntityValidationError(f"column name {column.name!r} is invalid")
            if column.name in seen:
                raise EntityValidationError(f"duplicate column name {column.name!r}")
            if column.type is Type.INVALID:
                raise EntityValidationError(f"column {column.name!r} has an invalid type")
            seen.add(column.name)

        if self.key is None:
            raise EntityValidationError(f"entity {self.name!r} has no primary key")
        if not self.key.partition_keys:
            raise EntityValidationError(
                f"primary key of entity {self.name!r} has no partition key"
            )

        used = set()
        for key_name in self.key.key_columns():
            if key_name not in seen:
                raise EntityValidationError(
                    f"primary key references unknown column {key_name!r}"
                )
            if key_name in used:
                raise EntityValidationError(
                    f"column {key_name!r} appears more than once in the primary key"
                )
            used.add(key_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "key": self.key.to_dict() if self.key is not None else None,
            "columns": [c.to_dict() for c in self.columns],
        }


@dataclass
class SchemaEntity:
    """A Go struct translated into an entity schema.

    Attributes:
        struct_name: Go identifier of the struct
        definition: Normalized entity definition
        col_to_field: Column name -> Go field name
        field_to_col: Go field name -> column name
        file_path: Source file the struct was declared in, if known
        line: 1-indexed line of the struct declaration, if known
    """

    struct_name: str
    definition: EntityDefinition
    col_to_field: Dict[str, str] = field(default_factory=dict)
    field_to_col: Dict[str, str] = field(default_factory=dict)
    file_path: Optional[str] = None
    line: Optional[int] = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def key(self) -> Optional[PrimaryKey]:
        return self.definition.key

    @property
    def columns(self) -> List[ColumnDefinition]:
        return self.definition.columns

    def add_column(self, column: ColumnDefinition) -> None:
        """Append a column and register both mapping directions."""
        self.definition.columns.append(column)
        self.col_to_field[column.name] = column.field_name
        self.field_to_col[column.field_name] = column.name

    def ensure_valid(self) -> None:
        self.definition.ensure_valid()
        inverse = {col: fld for fld, col in self.field_to_col.items()}
        if inverse != self.col_to_field or len(inverse) != len(self.field_to_col):
            raise EntityValidationError(
                f"column and field mappings of {self.struct_name!r} are inconsistent"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entity to a dictionary suitable for JSON serialization."""
        payload = self.definition.to_dict()
        payload.update(
            {
                "struct_name": self.struct_name,
                "col_to_field": dict(self.col_to_field),
                "field_to_col": dict(self.field_to_col),
                "file_path": self.file_path,
                "line": self.line,
            }
        )
        return payload
