"""
Parser-independent shapes of Go struct declarations.

The recorder converts tree-sitter nodes into these small records so that the
heuristic and the translator never touch the syntax tree directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TypeShape(Enum):
    """Syntactic shape of a field's declared type."""

    IDENTIFIER = "identifier"  # string, Entity, UUID
    ARRAY = "array"            # []byte, [16]byte
    QUALIFIED = "qualified"    # time.Time, dosa.Entity
    OTHER = "other"            # pointers, maps, generics, inline structs ...


@dataclass
class FieldDecl:
    """One field declaration of a struct.

    A declaration may bind several names to one type (``A, B string``);
    embedded fields bind none.

    Attributes:
        names: Field names bound by the declaration
        shape: Shape of the declared type
        type_text: Source text of the declared type
        type_name: Identifier for IDENTIFIER, selected name for QUALIFIED
        element: Element type identifier for ARRAY, if it is one
        package: Package identifier for QUALIFIED
        tag: Decoded struct tag, or None when the field has no tag
        line: 1-indexed line of the declaration
    """

    names: List[str]
    shape: TypeShape
    type_text: str
    type_name: Optional[str] = None
    element: Optional[str] = None
    package: Optional[str] = None
    tag: Optional[str] = None
    line: Optional[int] = None

    @property
    def is_embedded(self) -> bool:
        return not self.names


@dataclass
class StructDecl:
    """A named struct type found in a source file."""

    name: str
    fields: List[FieldDecl] = field(default_factory=list)
    file_path: Optional[str] = None
    line: Optional[int] = None
