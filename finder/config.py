"""
Configuration constants for Go entity discovery.

Defines the tree-sitter node type strings walked by the recorder and the
marker names that identify mapped entities.
"""

from typing import Set

# Type name of the marker field that must open every entity struct
ENTITY_TYPE_NAME: str = "Entity"

# Package that exports the marker and UUID types when referenced qualified
ENTITY_PACKAGE: str = "dosa"

# Struct tag key holding entity and column options
TAG_KEY: str = "dosa"

# Tag value that removes a field from the schema
IGNORE_TAG: str = "-"

# Containers whose named children may hold type declarations
CONTAINER_TYPES: Set[str] = {
    "source_file",           # File root
    "function_declaration",  # func f() { ... }
    "method_declaration",    # func (r T) f() { ... }
    "block",                 # { ... }
    "statement_list",        # Block body in newer grammars
}

# Declaration grouping `type X struct{}` / `type ( ... )`
TYPE_DECLARATION: str = "type_declaration"

# Specs inside a type declaration that bind a name to a type
TYPE_SPEC_TYPES: Set[str] = {
    "type_spec",
    "type_alias",
}

# Struct aggregate node
STRUCT_TYPE: str = "struct_type"

# Struct body and its members
FIELD_DECLARATION_LIST: str = "field_declaration_list"
FIELD_DECLARATION: str = "field_declaration"

# Field type node kinds
TYPE_IDENTIFIER: str = "type_identifier"
QUALIFIED_TYPE: str = "qualified_type"
ARRAY_TYPES: Set[str] = {
    "slice_type",  # []byte
    "array_type",  # [16]byte
}

# String literal kinds a field tag can be written with
INTERPRETED_STRING_LITERAL: str = "interpreted_string_literal"

STRING_LITERAL_TYPES: Set[str] = {
    "raw_string_literal",
    INTERPRETED_STRING_LITERAL,
}

# Go source file extension
GO_EXTENSION: str = ".go"

# Directories never entered by a recursive scan
SKIPPED_DIRECTORIES: Set[str] = {
    "vendor",
    "testdata",
    "node_modules",
}
