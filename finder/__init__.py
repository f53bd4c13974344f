"""
Entity discovery engine

Tree-sitter-based Go source parser that finds structs declared as mapped
entities and translates them into entity schemas.
"""

from finder.models import FieldDecl, StructDecl, TypeShape
from finder.parser import (
    create_parser,
    parse_file,
    parse_bytes,
    parse_source,
    parse_directory,
    discover_go_files,
    count_error_nodes,
)
from finder.heuristic import is_entity_candidate
from finder.translator import table_from_struct, translate_key_names, type_label
from finder.traversal import EntityRecorder
from finder.scanner import ScanResult, ScanStats, find_entities, scan_directory, scan_source

__all__ = [
    # Source shapes
    "FieldDecl",
    "StructDecl",
    "TypeShape",
    # Low-level parsing
    "create_parser",
    "parse_file",
    "parse_bytes",
    "parse_source",
    "parse_directory",
    "discover_go_files",
    "count_error_nodes",
    # Entity recognition and translation
    "is_entity_candidate",
    "table_from_struct",
    "translate_key_names",
    "type_label",
    "EntityRecorder",
    # High-level orchestration
    "ScanResult",
    "ScanStats",
    "find_entities",
    "scan_directory",
    "scan_source",
]
