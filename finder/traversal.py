"""
AST traversal and entity recording.

This module walks tree-sitter Go syntax trees, converts struct type specs
into ``StructDecl`` records and routes entity candidates through the
translator, collecting entities and warnings.
"""

import logging
from typing import List, Optional

from tree_sitter import Node, Tree

from finder.config import (
    ARRAY_TYPES,
    CONTAINER_TYPES,
    ENTITY_PACKAGE,
    ENTITY_TYPE_NAME,
    FIELD_DECLARATION,
    FIELD_DECLARATION_LIST,
    QUALIFIED_TYPE,
    STRING_LITERAL_TYPES,
    STRUCT_TYPE,
    TAG_KEY,
    TYPE_DECLARATION,
    TYPE_IDENTIFIER,
    TYPE_SPEC_TYPES,
)
from finder.heuristic import is_entity_candidate
from finder.models import FieldDecl, StructDecl, TypeShape
from finder.translator import table_from_struct
from schema.errors import TranslationError
from schema.models import SchemaEntity
from schema.tags import unquote_go_string

logger = logging.getLogger(__name__)


def node_text(node: Optional[Node]) -> str:
    """Decode the source text of a node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _find_child_by_type(node: Node, child_type: str) -> Optional[Node]:
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def field_from_node(node: Node) -> FieldDecl:
    """Convert a ``field_declaration`` node into a ``FieldDecl``.

    Args:
        node: A field_declaration node.

    Returns:
        The field's names, type shape and decoded tag.
    """
    names = [node_text(n) for n in node.children_by_field_name("name")]
    type_node = node.child_by_field_name("type")
    tag_node = node.child_by_field_name("tag")

    # Embedded pointers (`*Entity`) keep the star outside the type node.
    is_embedded_pointer = not names and any(c.type == "*" for c in node.children)
    type_text = ("*" if is_embedded_pointer else "") + node_text(type_node)

    field = FieldDecl(
        names=names,
        shape=TypeShape.OTHER,
        type_text=type_text,
        line=node.start_point.row + 1,
    )

    if tag_node is not None and tag_node.type in STRING_LITERAL_TYPES:
        field.tag = unquote_go_string(node_text(tag_node))

    if type_node is None or is_embedded_pointer:
        return field

    if type_node.type == TYPE_IDENTIFIER:
        field.shape = TypeShape.IDENTIFIER
        field.type_name = node_text(type_node)
    elif type_node.type in ARRAY_TYPES:
        field.shape = TypeShape.ARRAY
        element = type_node.child_by_field_name("element")
        if element is not None and element.type == TYPE_IDENTIFIER:
            field.element = node_text(element)
    elif type_node.type == QUALIFIED_TYPE:
        field.shape = TypeShape.QUALIFIED
        field.package = node_text(type_node.child_by_field_name("package"))
        field.type_name = node_text(type_node.child_by_field_name("name"))

    return field


def struct_from_node(name: str, struct_node: Node, file_path: Optional[str] = None) -> StructDecl:
    """Convert a ``struct_type`` node into a ``StructDecl``."""
    struct = StructDecl(name=name, file_path=file_path, line=struct_node.start_point.row + 1)
    field_list = _find_child_by_type(struct_node, FIELD_DECLARATION_LIST)
    if field_list is None:
        return struct
    for child in field_list.named_children:
        if child.type == FIELD_DECLARATION:
            struct.fields.append(field_from_node(child))
    return struct


class EntityRecorder:
    """Records the entities found while walking syntax trees.

    Structs that fail the ``is_entity_candidate`` test are ignored. Structs
    that pass it are translated; failures are kept in ``warnings`` and do
    not stop the walk.
    """

    def __init__(
        self,
        entity_type_name: str = ENTITY_TYPE_NAME,
        tag_key: str = TAG_KEY,
        entity_package: str = ENTITY_PACKAGE,
    ):
        self.entity_type_name = entity_type_name
        self.tag_key = tag_key
        self.entity_package = entity_package
        self.entities: List[SchemaEntity] = []
        self.warnings: List[TranslationError] = []
        self.structs_seen = 0
        self.candidates = 0

    def record_tree(self, tree: Tree, file_path: Optional[str] = None) -> None:
        """Walk a whole parsed file."""
        self.visit(tree.root_node, file_path)

    def visit(self, node: Node, file_path: Optional[str] = None) -> None:
        """Visit a node, recursing only through declaration containers."""
        if node.type in CONTAINER_TYPES or node.type == TYPE_DECLARATION:
            for child in node.named_children:
                self.visit(child, file_path)
        elif node.type in TYPE_SPEC_TYPES:
            self.record_type_spec(node, file_path)

    def record_type_spec(self, node: Node, file_path: Optional[str] = None) -> None:
        """Evaluate one type spec; its body is never walked further."""
        type_node = node.child_by_field_name("type")
        if type_node is None or type_node.type != STRUCT_TYPE:
            return

        name = node_text(node.child_by_field_name("name"))
        struct = struct_from_node(name, type_node, file_path)
        struct.line = node.start_point.row + 1
        self.structs_seen += 1

        if not is_entity_candidate(struct, self.entity_type_name, self.tag_key):
            logger.debug("%s: %s is not an entity candidate", file_path, name)
            return

        self.candidates += 1
        try:
            entity = table_from_struct(
                struct,
                entity_type_name=self.entity_type_name,
                tag_key=self.tag_key,
                entity_package=self.entity_package,
            )
        except TranslationError as e:
            logger.warning("Skipping entity candidate: %s", e)
            self.warnings.append(e)
            return

        logger.debug("Recorded entity %s from struct %s", entity.name, name)
        self.entities.append(entity)
