"""
Translation of a candidate struct into an entity schema.

The translator walks the struct's fields in declaration order, maps each
field type onto a column type, reads the ``dosa`` tags and assembles a
``SchemaEntity``. Any failure rejects the whole struct with a
``TranslationError``; nothing is emitted partially.
"""

import logging
from typing import Optional

from finder.config import ENTITY_PACKAGE, ENTITY_TYPE_NAME, IGNORE_TAG, TAG_KEY
from finder.models import FieldDecl, StructDecl, TypeShape
from schema.errors import EntityScanError, TranslationError
from schema.models import EntityDefinition, SchemaEntity
from schema.naming import normalize_name
from schema.tags import get_struct_tag, parse_entity_tag, parse_field_tag
from schema.types import Type, string_to_type

logger = logging.getLogger(__name__)


def is_exported(name: str) -> bool:
    """Go export rule: names starting with a lower-case letter are private."""
    return not name[:1].islower()


def type_label(
    field: FieldDecl,
    entity_type_name: str = ENTITY_TYPE_NAME,
    entity_package: str = ENTITY_PACKAGE,
) -> str:
    """Reduce a field's declared type to the label used for type mapping.

    Identifiers keep their name, byte arrays become ``[]byte`` and the only
    qualified types recognized are ``time.Time`` and the marker/UUID types
    of ``entity_package``. Anything else keeps its source text, which no
    column type maps to.
    """
    if field.shape is TypeShape.IDENTIFIER:
        return field.type_name or field.type_text
    if field.shape is TypeShape.ARRAY:
        if field.element == "byte":
            return "[]byte"
        return field.type_text
    if field.shape is TypeShape.QUALIFIED:
        if field.package == "time" and field.type_name == "Time":
            return "time.Time"
        if field.package == entity_package and field.type_name in (entity_type_name, "UUID"):
            return field.type_name
    return field.type_text


def translate_key_names(entity: SchemaEntity) -> None:
    """Rewrite primary key references into column names.

    A reference naming a Go field becomes that field's column name. Other
    references are normalized so ``(name)`` and ``(Name)`` both resolve to
    the ``name`` column; references that cannot be normalized are left
    as-is for validation to reject.
    """
    key = entity.definition.key
    if key is None:
        return

    def resolve(reference: str) -> str:
        if reference in entity.field_to_col:
            return entity.field_to_col[reference]
        try:
            return normalize_name(reference)
        except EntityScanError:
            return reference

    key.partition_keys = [resolve(name) for name in key.partition_keys]
    for clustering_key in key.clustering_keys:
        clustering_key.name = resolve(clustering_key.name)


def table_from_struct(
    struct: StructDecl,
    entity_type_name: str = ENTITY_TYPE_NAME,
    tag_key: str = TAG_KEY,
    entity_package: str = ENTITY_PACKAGE,
) -> SchemaEntity:
    """Convert a candidate struct into a ``SchemaEntity``.

    Args:
        struct: Struct accepted by ``is_entity_candidate``.
        entity_type_name: Marker type name.
        tag_key: Struct tag key holding entity and column options.
        entity_package: Package exporting the marker and UUID types.

    Returns:
        The validated entity.

    Raises:
        TranslationError: If the struct name, a field type, a tag or the
            assembled entity is invalid. The cause is chained.
    """

    def failure(
        message: str, field_name: Optional[str] = None, line: Optional[int] = None
    ) -> TranslationError:
        return TranslationError(
            message,
            struct_name=struct.name,
            field_name=field_name,
            file_path=struct.file_path,
            line=line if line is not None else struct.line,
        )

    try:
        normalized_name = normalize_name(struct.name)
    except EntityScanError as exc:
        raise failure("struct name is invalid") from exc

    entity = SchemaEntity(
        struct_name=struct.name,
        definition=EntityDefinition(name=normalized_name),
        file_path=struct.file_path,
        line=struct.line,
    )

    for field in struct.fields:
        dosa_tag = ""
        if field.tag is not None:
            dosa_tag = get_struct_tag(field.tag, tag_key).strip()
        if dosa_tag == IGNORE_TAG:
            logger.debug("%s: skipping ignored field %s", struct.name, field.names or field.type_text)
            continue

        kind = type_label(field, entity_type_name, entity_package)

        if kind == entity_type_name:
            # A later marker field overrides the name and key of an earlier one.
            try:
                entity.definition.name, entity.definition.key = parse_entity_tag(struct.name, dosa_tag)
            except EntityScanError as exc:
                raise failure(
                    "invalid entity tag",
                    field_name=field.names[0] if field.names else field.type_text,
                    line=field.line,
                ) from exc
            continue

        for name in field.names:
            if not is_exported(name):
                logger.debug("%s: skipping unexported field %s", struct.name, name)
                continue

            column_type = string_to_type(kind)
            if column_type is Type.INVALID:
                raise failure(
                    f"column {name!r} has invalid type {kind!r}",
                    field_name=name,
                    line=field.line,
                )
            try:
                column = parse_field_tag(column_type, name, dosa_tag)
            except EntityScanError as exc:
                raise failure(f"column {name!r}", field_name=name, line=field.line) from exc
            entity.add_column(column)

    translate_key_names(entity)
    try:
        entity.ensure_valid()
    except EntityScanError as exc:
        raise failure("failed to parse entity") from exc
    return entity
