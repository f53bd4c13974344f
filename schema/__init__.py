"""
Schema layer

Column types, entity definitions, name normalization and the ``dosa``
struct-tag mini-language used to describe mapped entities.
"""

from schema.errors import (
    EntityScanError,
    EntityValidationError,
    InvalidNameError,
    SourceParseError,
    TagSyntaxError,
    TranslationError,
)
from schema.types import Type, string_to_type
from schema.naming import is_valid_name, normalize_name
from schema.models import (
    ClusteringKey,
    ColumnDefinition,
    EntityDefinition,
    PrimaryKey,
    SchemaEntity,
)
from schema.tags import (
    get_struct_tag,
    lookup_struct_tag,
    parse_entity_tag,
    parse_field_tag,
    parse_primary_key,
)

__all__ = [
    # Errors
    "EntityScanError",
    "EntityValidationError",
    "InvalidNameError",
    "SourceParseError",
    "TagSyntaxError",
    "TranslationError",
    # Types
    "Type",
    "string_to_type",
    # Naming
    "is_valid_name",
    "normalize_name",
    # Models
    "ClusteringKey",
    "ColumnDefinition",
    "EntityDefinition",
    "PrimaryKey",
    "SchemaEntity",
    # Tags
    "get_struct_tag",
    "lookup_struct_tag",
    "parse_entity_tag",
    "parse_field_tag",
    "parse_primary_key",
]
