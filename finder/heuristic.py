"""
Structural filter deciding which structs are worth translating.

Most structs in a code base are not entities. Only those that open with a
tagged marker field are translated, so that translation failures reported as
warnings are the ones a developer actually intended to be entities.
"""

from finder.config import ENTITY_TYPE_NAME, TAG_KEY
from finder.models import StructDecl, TypeShape
from schema.tags import get_struct_tag


def is_entity_candidate(
    struct: StructDecl,
    entity_type_name: str = ENTITY_TYPE_NAME,
    tag_key: str = TAG_KEY,
) -> bool:
    """Check whether a struct is probably meant to be a mapped entity.

    The rules are:
     - it must have at least one field
     - a first field declared with a plain identifier type must use the
       marker type
     - the first field must carry a non-empty ``tag_key`` tag value

    Only the first field is inspected.
    """
    if not struct.fields:
        return False

    candidate = struct.fields[0]
    if candidate.shape is TypeShape.IDENTIFIER and candidate.type_name != entity_type_name:
        return False

    if candidate.tag is None:
        return False
    return get_struct_tag(candidate.tag, tag_key) != ""
