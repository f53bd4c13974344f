"""Name validation and normalization for entities, columns and keys."""

from __future__ import annotations

import re

from schema.errors import InvalidNameError

MAX_NAME_LENGTH = 32

_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def is_valid_name(name: str) -> bool:
    """Check whether ``name`` is usable as a schema identifier."""
    return bool(_NAME_RE.match(name)) and len(name) <= MAX_NAME_LENGTH


def normalize_name(name: str) -> str:
    """Normalize a source identifier into its schema-facing form.

    Raises:
        InvalidNameError: If the name is empty, too long, or contains
            characters other than ASCII letters, digits and underscores.
    """
    if not name:
        raise InvalidNameError("name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"name {name!r} is too long ({len(name)} > {MAX_NAME_LENGTH})"
        )
    if not _NAME_RE.match(name):
        raise InvalidNameError(
            f"name {name!r} must start with a letter or underscore and "
            "contain only letters, digits and underscores"
        )
    return name.lower()
