"""
Struct-tag handling.

Two layers live here:

- ``lookup_struct_tag`` reads one key out of a raw Go struct tag, following
  the conventional ``key:"value" key2:"value2"`` format understood by Go's
  ``reflect.StructTag``.
- The ``dosa`` mini-language carried inside that value:

  - entity tag (on the marker field): ``name=<entity> primaryKey=<key>``
  - field tag (on ordinary fields): ``name=<column>``

  Options are separated by whitespace or commas; ``key`` is accepted as an
  alias of ``primaryKey``. A primary key is written ``PK``,
  ``(PK, CK1, CK2 DESC)`` or ``((PK1, PK2), CK ASC)``.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from schema.errors import InvalidNameError, TagSyntaxError
from schema.models import ClusteringKey, ColumnDefinition, PrimaryKey
from schema.naming import is_valid_name, normalize_name
from schema.types import Type

_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    '"': '"',
}
_HEX_ESCAPE_WIDTH = {"x": 2, "u": 4, "U": 8}
_OCTAL_DIGITS = "01234567"
_EQUALS_RE = re.compile(r"\s*=\s*")

_PRIMARY_KEY_OPTIONS = ("primaryKey", "key")


def unquote_go_string(quoted: str) -> str:
    """Decode a Go string literal (interpreted ``"..."`` or raw ```...```).

    ``\\x`` and octal escapes denote single bytes, as in Go, so
    ``"\\xc3\\xa9"`` decodes to ``"é"``. Bytes that do not form valid UTF-8
    survive as surrogate escapes.

    Raises:
        TagSyntaxError: If the literal is malformed.
    """
    if len(quoted) < 2 or quoted[0] != quoted[-1] or quoted[0] not in "\"`":
        raise TagSyntaxError(f"invalid string literal {quoted!r}")

    body = quoted[1:-1]
    if quoted[0] == "`":
        if "`" in body:
            raise TagSyntaxError(f"invalid raw string literal {quoted!r}")
        return body.replace("\r", "")

    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch in ('"', "\n"):
            raise TagSyntaxError(f"invalid string literal {quoted!r}")
        if ch != "\\":
            out += ch.encode("utf-8", "surrogateescape")
            i += 1
            continue

        i += 1
        if i >= len(body):
            raise TagSyntaxError(f"unterminated escape in {quoted!r}")
        esc = body[i]
        if esc in _SIMPLE_ESCAPES:
            out += _SIMPLE_ESCAPES[esc].encode("ascii")
            i += 1
        elif esc in _HEX_ESCAPE_WIDTH:
            width = _HEX_ESCAPE_WIDTH[esc]
            digits = body[i + 1:i + 1 + width]
            if len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise TagSyntaxError(f"invalid \\{esc} escape in {quoted!r}")
            value = int(digits, 16)
            if esc == "x":
                out.append(value)
            elif 0xD800 <= value <= 0xDFFF or value > 0x10FFFF:
                raise TagSyntaxError(f"escape \\{esc}{digits} is not a valid code point in {quoted!r}")
            else:
                out += chr(value).encode("utf-8")
            i += 1 + width
        elif esc in _OCTAL_DIGITS:
            digits = body[i:i + 3]
            if len(digits) != 3 or not all(c in _OCTAL_DIGITS for c in digits):
                raise TagSyntaxError(f"invalid octal escape in {quoted!r}")
            value = int(digits, 8)
            if value > 0xFF:
                raise TagSyntaxError(f"octal escape \\{digits} exceeds 255 in {quoted!r}")
            out.append(value)
            i += 3
        else:
            raise TagSyntaxError(f"unknown escape \\{esc} in {quoted!r}")
    return out.decode("utf-8", "surrogateescape")


def lookup_struct_tag(tag: str, key: str) -> Tuple[str, bool]:
    """Look up ``key`` in a raw struct tag.

    Scanning stops silently at the first malformed pair, which mirrors how
    Go itself treats tags that do not follow the convention.

    Returns:
        ``(value, found)``; ``("", False)`` when the key is absent.

    Example:
        >>> lookup_struct_tag('json:"id" dosa:"name=id"', "dosa")
        ('name=id', True)
    """
    while tag:
        tag = tag.lstrip(" ")
        if not tag:
            break

        i = 0
        while i < len(tag) and tag[i] > " " and tag[i] not in ':"' and tag[i] != "\x7f":
            i += 1
        if i == 0 or i + 1 >= len(tag) or tag[i] != ":" or tag[i + 1] != '"':
            break
        name = tag[:i]
        tag = tag[i + 1:]

        i = 1
        while i < len(tag) and tag[i] != '"':
            if tag[i] == "\\":
                i += 1
            i += 1
        if i >= len(tag):
            break
        quoted = tag[:i + 1]
        tag = tag[i + 1:]

        if name == key:
            try:
                return unquote_go_string(quoted), True
            except TagSyntaxError:
                break
    return "", False


def get_struct_tag(tag: str, key: str) -> str:
    """Return the value stored under ``key``, or an empty string."""
    value, _ = lookup_struct_tag(tag, key)
    return value


def _split_top_level(text: str, separators: str) -> List[str]:
    """Split on any of ``separators`` while outside parentheses."""
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise TagSyntaxError(f"unbalanced parentheses in {text!r}")
        if depth == 0 and ch in separators:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    if depth != 0:
        raise TagSyntaxError(f"unbalanced parentheses in {text!r}")
    parts.append("".join(current))
    return parts


def parse_tag_options(text: str) -> List[Tuple[str, str]]:
    """Split a ``dosa`` tag value into ``(option, value)`` pairs."""
    text = _EQUALS_RE.sub("=", text.strip())
    options: List[Tuple[str, str]] = []
    for token in _split_top_level(text, " \t\n,"):
        if not token:
            continue
        option, sep, value = token.partition("=")
        if not sep or not option:
            raise TagSyntaxError(f"expected option=value, got {token!r}")
        if not value:
            raise TagSyntaxError(f"option {option!r} has an empty value")
        options.append((option, value))
    return options


def _parse_key_name(raw: str) -> str:
    name = raw.strip()
    if not is_valid_name(name):
        raise TagSyntaxError(f"invalid key column name {name!r}")
    return name


def _parse_clustering_key(raw: str) -> ClusteringKey:
    parts = raw.split()
    if len(parts) == 1:
        return ClusteringKey(name=_parse_key_name(parts[0]))
    if len(parts) == 2 and parts[1].upper() in ("ASC", "DESC"):
        return ClusteringKey(
            name=_parse_key_name(parts[0]),
            descending=parts[1].upper() == "DESC",
        )
    raise TagSyntaxError(f"invalid clustering key {raw.strip()!r}")


def parse_primary_key(text: str) -> PrimaryKey:
    """Parse a primary key expression.

    Example:
        >>> parse_primary_key("((Region, ID), CreatedAt DESC)").partition_keys
        ['Region', 'ID']
    """
    text = text.strip()
    if not text:
        raise TagSyntaxError("primary key cannot be empty")
    if not text.startswith("("):
        return PrimaryKey(partition_keys=[_parse_key_name(text)])
    if not text.endswith(")"):
        raise TagSyntaxError(f"invalid primary key {text!r}")

    items = [item.strip() for item in _split_top_level(text[1:-1], ",")]
    if not items or any(not item for item in items):
        raise TagSyntaxError(f"invalid primary key {text!r}")

    first = items[0]
    if first.startswith("("):
        if not first.endswith(")"):
            raise TagSyntaxError(f"invalid partition key {first!r}")
        partition_keys = [_parse_key_name(name) for name in first[1:-1].split(",")]
    else:
        partition_keys = [_parse_key_name(first)]

    return PrimaryKey(
        partition_keys=partition_keys,
        clustering_keys=[_parse_clustering_key(item) for item in items[1:]],
    )


def parse_entity_tag(struct_name: str, tag: str) -> Tuple[str, PrimaryKey]:
    """Parse the tag on a marker field into an entity name and primary key.

    Args:
        struct_name: Go name of the struct; its normalized form is the
            entity name unless the tag carries ``name=``.
        tag: Value of the ``dosa`` struct tag.

    Returns:
        ``(entity_name, primary_key)``.

    Raises:
        TagSyntaxError: For unknown or repeated options, a malformed key,
            or a missing primary key.
        InvalidNameError: If the resulting entity name is invalid.
    """
    name = None
    key = None
    seen = set()
    for option, value in parse_tag_options(tag):
        canonical = "primaryKey" if option in _PRIMARY_KEY_OPTIONS else option
        if canonical in seen:
            raise TagSyntaxError(f"option {option!r} given more than once")
        seen.add(canonical)

        if option == "name":
            name = normalize_name(value)
        elif option in _PRIMARY_KEY_OPTIONS:
            key = parse_primary_key(value)
        else:
            raise TagSyntaxError(f"unrecognized entity tag option {option!r}")

    if key is None:
        raise TagSyntaxError(f"entity tag {tag!r} does not declare a primaryKey")
    if name is None:
        name = normalize_name(struct_name)
    return name, key


def parse_field_tag(column_type: Type, field_name: str, tag: str) -> ColumnDefinition:
    """Build the column definition for one struct field."""
    column_name = None
    for option, value in parse_tag_options(tag):
        if option != "name":
            raise TagSyntaxError(f"unrecognized field tag option {option!r}")
        if column_name is not None:
            raise TagSyntaxError("option 'name' given more than once")
        column_name = normalize_name(value)

    if column_name is None:
        try:
            column_name = normalize_name(field_name)
        except InvalidNameError as exc:
            raise InvalidNameError(f"field {field_name!r}: {exc}") from exc
    return ColumnDefinition(name=column_name, type=column_type, field_name=field_name)
