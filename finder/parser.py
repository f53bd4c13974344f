"""
Tree-sitter parser initialization and Go source discovery.

This module provides functions to initialize the Go parser, find the source
files of a directory and parse them as one all-or-nothing batch.
"""

import fnmatch
import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Tuple

import tree_sitter_go as tsgo
from tree_sitter import Language, Node, Parser, Tree

from finder.config import GO_EXTENSION, INTERPRETED_STRING_LITERAL, SKIPPED_DIRECTORIES
from schema.errors import SourceParseError, TagSyntaxError
from schema.tags import unquote_go_string

logger = logging.getLogger(__name__)

# Module-level language constant
GO_LANGUAGE = Language(tsgo.language())


@dataclass
class ParsedFile:
    """A successfully parsed source file."""

    relative_path: str
    tree: Tree


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for Go.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"package main")
    """
    parser = Parser(GO_LANGUAGE)
    logger.debug("Created tree-sitter Go parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of Go source code.

    Args:
        source: UTF-8 encoded bytes of Go source code.

    Returns:
        A Tree object representing the parsed AST. Syntax errors are kept
        in the tree as ERROR/missing nodes.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"package main")
        >>> tree.root_node.type
        'source_file'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    tree = create_parser().parse(source)
    logger.debug("Parsed %d bytes of Go code", len(source))
    return tree


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and missing nodes in a parsed tree."""
    count = 0
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count


def first_error_line(tree: Tree) -> Optional[int]:
    """Return the 1-indexed line of the first syntax error, if any."""
    node: Node = tree.root_node
    if not node.has_error:
        return None
    while node.type != "ERROR" and not node.is_missing:
        child = next((c for c in node.children if c.has_error), None)
        if child is None:
            break
        node = child
    return node.start_point.row + 1


def first_invalid_string(tree: Tree) -> Optional[Tuple[int, str]]:
    """Find the first interpreted string literal the Go scanner would reject.

    Returns:
        ``(line, reason)`` for the first bad literal, or None.
    """
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == INTERPRETED_STRING_LITERAL:
            try:
                unquote_go_string(node.text.decode("utf-8"))
            except TagSyntaxError as e:
                return node.start_point.row + 1, str(e)
            continue
        stack.extend(reversed(node.children))
    return None


def parse_source(source: bytes, file_path: str) -> Tree:
    """Parse Go source, rejecting input the Go toolchain would reject.

    tree-sitter accepts any bytes and any backslash escape, so the UTF-8
    encoding and every interpreted string literal are checked as well.

    Raises:
        SourceParseError: If the source is not UTF-8, has syntax errors or
            holds a malformed string literal.
        TypeError: If source is not bytes.
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as e:
        line = source.count(b"\n", 0, e.start) + 1
        raise SourceParseError(file_path, 1, line, reason="invalid UTF-8 encoding") from e

    tree = parse_bytes(source)
    if tree.root_node.has_error:
        raise SourceParseError(file_path, count_error_nodes(tree), first_error_line(tree))

    invalid = first_invalid_string(tree)
    if invalid is not None:
        line, reason = invalid
        raise SourceParseError(file_path, 1, line, reason=reason)
    return tree


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a Go source file from disk.

    Returns:
        A tuple of (Tree, source_bytes).

    Raises:
        FileNotFoundError: If the file does not exist.
        SourceParseError: If the file is not UTF-8 or contains syntax errors.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error("File not found: %s", file_path)
        raise
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise

    tree = parse_source(source_bytes, file_path)
    logger.debug("Successfully parsed file: %s", file_path)
    return tree, source_bytes


def is_excluded(file_name: str, excludes: str) -> bool:
    """Check a file's base name against a shell-style exclusion pattern.

    An empty pattern excludes nothing. Matching is case-sensitive.
    """
    if not excludes:
        return False
    return fnmatch.fnmatchcase(os.path.basename(file_name), excludes)


def discover_go_files(directory: str, excludes: str = "", recursive: bool = False) -> List[str]:
    """Find the Go source files of a directory.

    Args:
        directory: Directory to search.
        excludes: Shell-style pattern; files whose base name matches it are
            left out.
        recursive: Also search sub-directories, skipping hidden ones and
            ``SKIPPED_DIRECTORIES``.

    Returns:
        Sorted list of absolute file paths.
    """
    directory = os.path.abspath(directory)
    go_files = []

    for root, dirs, files in os.walk(directory):
        if recursive:
            dirs[:] = [
                d for d in dirs
                if not d.startswith(".") and d not in SKIPPED_DIRECTORIES
            ]
        else:
            dirs[:] = []

        for file in files:
            if not file.endswith(GO_EXTENSION):
                continue
            if is_excluded(file, excludes):
                logger.debug("Excluding %s (matches %r)", file, excludes)
                continue
            go_files.append(os.path.join(root, file))

    logger.info("Found %d Go files in %s", len(go_files), directory)
    return sorted(go_files)


def parse_directory(directory: str, excludes: str = "", recursive: bool = False) -> List[ParsedFile]:
    """Parse every Go file of a directory.

    The batch is all-or-nothing: the first unparseable file aborts it.

    Raises:
        FileNotFoundError: If the directory does not exist.
        SourceParseError: If any file contains syntax errors.
    """
    directory = os.path.abspath(directory)
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    parsed = []
    for file_path in discover_go_files(directory, excludes, recursive):
        relative_path = os.path.relpath(file_path, directory)
        try:
            tree, _ = parse_file(file_path)
        except SourceParseError as e:
            logger.error("Cannot parse %s: %s", relative_path, e)
            raise SourceParseError(relative_path, e.error_count, e.line, e.reason) from e
        parsed.append(ParsedFile(relative_path, tree))
    return parsed
