"""Exception taxonomy shared by the schema and finder layers."""

from __future__ import annotations

from typing import Optional


class EntityScanError(RuntimeError):
    """Base class for every error raised by entityscan."""


class InvalidNameError(EntityScanError, ValueError):
    """Raised when a struct, column or key name cannot be normalized."""


class TagSyntaxError(EntityScanError, ValueError):
    """Raised when a ``dosa`` struct tag cannot be parsed."""


class EntityValidationError(EntityScanError, ValueError):
    """Raised when an assembled entity definition is structurally invalid."""


class SourceParseError(EntityScanError):
    """Raised when a source file cannot be parsed; aborts the whole scan."""

    def __init__(
        self,
        file_path: str,
        error_count: int,
        line: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        self.file_path = file_path
        self.error_count = error_count
        self.line = line
        self.reason = reason
        location = f"{file_path}:{line}" if line is not None else file_path
        detail = reason or f"source contains {error_count} syntax error(s)"
        super().__init__(f"{location}: {detail}")


class TranslationError(EntityScanError):
    """A struct looked like an entity but could not be translated.

    Instances are collected as warnings by the recorder instead of being
    raised out of a scan.
    """

    def __init__(
        self,
        message: str,
        struct_name: str,
        field_name: Optional[str] = None,
        file_path: Optional[str] = None,
        line: Optional[int] = None,
    ):
        self.message = message
        self.struct_name = struct_name
        self.field_name = field_name
        self.file_path = file_path
        self.line = line
        super().__init__(message)

    def __str__(self) -> str:
        prefix = f"struct {self.struct_name!r}"
        if self.file_path:
            location = self.file_path
            if self.line is not None:
                location = f"{location}:{self.line}"
            prefix = f"{location}: {prefix}"
        text = f"{prefix}: {self.message}"
        if self.__cause__ is not None:
            text = f"{text}: {self.__cause__}"
        return text

    def to_dict(self) -> dict:
        return {
            "struct_name": self.struct_name,
            "field_name": self.field_name,
            "file_path": self.file_path,
            "line": self.line,
            "message": str(self),
        }
