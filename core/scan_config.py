"""Scan configuration contract.

A scan is configured, from lowest to highest precedence, by the defaults
below, an optional YAML/JSON config file, ``ENTITYSCAN_*`` environment
variables (a ``.env`` file is honoured) and command-line flags.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from finder.config import ENTITY_PACKAGE, ENTITY_TYPE_NAME, TAG_KEY

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_KNOWN_KEYS = {
    "source_dir",
    "exclude",
    "recursive",
    "entity_type_name",
    "entity_package",
    "tag_key",
    "output_file",
    "report_dir",
    "fail_on_warnings",
}


class ConfigValidationError(RuntimeError):
    """Raised when a scan configuration is invalid."""


@dataclass(frozen=True)
class ScanConfig:
    """Settings of one scan run."""

    source_dir: str = "."
    exclude: str = ""
    recursive: bool = False
    entity_type_name: str = ENTITY_TYPE_NAME
    entity_package: str = ENTITY_PACKAGE
    tag_key: str = TAG_KEY
    output_file: Optional[str] = None
    report_dir: Optional[str] = None
    fail_on_warnings: bool = False


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ConfigValidationError(f"{ctx} must be an object")
    return payload


def _load_config_payload(path: str) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigValidationError(f"Failed to parse config {config_path}: {exc}") from exc

    if payload is None:
        return {}
    return _expect_dict(payload, "config")


def _optional_str(payload: dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _identifier(payload: dict[str, Any], key: str, default: str) -> str:
    value = str(payload.get(key, default)).strip()
    if not _IDENTIFIER_RE.match(value):
        raise ConfigValidationError(f"{key} must be a Go identifier, got {value!r}")
    return value


def parse_scan_config(payload: dict[str, Any]) -> ScanConfig:
    """Validate a raw config mapping into a ``ScanConfig``."""
    unknown = sorted(set(payload) - _KNOWN_KEYS)
    if unknown:
        raise ConfigValidationError("Unknown config keys: " + ", ".join(unknown))

    for flag in ("recursive", "fail_on_warnings"):
        if flag in payload and not isinstance(payload[flag], bool):
            raise ConfigValidationError(f"{flag} must be a boolean")

    source_dir = str(payload.get("source_dir", ".")).strip() or "."
    return ScanConfig(
        source_dir=source_dir,
        exclude=str(payload.get("exclude") or "").strip(),
        recursive=bool(payload.get("recursive", False)),
        entity_type_name=_identifier(payload, "entity_type_name", ENTITY_TYPE_NAME),
        entity_package=_identifier(payload, "entity_package", ENTITY_PACKAGE),
        tag_key=_identifier(payload, "tag_key", TAG_KEY),
        output_file=_optional_str(payload, "output_file"),
        report_dir=_optional_str(payload, "report_dir"),
        fail_on_warnings=bool(payload.get("fail_on_warnings", False)),
    )


def apply_env_overrides(config: ScanConfig) -> ScanConfig:
    """Overlay ``ENTITYSCAN_*`` environment variables on ``config``."""
    load_dotenv()
    changes: dict[str, Any] = {}

    exclude = os.getenv("ENTITYSCAN_EXCLUDE")
    if exclude is not None:
        changes["exclude"] = exclude.strip()
    if os.getenv("ENTITYSCAN_RECURSIVE") is not None:
        changes["recursive"] = _env_flag("ENTITYSCAN_RECURSIVE")
    if os.getenv("ENTITYSCAN_FAIL_ON_WARNINGS") is not None:
        changes["fail_on_warnings"] = _env_flag("ENTITYSCAN_FAIL_ON_WARNINGS")

    if changes:
        logger.debug("Environment overrides: %s", sorted(changes))
    return replace(config, **changes)


def load_scan_config(path: Optional[str] = None) -> ScanConfig:
    """Load a scan config from YAML/JSON (if given) plus environment overrides."""
    payload = _load_config_payload(path) if path else {}
    return apply_env_overrides(parse_scan_config(payload))
