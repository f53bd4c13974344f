"""Core shared utilities: logging context, scan configuration, artifacts."""

from core.structured_logging import (
    configure_structured_logging,
    file_scope,
    get_run_id,
    phase_scope,
    set_run_id,
)
from core.scan_config import (
    ConfigValidationError,
    ScanConfig,
    apply_env_overrides,
    load_scan_config,
    parse_scan_config,
)
from core.run_artifacts import write_run_report, write_schema_file

__all__ = [
    "configure_structured_logging",
    "file_scope",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "ConfigValidationError",
    "ScanConfig",
    "apply_env_overrides",
    "load_scan_config",
    "parse_scan_config",
    "write_run_report",
    "write_schema_file",
]
