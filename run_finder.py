#!/usr/bin/env python3
"""
Command-line entry point for Go entity discovery.

Scans a directory of Go sources for structs declared as mapped entities and
writes the extracted schemas as JSON.

Usage:
    python run_finder.py --source-dir ./model
    python run_finder.py --source-dir ./model --exclude '*_test.go' --output-file out/schemas.json
    python run_finder.py --config entityscan.yaml --fail-on-warnings

Exit codes:
    0  scan finished
    1  the scan could not run (missing directory, unparseable source, bad config)
    2  warnings were produced and --fail-on-warnings is set
"""

import argparse
import json
import logging
import sys
import time
from dataclasses import replace
from typing import List, Optional

from core.run_artifacts import write_run_report, write_schema_file
from core.scan_config import ConfigValidationError, ScanConfig, load_scan_config
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from finder.scanner import ScanResult, scan_directory
from schema.errors import SourceParseError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_WARNINGS = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract entity schemas from Go struct declarations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_finder.py --source-dir ./model\n"
            "  python run_finder.py --source-dir ./model --exclude '*_test.go'\n"
        ),
    )
    parser.add_argument("--source-dir", help="Directory holding the Go sources to scan.")
    parser.add_argument(
        "--exclude",
        help="Shell-style pattern; Go files whose name matches it are skipped.",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        default=None,
        help="Also scan sub-directories (hidden, vendor and testdata are skipped).",
    )
    parser.add_argument("--config", help="YAML or JSON scan config file.")
    parser.add_argument(
        "--output-file",
        help="Write extracted schemas as JSON here instead of stdout.",
    )
    parser.add_argument("--report-dir", help="Directory for the JSON run report.")
    parser.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=None,
        help="Exit with status 2 when any entity candidate fails to translate.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity. Default: INFO",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScanConfig:
    """Merge the config file and environment with command-line flags."""
    config = load_scan_config(args.config)
    overrides = {
        "source_dir": args.source_dir,
        "exclude": args.exclude,
        "recursive": args.recursive,
        "output_file": args.output_file,
        "report_dir": args.report_dir,
        "fail_on_warnings": args.fail_on_warnings,
    }
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def run_scan(config: ScanConfig) -> ScanResult:
    """Run one scan described by ``config``."""
    logger.info("Source directory : %s", config.source_dir)
    logger.info("Exclude pattern  : %s", config.exclude or "<none>")
    logger.info("Recursive        : %s", config.recursive)

    with phase_scope("scan", source=config.source_dir):
        return scan_directory(
            config.source_dir,
            excludes=config.exclude,
            recursive=config.recursive,
            entity_type_name=config.entity_type_name,
            tag_key=config.tag_key,
            entity_package=config.entity_package,
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = parse_args(argv)
    configure_structured_logging(getattr(logging, args.log_level))
    run_id = set_run_id()

    try:
        config = build_config(args)
    except (ConfigValidationError, FileNotFoundError) as e:
        logger.error("Configuration error: %s", e)
        return EXIT_FATAL

    t0 = time.time()
    try:
        result = run_scan(config)
    except FileNotFoundError as e:
        logger.error("File error: %s", e)
        return EXIT_FATAL
    except SourceParseError as e:
        logger.error("Parse error, scan aborted: %s", e)
        return EXIT_FATAL
    elapsed = time.time() - t0

    with phase_scope("write"):
        payload = result.to_dict()
        if config.output_file:
            path = write_schema_file(payload, config.output_file)
            logger.info("Wrote %d entities to %s", len(result.entities), path)
        else:
            json.dump(payload, sys.stdout, indent=2, ensure_ascii=False)
            sys.stdout.write("\n")

        if config.report_dir:
            report = {
                "source_dir": config.source_dir,
                "exclude": config.exclude,
                "elapsed_seconds": round(elapsed, 3),
                "stats": result.stats.to_dict(),
                "warnings": [w.to_dict() for w in result.warnings],
            }
            path = write_run_report(report, run_id, config.report_dir)
            logger.info("Wrote run report to %s", path)

    logger.info("Scan finished in %.2fs: %s", elapsed, result.stats)
    if result.warnings and config.fail_on_warnings:
        return EXIT_WARNINGS
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
