"""Tests for the run_finder command-line entry point."""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

import run_finder

GOOD_SOURCE = """package model

type Thing struct {
	Entity `dosa:"key=(name)"`
	Name   string
}
"""

BAD_SOURCE = """package model

type Bad struct {
	Entity `dosa:"key=(name)"`
	Name   string
	Count  int
}
"""


class TestRunFinder(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.src = self.root / "model"
        self.src.mkdir()
        env = {k: v for k, v in os.environ.items() if not k.startswith("ENTITYSCAN_")}
        self._env = patch.dict(os.environ, env, clear=True)
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def test_writes_schemas_to_stdout(self) -> None:
        (self.src / "thing.go").write_text(GOOD_SOURCE, encoding="utf-8")
        out = io.StringIO()
        with redirect_stdout(out):
            code = run_finder.main(["--source-dir", str(self.src), "--log-level", "ERROR"])
        self.assertEqual(code, run_finder.EXIT_OK)
        payload = json.loads(out.getvalue())
        self.assertEqual(payload["entities"][0]["name"], "thing")
        self.assertEqual(payload["warnings"], [])

    def test_output_file_and_report(self) -> None:
        (self.src / "thing.go").write_text(GOOD_SOURCE, encoding="utf-8")
        (self.src / "bad.go").write_text(BAD_SOURCE, encoding="utf-8")
        output = self.root / "out" / "schemas.json"
        reports = self.root / "reports"
        code = run_finder.main(
            [
                "--source-dir", str(self.src),
                "--output-file", str(output),
                "--report-dir", str(reports),
                "--log-level", "ERROR",
            ]
        )
        self.assertEqual(code, run_finder.EXIT_OK)
        payload = json.loads(output.read_text(encoding="utf-8"))
        self.assertEqual([e["struct_name"] for e in payload["entities"]], ["Thing"])
        self.assertEqual(payload["warnings"][0]["field_name"], "Count")

        report_files = list(reports.glob("scan_*.json"))
        self.assertEqual(len(report_files), 1)
        report = json.loads(report_files[0].read_text(encoding="utf-8"))
        self.assertEqual(report["stats"]["warnings"], 1)

    def test_fail_on_warnings(self) -> None:
        (self.src / "bad.go").write_text(BAD_SOURCE, encoding="utf-8")
        with redirect_stdout(io.StringIO()):
            code = run_finder.main(
                ["--source-dir", str(self.src), "--fail-on-warnings", "--log-level", "ERROR"]
            )
        self.assertEqual(code, run_finder.EXIT_WARNINGS)

    def test_exclude_flag(self) -> None:
        (self.src / "bad.go").write_text(BAD_SOURCE, encoding="utf-8")
        with redirect_stdout(io.StringIO()):
            code = run_finder.main(
                [
                    "--source-dir", str(self.src),
                    "--exclude", "bad*",
                    "--fail-on-warnings",
                    "--log-level", "ERROR",
                ]
            )
        self.assertEqual(code, run_finder.EXIT_OK)

    def test_parse_error_is_fatal(self) -> None:
        (self.src / "broken.go").write_text("package model\n\ntype Broken struct {\n", encoding="utf-8")
        code = run_finder.main(["--source-dir", str(self.src), "--log-level", "ERROR"])
        self.assertEqual(code, run_finder.EXIT_FATAL)

    def test_malformed_source_bytes_are_fatal(self) -> None:
        (self.src / "latin1.go").write_bytes(b"package model\n\n// caf\xe9\n")
        code = run_finder.main(["--source-dir", str(self.src), "--log-level", "ERROR"])
        self.assertEqual(code, run_finder.EXIT_FATAL)

        (self.src / "latin1.go").write_bytes(
            b'package model\n\ntype Plain struct {\n\tCount int32 "json:\\"a\\q\\""\n}\n'
        )
        code = run_finder.main(["--source-dir", str(self.src), "--log-level", "ERROR"])
        self.assertEqual(code, run_finder.EXIT_FATAL)

    def test_missing_directory_is_fatal(self) -> None:
        code = run_finder.main(["--source-dir", str(self.root / "missing"), "--log-level", "ERROR"])
        self.assertEqual(code, run_finder.EXIT_FATAL)

    def test_config_file_with_flag_override(self) -> None:
        (self.src / "bad.go").write_text(BAD_SOURCE, encoding="utf-8")
        config = self.root / "scan.yaml"
        config.write_text(
            f"source_dir: {self.src}\nfail_on_warnings: true\n", encoding="utf-8"
        )
        with redirect_stdout(io.StringIO()):
            code = run_finder.main(["--config", str(config), "--log-level", "ERROR"])
        self.assertEqual(code, run_finder.EXIT_WARNINGS)

        with redirect_stdout(io.StringIO()):
            code = run_finder.main(
                ["--config", str(config), "--exclude", "*.go", "--log-level", "ERROR"]
            )
        self.assertEqual(code, run_finder.EXIT_OK)

    def test_bad_config_is_fatal(self) -> None:
        config = self.root / "scan.yaml"
        config.write_text("unknown_option: 1\n", encoding="utf-8")
        code = run_finder.main(["--config", str(config), "--log-level", "ERROR"])
        self.assertEqual(code, run_finder.EXIT_FATAL)


if __name__ == "__main__":
    unittest.main()
