"""
Integration tests for scanner.py

Scans temporary directories of Go sources end to end.
"""

import tempfile
import unittest
from pathlib import Path

from finder.scanner import ScanStats, find_entities, scan_directory, scan_source
from schema.errors import SourceParseError
from schema.types import Type

THING_SOURCE = """package model

type Thing struct {
	Entity `dosa:"key=(name)"`
	Name   string
}
"""

NESTED_FIELD_SOURCE = """package model

type Thing struct {
	Entity `dosa:"key=(name)"`
	Name   string
	Owner  struct {
		First string
	}
}
"""

IGNORED_FIELD_SOURCE = """package model

type Account struct {
	Entity  `dosa:"primaryKey=(ID)"`
	ID      int64
	Balance float64
	Session Session `dosa:"-"`
}
"""

EMPTY_STRUCT_SOURCE = """package model

type Nothing struct{}
"""

MIXED_SOURCE = """package model

type Thing struct {
	Entity `dosa:"key=(name)"`
	Name   string
}

type Helper struct {
	Count int
	cache map[string]string
}
"""

BROKEN_SOURCE = """package model

type Broken struct {
"""

NON_UTF8_SOURCE = b"""package model

type Plain struct {
	Name string `json:"\xff"`
}
"""

BAD_ESCAPE_SOURCE = b"""package model

type Plain struct {
	Count int32 "json:\\"a\\q\\""
}
"""


class TestScanStats(unittest.TestCase):
    def test_creation_and_dict(self):
        stats = ScanStats()
        self.assertEqual(
            stats.to_dict(),
            {"files_parsed": 0, "structs_seen": 0, "candidates": 0, "entities_found": 0, "warnings": 0},
        )
        stats.entities_found = 3
        self.assertIn("entities=3", str(stats))


class _DirectoryTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, rel: str, content: str) -> None:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


class TestScenarios(_DirectoryTestCase):
    """End-to-end behaviour on small source trees."""

    def test_single_entity(self):
        self.write("thing.go", THING_SOURCE)
        entities, warnings = find_entities(str(self.root))

        self.assertEqual(warnings, [])
        self.assertEqual(len(entities), 1)
        entity = entities[0]
        self.assertEqual(entity.struct_name, "Thing")
        self.assertEqual(entity.name, "thing")
        self.assertEqual([(c.name, c.type) for c in entity.columns], [("name", Type.STRING)])
        self.assertEqual(entity.col_to_field, {"name": "Name"})
        self.assertEqual(entity.field_to_col, {"Name": "name"})
        self.assertEqual(entity.key.partition_keys, ["name"])

    def test_unsupported_field_type_is_a_warning(self):
        self.write("thing.go", NESTED_FIELD_SOURCE)
        entities, warnings = find_entities(str(self.root))

        self.assertEqual(entities, [])
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].field_name, "Owner")
        self.assertIn("Owner", str(warnings[0]))
        self.assertIn("thing.go", str(warnings[0]))

    def test_ignored_field(self):
        self.write("account.go", IGNORED_FIELD_SOURCE)
        entities, warnings = find_entities(str(self.root))

        self.assertEqual(warnings, [])
        self.assertEqual([c.name for c in entities[0].columns], ["id", "balance"])
        self.assertNotIn("Session", entities[0].field_to_col)

    def test_empty_struct(self):
        self.write("nothing.go", EMPTY_STRUCT_SOURCE)
        result = scan_directory(str(self.root))

        self.assertEqual(result.entities, [])
        self.assertEqual(result.warnings, [])
        self.assertEqual(result.stats.structs_seen, 1)
        self.assertEqual(result.stats.candidates, 0)

    def test_entity_next_to_plain_struct(self):
        self.write("mixed.go", MIXED_SOURCE)
        entities, warnings = find_entities(str(self.root))

        self.assertEqual([e.struct_name for e in entities], ["Thing"])
        self.assertEqual(warnings, [])


class TestScanDirectory(_DirectoryTestCase):
    def test_results_follow_file_order(self):
        self.write("b.go", THING_SOURCE.replace("Thing", "Second"))
        self.write("a.go", THING_SOURCE.replace("Thing", "First"))
        self.write("c.go", NESTED_FIELD_SOURCE)
        result = scan_directory(str(self.root))

        self.assertEqual([e.struct_name for e in result.entities], ["First", "Second"])
        self.assertEqual([e.file_path for e in result.entities], ["a.go", "b.go"])
        self.assertEqual(len(result.warnings), 1)
        self.assertEqual(result.stats.files_parsed, 3)
        self.assertEqual(result.stats.entities_found, 2)
        self.assertEqual(result.stats.warnings, 1)

    def test_scanning_twice_is_identical(self):
        self.write("thing.go", MIXED_SOURCE)
        self.write("account.go", IGNORED_FIELD_SOURCE)
        self.write("bad.go", NESTED_FIELD_SOURCE.replace("Thing", "Bad"))
        first = scan_directory(str(self.root)).to_dict()
        second = scan_directory(str(self.root)).to_dict()
        self.assertEqual(first, second)

    def test_excluded_file_contributes_nothing(self):
        self.write("thing.go", THING_SOURCE)
        self.write("thing_test.go", NESTED_FIELD_SOURCE.replace("Thing", "Fixture"))
        self.write("broken_test.go", BROKEN_SOURCE)
        entities, warnings = find_entities(str(self.root), excludes="*_test.go")

        self.assertEqual([e.struct_name for e in entities], ["Thing"])
        self.assertEqual(warnings, [])

    def test_unparseable_file_is_fatal(self):
        self.write("thing.go", THING_SOURCE)
        self.write("broken.go", BROKEN_SOURCE)
        with self.assertRaises(SourceParseError) as ctx:
            scan_directory(str(self.root))
        self.assertEqual(ctx.exception.file_path, "broken.go")

    def test_recursive_scan(self):
        self.write("thing.go", THING_SOURCE)
        self.write("sub/account.go", IGNORED_FIELD_SOURCE)
        self.write("testdata/fixture.go", THING_SOURCE.replace("Thing", "Fixture"))

        flat = scan_directory(str(self.root))
        self.assertEqual([e.struct_name for e in flat.entities], ["Thing"])

        deep = scan_directory(str(self.root), recursive=True)
        self.assertEqual([e.struct_name for e in deep.entities], ["Account", "Thing"])

    def test_non_utf8_file_is_fatal(self):
        self.write("thing.go", THING_SOURCE)
        (self.root / "plain.go").write_bytes(NON_UTF8_SOURCE)
        with self.assertRaises(SourceParseError) as ctx:
            scan_directory(str(self.root))
        self.assertEqual(ctx.exception.file_path, "plain.go")
        self.assertEqual(ctx.exception.line, 4)
        self.assertIn("UTF-8", str(ctx.exception))

    def test_bad_escape_in_plain_struct_is_fatal(self):
        self.write("thing.go", THING_SOURCE)
        (self.root / "plain.go").write_bytes(BAD_ESCAPE_SOURCE)
        with self.assertRaises(SourceParseError) as ctx:
            scan_directory(str(self.root))
        self.assertEqual(ctx.exception.file_path, "plain.go")
        self.assertEqual(ctx.exception.line, 4)
        self.assertIn("unknown escape", str(ctx.exception))

    def test_missing_directory(self):
        with self.assertRaises(FileNotFoundError):
            scan_directory(str(self.root / "missing"))

    def test_empty_directory(self):
        result = scan_directory(str(self.root))
        self.assertEqual(result.entities, [])
        self.assertEqual(result.warnings, [])
        self.assertEqual(result.stats.files_parsed, 0)


class TestScanSource(unittest.TestCase):
    def test_scan_source(self):
        result = scan_source(MIXED_SOURCE.encode("utf-8"), "mixed.go")
        self.assertEqual([e.struct_name for e in result.entities], ["Thing"])
        self.assertEqual(result.entities[0].file_path, "mixed.go")

    def test_scan_source_parse_error(self):
        with self.assertRaises(SourceParseError):
            scan_source(BROKEN_SOURCE.encode("utf-8"))

    def test_scan_source_rejects_non_utf8(self):
        with self.assertRaises(SourceParseError) as ctx:
            scan_source(NON_UTF8_SOURCE, "plain.go")
        self.assertEqual(ctx.exception.line, 4)

    def test_scan_source_rejects_bad_escape(self):
        with self.assertRaises(SourceParseError) as ctx:
            scan_source(BAD_ESCAPE_SOURCE, "plain.go")
        self.assertEqual((ctx.exception.file_path, ctx.exception.line), ("plain.go", 4))

    def test_to_dict_is_json_ready(self):
        result = scan_source(IGNORED_FIELD_SOURCE.encode("utf-8"), "account.go")
        payload = result.to_dict()
        self.assertEqual(payload["entities"][0]["name"], "account")
        self.assertEqual(
            payload["entities"][0]["columns"],
            [
                {"name": "id", "type": "int64", "field_name": "ID"},
                {"name": "balance", "type": "double", "field_name": "Balance"},
            ],
        )
        self.assertEqual(payload["warnings"], [])
        self.assertEqual(payload["stats"]["entities_found"], 1)


if __name__ == "__main__":
    unittest.main()
