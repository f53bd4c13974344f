"""
Unit tests for types.py

Tests the mapping from Go type labels onto column types.
"""

import unittest

from schema.types import Type, string_to_type


class TestStringToType(unittest.TestCase):
    """Test the type label mapper."""

    def test_known_labels(self):
        """Every supported label maps to its column type."""
        expected = {
            "string": Type.STRING,
            "[]byte": Type.BLOB,
            "bool": Type.BOOL,
            "int32": Type.INT32,
            "int64": Type.INT64,
            "float64": Type.DOUBLE,
            "time.Time": Type.TIMESTAMP,
            "UUID": Type.UUID,
        }
        for label, column_type in expected.items():
            with self.subTest(label=label):
                self.assertIs(string_to_type(label), column_type)

    def test_unsupported_labels_are_invalid(self):
        """Labels outside the table map to the INVALID sentinel."""
        for label in ("int", "float32", "uint64", "[]string", "*string", "time.Duration", ""):
            with self.subTest(label=label):
                self.assertIs(string_to_type(label), Type.INVALID)

    def test_matching_is_case_sensitive(self):
        """No case folding or partial matches."""
        self.assertIs(string_to_type("String"), Type.INVALID)
        self.assertIs(string_to_type("uuid"), Type.INVALID)
        self.assertIs(string_to_type(" string"), Type.INVALID)

    def test_str(self):
        self.assertEqual(str(Type.TIMESTAMP), "timestamp")


if __name__ == "__main__":
    unittest.main()
