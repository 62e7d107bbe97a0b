"""Tests for the indexed valence list."""

import tempfile
from pathlib import Path

import pytest

from curation.core.errors import ValenceTableFormatError, ValenceTableIndexError
from curation.valence import ABSENT_POINTER, ValenceTable
from curation.valence.table import FORMAL_CHARGE, MAX_IMPLICIT_HYDROGENS

ROWS = [
    (1, 0, 0, 1, 1),
    (6, 0, 0, 4, 4),
    (6, 0, 1, 3, 2),
    (6, 1, 0, 3, 3),
    (8, 0, 0, 2, 2),
    (8, 0, 1, 1, 0),
    (11, 1, 0, 0, 0),
]


class TestConstruction:
    """Tests for building a table."""

    def test_rows_and_range(self, table_from_rows):
        """Test the basic shape of a table."""
        table = table_from_rows(*ROWS)
        assert len(table) == 7
        assert table.lowest_atomic_number == 1
        assert table.highest_atomic_number == 11
        assert table.max_atomic_number == 118

    def test_header_is_skipped(self):
        """Test that the first line is never parsed as data."""
        table = ValenceTable.from_lines(["not\ta\tvalid\tdata\trow", "6\t0\t0\t4\t4"])
        assert len(table) == 1

    def test_trailing_blank_lines(self, table_from_rows):
        """Test that blank lines are ignored."""
        lines = ["header", "6\t0\t0\t4\t4", "", "  "]
        assert len(ValenceTable.from_lines(lines)) == 1

    def test_expected_row_count(self, table_from_rows):
        """Test the declared row count check."""
        assert len(table_from_rows(*ROWS, expected_row_count=7)) == 7
        with pytest.raises(ValenceTableFormatError):
            table_from_rows(*ROWS, expected_row_count=8)

    def test_wrong_field_count(self):
        """Test rows with a wrong number of fields."""
        with pytest.raises(ValenceTableFormatError) as excinfo:
            ValenceTable.from_lines(["header", "6\t0\t0\t4\t4", "6\t0\t0\t4"])
        assert excinfo.value.line_number == 3

    def test_non_integer_field(self):
        """Test fields that are not integers."""
        with pytest.raises(ValenceTableFormatError):
            ValenceTable.from_lines(["header", "6\t0\tx\t4\t4"])

    def test_unsorted_keys(self, table_from_rows):
        """Test that decreasing atomic numbers are rejected."""
        with pytest.raises(ValenceTableFormatError):
            table_from_rows((8, 0, 0, 2, 2), (6, 0, 0, 4, 4))

    def test_key_out_of_range(self, table_from_rows):
        """Test negative and too large atomic numbers."""
        with pytest.raises(ValenceTableFormatError):
            table_from_rows((-1, 0, 0, 0, 0))
        with pytest.raises(ValenceTableFormatError):
            table_from_rows((6, 0, 0, 4, 4), (20, 2, 0, 0, 0), max_atomic_number=10)

    def test_empty_source(self):
        """Test sources without data rows."""
        with pytest.raises(ValenceTableFormatError):
            ValenceTable.from_lines([])
        with pytest.raises(ValenceTableFormatError):
            ValenceTable.from_lines(["header"])

    def test_from_file(self):
        """Test reading a tab separated file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "valences.tsv"
            path.write_text("header\n6\t0\t0\t4\t4\n7\t0\t0\t3\t3\n", encoding="utf-8")
            table = ValenceTable.from_file(path)

        assert len(table) == 2
        assert table.source == str(path)

    def test_default_table(self):
        """Test the packaged valence list."""
        table = ValenceTable.default()
        assert table is ValenceTable.default()
        assert len(table) > 0
        assert 6 in table.atomic_numbers()
        assert table.group_count(6) > 0


class TestGroupIndex:
    """Tests for the per-element index."""

    def test_groups_are_contiguous(self, table_from_rows):
        """Test that each group covers exactly the rows of its element."""
        table = table_from_rows(*ROWS)
        for key in table.atomic_numbers():
            start, count = table.group(key)
            assert count > 0
            for row in range(start, start + count):
                assert table.entry_at(row, 0) == key
            if start > 0:
                assert table.entry_at(start - 1, 0) != key
            if start + count < len(table):
                assert table.entry_at(start + count, 0) != key

    def test_group_lookup(self, table_from_rows):
        """Test pointer and count of present elements."""
        table = table_from_rows(*ROWS)
        assert table.group(1) == (0, 1)
        assert table.group(6) == (1, 3)
        assert table.group(8) == (4, 2)
        assert table.group_pointer(11) == 6
        assert table.group_count(11) == 1

    def test_skipped_keys_are_absent(self, table_from_rows):
        """Test that elements skipped during construction are absent."""
        table = table_from_rows(*ROWS)
        for key in (2, 3, 4, 5, 7, 9, 10):
            assert table.group_pointer(key) == ABSENT_POINTER
            assert table.group_count(key) == 0

    def test_keys_outside_range_are_absent(self, table_from_rows):
        """Test that keys outside the observed range never raise."""
        table = table_from_rows(*ROWS)
        for key in (-5, 0, 12, 118, 500):
            assert table.group_pointer(key) == ABSENT_POINTER
            assert table.group_count(key) == 0
            assert table.group(key) == (ABSENT_POINTER, 0)
            assert list(table.rows(key)) == []

    def test_rows(self, table_from_rows):
        """Test iterating over the rows of an element."""
        table = table_from_rows(*ROWS)
        assert list(table.rows(8)) == [(8, 0, 0, 2, 2), (8, 0, 1, 1, 0)]


class TestQueries:
    """Tests for row access and immutability."""

    def test_entry_at(self, table_from_rows):
        """Test row and field access."""
        table = table_from_rows(*ROWS)
        assert table.entry_at(3) == (6, 1, 0, 3, 3)
        assert table.entry_at(3, FORMAL_CHARGE) == 1
        assert table.entry_at(2, MAX_IMPLICIT_HYDROGENS) == 2

    def test_index_errors(self, table_from_rows):
        """Test bounds checking."""
        table = table_from_rows(*ROWS)
        with pytest.raises(ValenceTableIndexError):
            table.entry_at(-1)
        with pytest.raises(ValenceTableIndexError):
            table.entry_at(7)
        with pytest.raises(ValenceTableIndexError):
            table.entry_at(0, 5)
        with pytest.raises(IndexError):
            table.entry_at(0, -1)

    def test_rows_are_copies(self, table_from_rows):
        """Test that returned rows cannot alter the table."""
        table = table_from_rows(*ROWS)
        row = table.entry_at(0)
        assert isinstance(row, tuple)
        assert table.entry_at(0) == (1, 0, 0, 1, 1)

    def test_arrays_are_read_only(self, table_from_rows):
        """Test that the internal storage is write protected."""
        table = table_from_rows(*ROWS)
        with pytest.raises(ValueError):
            table._entries[0, 0] = 99
        with pytest.raises(ValueError):
            table._group_index[6, 0] = 0
