"""
Indexed valence list.

A valence list enumerates every valid atom configuration as a row of
(atomic number, formal charge, pi bond count, sigma bond count, maximum
implicit hydrogen count), sorted by atomic number. The table keeps the rows
in a read-only matrix and a direct per-element index of (first row, row
count), so the configurations of an element are found in constant time.
"""

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

import numpy as np
from loguru import logger

from curation.core.chem import HIGHEST_KNOWN_ATOMIC_NUMBER
from curation.core.errors import ValenceTableFormatError, ValenceTableIndexError

ABSENT_POINTER = -1
COLUMNS_PER_ROW = 5

# Column indices of a valence list row
ATOMIC_NUMBER = 0
FORMAL_CHARGE = 1
PI_BOND_COUNT = 2
SIGMA_BOND_COUNT = 3
MAX_IMPLICIT_HYDROGENS = 4

DEFAULT_VALENCE_LIST = "valence_list.tsv"


class ValenceTable:
    """
    Immutable valence list with an O(1) per-element index.

    Build instances with from_lines, from_file or default; the constructor
    expects already validated arrays.
    """

    def __init__(
        self,
        entries: np.ndarray,
        group_index: np.ndarray,
        source: Optional[str] = None,
    ):
        self._entries = entries
        self._entries.flags.writeable = False
        self._group_index = group_index
        self._group_index.flags.writeable = False
        self._lowest = int(entries[0, ATOMIC_NUMBER])
        self._highest = int(entries[-1, ATOMIC_NUMBER])
        self.source = source

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        max_atomic_number: int = HIGHEST_KNOWN_ATOMIC_NUMBER,
        expected_row_count: Optional[int] = None,
        source: Optional[str] = None,
    ) -> "ValenceTable":
        """
        Build a table from tab separated text lines.

        The first line is a header and skipped. Every further line holds
        five integers; rows must be sorted by atomic number.

        Args:
            lines: Text lines, header first.
            max_atomic_number: Highest atomic number the index supports.
            expected_row_count: Number of data rows the source must contain.
            source: Description of the source used in log messages.

        Returns:
            Constructed table.

        Raises:
            ValenceTableFormatError: If the source violates the format.
        """
        if max_atomic_number < 1:
            raise ValueError(f"max_atomic_number must be positive, got {max_atomic_number}")

        rows: list[list[int]] = []
        group_index = np.empty((max_atomic_number + 1, 2), dtype=np.int64)
        current_key = -1

        iterator = iter(lines)
        if next(iterator, None) is None:
            raise ValenceTableFormatError("The valence list is empty.")

        for line_number, line in enumerate(iterator, start=2):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue

            fields = line.split("\t")
            if len(fields) != COLUMNS_PER_ROW:
                raise ValenceTableFormatError(
                    f"expected {COLUMNS_PER_ROW} tab separated fields, found {len(fields)}",
                    line_number,
                )
            try:
                row = [int(field) for field in fields]
            except ValueError as e:
                raise ValenceTableFormatError(f"field is not an integer ({e})", line_number) from e

            key = row[ATOMIC_NUMBER]
            if key < 0:
                raise ValenceTableFormatError(f"negative atomic number {key}", line_number)
            if key > max_atomic_number:
                raise ValenceTableFormatError(
                    f"atomic number {key} exceeds the supported maximum {max_atomic_number}",
                    line_number,
                )
            if key != current_key:
                if key < current_key:
                    raise ValenceTableFormatError(
                        f"rows are not sorted by atomic number ({key} after {current_key})",
                        line_number,
                    )
                # Skipped atomic numbers get the absent sentinel
                group_index[current_key + 1:key] = (ABSENT_POINTER, 0)
                group_index[key] = (len(rows), 0)
                current_key = key

            group_index[key, 1] += 1
            rows.append(row)

        if not rows:
            raise ValenceTableFormatError("The valence list contains no data rows.")
        if expected_row_count is not None and len(rows) != expected_row_count:
            raise ValenceTableFormatError(
                f"expected {expected_row_count} data rows, found {len(rows)}"
            )

        group_index[current_key + 1:] = (ABSENT_POINTER, 0)

        table = cls(np.asarray(rows, dtype=np.int64), group_index, source=source)
        logger.debug(
            f"Loaded valence list {source or '<lines>'}: {len(table)} rows, "
            f"atomic numbers {table.lowest_atomic_number}-{table.highest_atomic_number}"
        )
        return table

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        max_atomic_number: int = HIGHEST_KNOWN_ATOMIC_NUMBER,
        expected_row_count: Optional[int] = None,
    ) -> "ValenceTable":
        """Build a table from a UTF-8 valence list file."""
        path = Path(path)
        with open(path, encoding="utf-8") as f:
            return cls.from_lines(
                f,
                max_atomic_number=max_atomic_number,
                expected_row_count=expected_row_count,
                source=str(path),
            )

    @classmethod
    def default(cls) -> "ValenceTable":
        """
        Get the valence list shipped with the package.

        The list covers common configurations of the elements found in
        organic structures. It is parsed once and shared afterwards.
        """
        return _load_default_table()

    def __len__(self) -> int:
        return self._entries.shape[0]

    def __repr__(self) -> str:
        return (
            f"ValenceTable(rows={len(self)}, atomic_numbers="
            f"{self._lowest}-{self._highest}, source={self.source!r})"
        )

    @property
    def lowest_atomic_number(self) -> int:
        """Lowest atomic number present in the table."""
        return self._lowest

    @property
    def highest_atomic_number(self) -> int:
        """Highest atomic number present in the table."""
        return self._highest

    @property
    def max_atomic_number(self) -> int:
        """Highest atomic number the group index supports."""
        return self._group_index.shape[0] - 1

    def entry_at(self, row: int, field: Optional[int] = None) -> Union[int, tuple[int, ...]]:
        """
        Get a row, or a single field of a row.

        Args:
            row: Row index.
            field: Column index; if None, the whole row is returned.

        Returns:
            Field value, or a tuple copy of the row.

        Raises:
            ValenceTableIndexError: If an index is negative or out of range.
        """
        if row < 0 or row >= len(self):
            raise ValenceTableIndexError(f"Row index {row} is out of range [0, {len(self)}).")
        if field is None:
            return tuple(int(value) for value in self._entries[row])
        if field < 0 or field >= COLUMNS_PER_ROW:
            raise ValenceTableIndexError(f"Field index {field} is out of range [0, {COLUMNS_PER_ROW}).")
        return int(self._entries[row, field])

    def group_pointer(self, atomic_number: int) -> int:
        """Get the first row of an element, or ABSENT_POINTER."""
        if atomic_number < self._lowest or atomic_number > self._highest:
            return ABSENT_POINTER
        return int(self._group_index[atomic_number, 0])

    def group_count(self, atomic_number: int) -> int:
        """Get the number of rows of an element."""
        if atomic_number < self._lowest or atomic_number > self._highest:
            return 0
        return int(self._group_index[atomic_number, 1])

    def group(self, atomic_number: int) -> tuple[int, int]:
        """Get (first row, row count) of an element; (ABSENT_POINTER, 0) if absent."""
        if atomic_number < self._lowest or atomic_number > self._highest:
            return ABSENT_POINTER, 0
        start, count = self._group_index[atomic_number]
        return int(start), int(count)

    def rows(self, atomic_number: int) -> Iterator[tuple[int, ...]]:
        """Iterate over copies of the rows of an element."""
        start, count = self.group(atomic_number)
        for row in range(start, start + count):
            yield self.entry_at(row)

    def atomic_numbers(self) -> list[int]:
        """List the atomic numbers that have at least one row."""
        return [int(key) for key in np.flatnonzero(self._group_index[:, 1] > 0)]


@lru_cache(maxsize=1)
def _load_default_table() -> ValenceTable:
    resource = resources.files("curation.valence").joinpath("data").joinpath(DEFAULT_VALENCE_LIST)
    with resource.open("r", encoding="utf-8") as f:
        return ValenceTable.from_lines(f, source=f"package:{DEFAULT_VALENCE_LIST}")
