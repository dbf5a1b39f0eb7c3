from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from .errors import MalformedRow
from .rules import DEFAULT_HEADER, TABLE_WIDTH

Row = List[str]


@dataclass
class ConsolidatedTable:
    """
    In-memory "Error Database [Aggregate]" table.

    The header row is kept apart from the data rows; stages only ever touch
    the data region. Every data row is exactly `width` cells wide.
    """

    header: Row = field(default_factory=lambda: list(DEFAULT_HEADER))
    rows: List[Row] = field(default_factory=list)
    width: int = TABLE_WIDTH

    def __len__(self) -> int:
        return len(self.rows)

    def replace_rows(self, rows: Sequence[Sequence[str]]) -> None:
        """Drop the current data region and take `rows` instead."""
        checked: List[Row] = []
        for i, row in enumerate(rows):
            if len(row) != self.width:
                raise MalformedRow("consolidated table", i + 1, self.width, len(row))
            checked.append(list(row))
        self.rows = checked

    def column(self, index: int) -> List[str]:
        return [row[index] for row in self.rows]

    def set_column(self, index: int, values: Sequence[str]) -> None:
        if len(values) != len(self.rows):
            raise ValueError(
                f"column {index}: got {len(values)} values for {len(self.rows)} rows"
            )
        for row, value in zip(self.rows, values):
            row[index] = value
