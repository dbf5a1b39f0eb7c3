"""
Collect the per-program error trackers into one consolidated table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

from .catalog import SourceRecord
from .errors import MalformedRow
from .rules import KEY_COLUMN, SOURCE_WIDTH
from .table import ConsolidatedTable, Row

logger = logging.getLogger(__name__)

FetchRows = Callable[[str], List[Row]]


@dataclass
class AggregateResult:
    table: ConsolidatedTable
    included: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def effective_row_count(rows: Sequence[Sequence[str]], key_column: int = KEY_COLUMN) -> int:
    """Number of leading rows whose key cell is non-empty (whitespace counts)."""
    count = 0
    for row in rows:
        if key_column >= len(row) or str(row[key_column]) == "":
            break
        count += 1
    return count


def _tag_rows(source: SourceRecord, rows: Sequence[Sequence[str]]) -> List[Row]:
    tagged: List[Row] = []
    for i, row in enumerate(rows):
        if len(row) < SOURCE_WIDTH:
            raise MalformedRow(f"source {source.program_label}", i + 1, SOURCE_WIDTH, len(row))
        tagged.append([source.program_label] + [str(v) for v in row[:SOURCE_WIDTH]])
    return tagged


def aggregate(
    sources: Sequence[SourceRecord],
    fetch_source_rows: FetchRows,
    table: ConsolidatedTable | None = None,
) -> AggregateResult:
    """
    Read every cataloged source and replace the table's data region with the
    tagged rows, in catalog order.

    Errors raised by `fetch_source_rows` (SourceUnavailable) propagate.
    """
    table = table if table is not None else ConsolidatedTable()
    result = AggregateResult(table=table)
    collected: List[Row] = []

    for source in sources:
        rows = fetch_source_rows(source.source_id)
        count = effective_row_count(rows)
        if count == 0:
            logger.info(
                "skipping %s: no data rows", source.program_label,
                extra={"component": "aggregate"},
            )
            result.skipped.append(source.program_label)
            continue

        collected.extend(_tag_rows(source, rows[:count]))
        result.included.append(source.program_label)
        logger.info(
            "collected %d rows from %s", count, source.program_label,
            extra={"component": "aggregate"},
        )

    table.replace_rows(collected)
    return result
