from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .errors import SourceUnavailable
from .normalize import decode_csv_bytes, parse_csv_text, render_csv
from .rules import DEFAULT_HEADER, TABLE_WIDTH
from .table import ConsolidatedTable, Row

logger = logging.getLogger(__name__)


class TableStore(Protocol):
    """Storage the pipeline reads sources from and commits the aggregate to."""

    def fetch_source_rows(self, source_id: str) -> List[Row]: ...

    def read_table(self) -> ConsolidatedTable: ...

    def write_table(self, table: ConsolidatedTable) -> None: ...

    def write_status(self, status: Dict[str, Any]) -> None: ...


def _atomic_write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class CsvTableStore:
    """
    CSV-file storage.

    Layout:
    - `<sources_dir>/<source_id>.csv`: one error tracker per source (header + rows)
    - `output_path`: the consolidated table (header + rows)
    - `status_path`: JSON with the last run status
    """

    def __init__(self, sources_dir: str, output_path: str, status_path: str):
        self.sources_dir = Path(sources_dir)
        self.output_path = Path(output_path)
        self.status_path = Path(status_path)

    def source_path(self, source_id: str) -> Path:
        return self.sources_dir / f"{source_id}.csv"

    def fetch_source_rows(self, source_id: str) -> List[Row]:
        path = self.source_path(source_id)
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise SourceUnavailable(source_id, str(e)) from e

        text, enc = decode_csv_bytes(raw)
        if enc["decode_fallback"]:
            logger.warning(
                "source %s decoded with fallback %s", source_id, enc["decode_used"],
                extra={"component": "store"},
            )
        # blank lines stay in: they end the run of non-empty key cells
        rows = parse_csv_text(text, skip_blank=False)
        return rows[1:]  # drop header

    def _read_header(self) -> Optional[Row]:
        if not self.output_path.is_file():
            return None
        text, _ = decode_csv_bytes(self.output_path.read_bytes())
        rows = parse_csv_text(text)
        return rows[0] if rows else None

    def read_table(self) -> ConsolidatedTable:
        if not self.output_path.is_file():
            return ConsolidatedTable()
        text, _ = decode_csv_bytes(self.output_path.read_bytes())
        rows = parse_csv_text(text)
        if not rows:
            return ConsolidatedTable()
        table = ConsolidatedTable(header=rows[0])
        table.replace_rows(rows[1:])
        return table

    def write_table(self, table: ConsolidatedTable) -> None:
        """
        Replace the whole data region of the consolidated file in one write.
        An existing header row is kept.
        """
        header = self._read_header() or table.header or list(DEFAULT_HEADER)
        header = (list(header) + [""] * TABLE_WIDTH)[:TABLE_WIDTH]
        _atomic_write(self.output_path, render_csv(header, table.rows))
        logger.info(
            "wrote %d rows to %s", len(table), self.output_path,
            extra={"component": "store"},
        )

    def read_status(self) -> Optional[Dict[str, Any]]:
        if not self.status_path.is_file():
            return None
        with self.status_path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def write_status(self, status: Dict[str, Any]) -> None:
        _atomic_write(self.status_path, json.dumps(status, indent=2).encode("utf-8"))
