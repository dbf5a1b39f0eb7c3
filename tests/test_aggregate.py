import pytest

from error_dashboard.aggregate import aggregate, effective_row_count
from error_dashboard.catalog import SourceRecord
from error_dashboard.errors import MalformedRow, SourceUnavailable
from error_dashboard.rules import SOURCE_WIDTH, TABLE_WIDTH
from error_dashboard.table import ConsolidatedTable


def source_row(key, fill=""):
    return [key] + [fill] * (SOURCE_WIDTH - 1)


def fetcher(data):
    def fetch(source_id):
        if source_id not in data:
            raise SourceUnavailable(source_id, "no such sheet")
        return data[source_id]
    return fetch


SOURCES = [
    SourceRecord("kenya", "Bridge Kenya"),
    SourceRecord("liberia", "Bridge Liberia"),
    SourceRecord("edo", "EdoBEST"),
]


def test_rows_are_tagged_and_kept_in_catalog_order():
    data = {
        "kenya": [source_row("k1"), source_row("k2")],
        "liberia": [source_row("l1")],
        "edo": [source_row("e1"), source_row("e2"), source_row("e3")],
    }
    result = aggregate(SOURCES, fetcher(data))

    table = result.table
    assert len(table) == 6
    assert [row[1] for row in table.rows] == ["k1", "k2", "l1", "e1", "e2", "e3"]
    assert [row[0] for row in table.rows] == ["Bridge Kenya"] * 2 + ["Bridge Liberia"] + ["EdoBEST"] * 3
    assert all(len(row) == TABLE_WIDTH for row in table.rows)
    assert result.included == ["Bridge Kenya", "Bridge Liberia", "EdoBEST"]
    assert result.skipped == []


def test_empty_source_is_skipped_without_error():
    data = {"kenya": [source_row("k1")], "liberia": [], "edo": [source_row("", "x")]}
    result = aggregate(SOURCES, fetcher(data))

    assert len(result.table) == 1
    assert result.skipped == ["Bridge Liberia", "EdoBEST"]


def test_rows_after_first_blank_key_are_dropped():
    rows = [source_row("a"), source_row("b"), source_row(""), source_row("d")]
    assert effective_row_count(rows) == 2

    result = aggregate([SOURCES[0]], fetcher({"kenya": rows}))
    assert [row[1] for row in result.table.rows] == ["a", "b"]


def test_blank_line_ends_the_data_rows():
    assert effective_row_count([source_row("a"), [], source_row("c")]) == 1


def test_wider_source_rows_are_cut_to_source_columns():
    wide = source_row("a") + ["extra", "cells"]
    result = aggregate([SOURCES[0]], fetcher({"kenya": [wide]}))
    assert result.table.rows[0] == ["Bridge Kenya"] + source_row("a")


def test_short_row_is_fatal():
    with pytest.raises(MalformedRow) as exc:
        aggregate([SOURCES[0]], fetcher({"kenya": [source_row("a"), ["b", "too short"]]}))
    assert exc.value.details["row"] == 2
    assert exc.value.code == "MALFORMED_ROW"


def test_unavailable_source_propagates():
    with pytest.raises(SourceUnavailable) as exc:
        aggregate(SOURCES, fetcher({"kenya": [source_row("k1")]}))
    assert exc.value.details == {"source_id": "liberia"}


def test_previous_contents_are_replaced():
    table = ConsolidatedTable()
    table.replace_rows([["old"] * TABLE_WIDTH] * 4)

    result = aggregate([SOURCES[0]], fetcher({"kenya": [source_row("k1")]}), table=table)

    assert result.table is table
    assert len(table) == 1
    assert table.rows[0][1] == "k1"


def test_whitespace_key_still_counts_as_data():
    rows = [source_row("a"), source_row("  "), source_row("c"), source_row("")]
    assert effective_row_count(rows) == 3
