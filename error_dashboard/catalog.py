from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Tuple

import yaml


@dataclass(frozen=True)
class SourceRecord:
    source_id: str
    program_label: str


# Program error trackers feeding the aggregate, in output order.
DEFAULT_CATALOG: Tuple[SourceRecord, ...] = (
    SourceRecord("18cK8hMlNjC8JclnqQt-Wm-oeBbrrLNyWErvePEc_Z1E", "BayelsaPRIME"),
    SourceRecord("1InSSjWL_OCXrK6KvYZFweREmCOh9ayEuPbC0IpfTnXQ", "Bridge Andhra Pradesh"),
    SourceRecord("1Z49FAwkq8c0bSFPpG2Ki3Gh_t9XjiqvWov2D_1-rNgk", "Bridge Kenya"),
    SourceRecord("1tVqoavTYriWY50JAz7ludDW0wttW6Si6YnqkOTNZlbk", "Bridge Liberia"),
    SourceRecord("1YIUIxMtfpVgRSgaOp6BwNFs3nbDPVwXANfib1uzrc-c", "Bridge Nigeria"),
    SourceRecord("1AgntRauSd70NYGNcU_tgNxAKo-hfuub8NKaptsUbMTM", "Bridge Uganda"),
    SourceRecord("12uL3uodPrXZpoQ6ZZ3Bmo_em9ODzq1nyLsXFm2axGwY", "EdoBEST"),
    SourceRecord("1ImTQcgqV3gY4aNe_o1w33MOXwg-DyrhvCYgfIXMoXfQ", "EKOEXCEL"),
    SourceRecord("1JrnrVwDf8kdzko1NXFriJ6FfdOLW5bH9vDQIuC2_ZHE", "KwaraLEARN"),
    SourceRecord("1-ItQ14rgJAIMYN3fWW1t08ciT0Qp54jrB8zZGsWFJmk", "RwandaEQUIP"),
    SourceRecord("1hoQl1qeK7C0C7hx1IDRMgMyiUvsreN7ji5wBVxDqDrM", "STAR Education"),
)


def _parse_entries(entries: Any) -> List[SourceRecord]:
    if not isinstance(entries, list):
        raise ValueError("catalog must be a list of {id, program} entries")
    records: List[SourceRecord] = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("id") or not entry.get("program"):
            raise ValueError(f"catalog entry {idx} needs non-empty 'id' and 'program'")
        records.append(SourceRecord(str(entry["id"]), str(entry["program"])))
    return records


def load_catalog(path: str | None) -> Tuple[SourceRecord, ...]:
    """
    Load the source catalog from a YAML file.

    The file holds either a top-level list or a mapping with a `sources` key;
    each entry is `{id: ..., program: ...}`. Without a path, or when the file
    has no catalog, the built-in catalog is used. A path that does not
    exist raises ValueError.
    """
    if not path:
        return DEFAULT_CATALOG
    p = Path(path)
    if not p.is_file():
        raise ValueError(f"catalog file not found: {path}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("sources")
    if not data:
        return DEFAULT_CATALOG
    return tuple(_parse_entries(data))
