from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class DashboardError(Exception):
    """
    Fatal pipeline error. Any DashboardError aborts the update run.
    """

    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details or {},
        }


class SourceUnavailable(DashboardError):
    def __init__(self, source_id: str, reason: str):
        super().__init__(
            code="SOURCE_UNAVAILABLE",
            message=f"Source {source_id} cannot be read: {reason}",
            details={"source_id": source_id},
        )


class MalformedRow(DashboardError):
    def __init__(self, where: str, row: int, expected: int, got: int):
        super().__init__(
            code="MALFORMED_ROW",
            message=f"Row {row} of {where} has {got} columns, expected at least {expected}",
            details={"where": where, "row": row, "expected": expected, "got": got},
        )


__all__ = ["DashboardError", "SourceUnavailable", "MalformedRow"]
