from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class NormalizedCsv(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8-sig")
    content_b64: str


class ReportSummary(BaseModel):
    rows: Optional[int] = Field(default=None, examples=[42])
    columns: Optional[int] = Field(default=None, examples=[18])
    warnings: int = 0
    errors: int = 0
    deterministic: bool = True


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class NormalizationReport(BaseModel):
    summary: ReportSummary
    normalizations: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)
    errors: List[ReportItem] = Field(default_factory=list)


class NormalizeResponse(BaseModel):
    normalized_csv: NormalizedCsv
    report: NormalizationReport


class RunError(BaseModel):
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class RunReport(BaseModel):
    run_id: str
    status: Literal["success", "failure"]
    status_label: str = Field(examples=["Last Update", "Last Failed Updated"])
    update_time: str
    execution_ms: int
    rows: int = 0
    included_sources: List[str] = Field(default_factory=list)
    skipped_sources: List[str] = Field(default_factory=list)
    error: Optional[RunError] = None
    notified: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class RenormalizeResponse(BaseModel):
    rows: int


class HealthResponse(BaseModel):
    ok: bool = True
