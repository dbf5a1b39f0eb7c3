"""
Grade, subject and lesson-code normalization.

Responsibilities:
- canonical grade names (every cell trimmed, known labels mapped)
- condensed subject names (matched cells overwritten, others left as they were)
- core subject / level derived from the lesson code
- decoding of uploaded CSV bytes + the normalization envelope for the API
"""

from __future__ import annotations

import base64
import csv
import hashlib
import io
from typing import Any, Dict, List, Optional, Sequence

from charset_normalizer import from_bytes

from .errors import MalformedRow
from .rules import (
    CONTINGENCY_LABEL,
    CONTINGENCY_SUFFIX,
    GRADE_COLUMN,
    GRADE_RULES,
    LESSON_CODE_COLUMN,
    LEVEL_COLUMN,
    LEVEL_RULES,
    NORMALIZED_DELIMITER,
    SUBJECT_COLUMN,
    SUBJECT_RULES,
    TABLE_WIDTH,
    TARGET_ENCODING,
    SubjectRule,
)
from .table import ConsolidatedTable


# --- grades ---

def normalize_grade(value: str) -> str:
    cell = value.strip()
    for raws, canonical in GRADE_RULES:
        if cell in raws:
            return canonical
    return cell


def normalize_grades(values: Sequence[str]) -> List[str]:
    return [normalize_grade(v) for v in values]


def apply_grade_names(table: ConsolidatedTable) -> ConsolidatedTable:
    table.set_column(GRADE_COLUMN, normalize_grades(table.column(GRADE_COLUMN)))
    return table


# --- subjects ---

def match_subject_rule(subject: str, grade: str) -> Optional[SubjectRule]:
    """First rule matching the trimmed subject, or None."""
    cell = subject.strip()
    for rule in SUBJECT_RULES:
        if rule.matches(cell, grade):
            return rule
    return None


def condense_subjects(subjects: Sequence[str], grades: Sequence[str]) -> List[str]:
    """
    Condense subject names row by row against the normalized grades.

    Unmatched subjects come back exactly as given (not trimmed).
    """
    if len(subjects) != len(grades):
        raise ValueError(f"got {len(subjects)} subjects for {len(grades)} grades")
    out: List[str] = []
    for subject, grade in zip(subjects, grades):
        rule = match_subject_rule(subject, grade)
        out.append(rule.replacement if rule is not None else subject)
    return out


def apply_subject_names(table: ConsolidatedTable, grades: Sequence[str]) -> ConsolidatedTable:
    table.set_column(SUBJECT_COLUMN, condense_subjects(table.column(SUBJECT_COLUMN), grades))
    return table


# --- lesson codes ---

def classify_level(code: str) -> str:
    cell = code.strip()
    for rule in LEVEL_RULES:
        if cell.startswith(rule.prefix):
            if rule.has_contingency and cell.endswith(CONTINGENCY_SUFFIX):
                return rule.label + CONTINGENCY_LABEL
            return rule.label
    return ""


def classify_levels(codes: Sequence[str]) -> List[str]:
    return [classify_level(c) for c in codes]


def apply_core_levels(table: ConsolidatedTable) -> ConsolidatedTable:
    table.set_column(LEVEL_COLUMN, classify_levels(table.column(LESSON_CODE_COLUMN)))
    return table


def normalize_table(table: ConsolidatedTable) -> ConsolidatedTable:
    """Grades, then subjects (against the new grades), then levels."""
    apply_grade_names(table)
    apply_subject_names(table, table.column(GRADE_COLUMN))
    apply_core_levels(table)
    return table


# --- CSV bytes ---

def decode_csv_bytes(raw: bytes) -> tuple[str, Dict[str, Any]]:
    """
    Decode CSV bytes to text with LF newlines.

    Encoding is detected best-effort via charset-normalizer; if that decode
    fails, UTF-8 is tried, then the best guess with replacement characters.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    # Strip a UTF-8 BOM instead of carrying it into the first header cell.
    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    decode_fallback = False
    try:
        text = raw.decode(decode_used)
    except (UnicodeDecodeError, LookupError):
        try:
            text = raw.decode("utf-8")
            decode_used = "utf-8"
        except UnicodeDecodeError:
            text = raw.decode("utf-8", errors="replace")
            decode_used = "utf-8"
        decode_fallback = True

    text = text.replace("\r\n", "\n").replace("\r", "\n")

    return text, {
        "detected": detected,
        "decode_used": decode_used,
        "decode_fallback": decode_fallback,
    }


def parse_csv_text(text: str, skip_blank: bool = True) -> List[List[str]]:
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=NORMALIZED_DELIMITER)
    return [row for row in reader if row or not skip_blank]


def render_csv(header: Sequence[str], rows: Sequence[Sequence[str]]) -> bytes:
    outp = io.StringIO(newline="")
    writer = csv.writer(outp, delimiter=NORMALIZED_DELIMITER, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return outp.getvalue().encode(TARGET_ENCODING)


CANONICAL_GRADES = frozenset(canonical for _, canonical in GRADE_RULES)


def _is_known_grade(value: str) -> bool:
    return value in CANONICAL_GRADES or any(value in raws for raws, _ in GRADE_RULES)


def _unmatched_warnings(
    table: ConsolidatedTable, grades_before: List[str], subjects_before: List[str]
) -> list[dict]:
    warnings: list[dict] = []
    grades = table.column(GRADE_COLUMN)
    for i, row in enumerate(table.rows):
        line = i + 2  # header is line 1
        if grades[i] and not _is_known_grade(grades_before[i].strip()):
            warnings.append({
                "row": line,
                "column": table.header[GRADE_COLUMN],
                "issue": "grade_unmapped",
                "value": grades[i],
                "action": "trimmed",
            })
        subject = subjects_before[i]
        if subject.strip() and match_subject_rule(subject, grades[i]) is None:
            warnings.append({
                "row": line,
                "column": table.header[SUBJECT_COLUMN],
                "issue": "subject_uncondensed",
                "value": subject,
                "action": "left_unchanged",
            })
        if row[LESSON_CODE_COLUMN].strip() and not row[LEVEL_COLUMN]:
            warnings.append({
                "row": line,
                "column": table.header[LESSON_CODE_COLUMN],
                "issue": "lesson_code_unclassified",
                "value": row[LESSON_CODE_COLUMN],
                "action": "level_left_empty",
            })
    return warnings


def normalize_csv_bytes(raw: bytes) -> Dict[str, Any]:
    """
    Run the grade/subject/level stages on an uploaded consolidated CSV.
    Returns a dict matching the API's response envelope.

    Raises MalformedRow if a data row is narrower than the consolidated
    layout; wider rows are cut to it.
    """
    text, enc_report = decode_csv_bytes(raw)
    rows = parse_csv_text(text)
    if not rows:
        raise MalformedRow("upload", 1, TABLE_WIDTH, 0)

    header, data = rows[0], rows[1:]
    for i, row in enumerate(data):
        if len(row) < TABLE_WIDTH:
            raise MalformedRow("upload", i + 2, TABLE_WIDTH, len(row))

    table = ConsolidatedTable(header=(header + [""] * TABLE_WIDTH)[:TABLE_WIDTH])
    table.replace_rows([row[:TABLE_WIDTH] for row in data])

    grades_before = table.column(GRADE_COLUMN)
    subjects_before = table.column(SUBJECT_COLUMN)
    normalize_table(table)
    warnings = _unmatched_warnings(table, grades_before, subjects_before)

    normalized_bytes = render_csv(table.header, table.rows)
    b64 = base64.b64encode(normalized_bytes).decode("ascii")

    return {
        "normalized_csv": {
            "sha256": hashlib.sha256(normalized_bytes).hexdigest(),
            "encoding": TARGET_ENCODING,
            "content_b64": b64,
        },
        "report": {
            "summary": {
                "rows": len(table),
                "columns": table.width,
                "warnings": len(warnings),
                "errors": 0,
                "deterministic": True,
            },
            "normalizations": {
                "encoding": {**enc_report, "output": "utf-8-bom"},
                "grades_rewritten": sum(
                    1 for a, b in zip(grades_before, table.column(GRADE_COLUMN)) if a != b
                ),
                "subjects_condensed": sum(
                    1 for a, b in zip(subjects_before, table.column(SUBJECT_COLUMN)) if a != b
                ),
                "levels_classified": sum(1 for v in table.column(LEVEL_COLUMN) if v),
            },
            "warnings": warnings,
            "errors": [],
        },
    }
