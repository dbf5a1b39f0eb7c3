import pytest

from error_dashboard.normalize import (
    apply_core_levels,
    apply_grade_names,
    classify_level,
    classify_levels,
    condense_subjects,
    normalize_grade,
    normalize_grades,
    normalize_table,
)
from error_dashboard.rules import GRADE_COLUMN, LESSON_CODE_COLUMN, LEVEL_COLUMN, SUBJECT_COLUMN, TABLE_WIDTH
from error_dashboard.table import ConsolidatedTable


def make_row(grade="", subject="", code="", program="Bridge Kenya"):
    row = [""] * TABLE_WIDTH
    row[0] = program
    row[GRADE_COLUMN] = grade
    row[SUBJECT_COLUMN] = subject
    row[LESSON_CODE_COLUMN] = code
    return row


# --- grades ---

@pytest.mark.parametrize("raw, expected", [
    ("Standard 1", "Primary 1"),
    ("Grade 1", "Primary 1"),
    ("  Standard 3 ", "Primary 3"),
    ("Grade 5", "Primary 5"),
    ("Class 6", "Primary 6"),
    ("Grade 6", "Primary 6"),
    ("Primary 7", "JSS 1"),
    ("Class 7", "JSS 1"),
    ("Class 8", "JSS 2"),
    ("Class 9", "JSS 3"),
    ("Grade 10", "Class 10"),
    ("Class 10", "Class 10"),
])
def test_grade_table(raw, expected):
    assert normalize_grade(raw) == expected


def test_unmapped_grade_is_trimmed_only():
    assert normalize_grade("  Nursery  ") == "Nursery"
    assert normalize_grade("grade 1") == "grade 1"  # case-sensitive
    assert normalize_grade("") == ""


def test_grade_normalization_is_idempotent():
    values = [" Standard 2", "Class 8 ", "Baby Class", "Primary 4", "", "Grade 10"]
    once = normalize_grades(values)
    assert normalize_grades(once) == once


def test_grade_stage_rewrites_every_cell():
    table = ConsolidatedTable()
    table.replace_rows([make_row(grade=" Grade 4 "), make_row(grade=" Other ")])
    apply_grade_names(table)
    assert table.column(GRADE_COLUMN) == ["Primary 4", "Other"]


# --- subjects ---

def condense_one(subject, grade="Primary 1"):
    return condense_subjects([subject], [grade])[0]


def test_science_needs_grade_four_and_up():
    assert condense_one("Science", "Primary 5") == "Science (P4+)"
    assert condense_one(" Basic Science and Technology ", "JSS 2") == "Science (P4+)"
    assert condense_one("Science & Technology", "Class 10") == "Science (P4+)"
    assert condense_one("Science", "Primary 3") == "Science"


@pytest.mark.parametrize("raw, expected", [
    ("BECE English Prep", "BECE Prep"),
    ("BECE Mathematics Prep", "BECE Prep"),
    ("HSLC Prep - Social Science", "HSLC Prep"),
    ("KPSEA Prep Kiswahili", "KPSEA Prep"),
    ("KPSEA Prep Mathematics", "KPSEA Prep"),
    ("Co curricular", "Co-Curricular"),
    ("Clubs", "Co-Curricular"),
    ("English Studies Reading 2", "English Studies - Reading"),
    ("English Studies - Language Arts", "English Studies - Language"),
    ("Mathematics 2", "Mathematics"),
    ("Primary Mathematics", "Mathematics"),
    ("Mathematics 1 Revision", "Mathematics"),
    ("Math", "Maths"),
    ("Maths", "Maths"),
    ("Supplemental English", "Supplementary English"),
    ("Supplemental Maths", "Supplementary Maths"),
    ("Preparatory English 3", "Preparatory English"),
    ("Preparatory Maths", "Preparatory Maths"),
    ("Social Studies and Religion", "Social Studies"),
    ("Independence Day", "Holiday Lesson(s)"),
    ("Easter holiday pack", "Holiday Lesson(s)"),
])
def test_subject_rules(raw, expected):
    assert condense_one(raw) == expected


def test_social_studies_and_science_is_left_alone():
    assert condense_one("Social Studies and Science", "Primary 2") == "Social Studies and Science"


def test_rule_order_mathematics_before_holiday():
    assert condense_one("Holiday Mathematics Day") == "Mathematics"


def test_unmatched_subject_keeps_original_value():
    assert condense_one("  Kiswahili ") == "  Kiswahili "
    assert condense_one("Mathematics") == "Mathematics"  # no leading space, no number


def test_subject_stage_uses_normalized_grades():
    table = ConsolidatedTable()
    table.replace_rows([make_row(grade="Standard 4", subject="Science")])
    normalize_table(table)
    assert table.column(SUBJECT_COLUMN) == ["Science (P4+)"]


def test_condense_subjects_length_mismatch():
    with pytest.raises(ValueError):
        condense_subjects(["Math"], [])


# --- lesson codes ---

@pytest.mark.parametrize("code, expected", [
    ("LAL01", "Reading Level A"),
    ("LEL12", "Reading Level E"),
    (" LBL03_C ", "Reading Level B - Contingency"),
    ("LCN_C", "Mathematics Level C - Contingency"),
    ("LAN07", "Mathematics Level A"),
    ("LEN02_C", "Mathematics Level E - Contingency"),
    ("ZZ99", ""),
    ("", ""),
    ("lal01", ""),
])
def test_classify_level(code, expected):
    assert classify_level(code) == expected


def test_language_levels_are_shadowed_by_reading_levels():
    assert classify_level("LALG01") == "Reading Level A"
    assert classify_level("LBLG04_C") == "Reading Level B - Contingency"


def test_level_stage_writes_one_label_per_row():
    codes = ["LDN1", "nothing", "LCL9_C"]
    table = ConsolidatedTable()
    table.replace_rows([make_row(code=c) for c in codes])
    apply_core_levels(table)
    assert table.column(LEVEL_COLUMN) == classify_levels(codes)
    assert table.column(LEVEL_COLUMN) == ["Mathematics Level D", "", "Reading Level C - Contingency"]
