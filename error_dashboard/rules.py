"""
Deterministic normalization rules.

Rule tables are ordered; the first matching rule wins. Column positions are
0-based indexes into a consolidated row (program label first, then the
source columns A..Q).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

TARGET_ENCODING = "utf-8-sig"  # UTF-8 with BOM
NORMALIZED_DELIMITER = ","

# --- consolidated table layout ---
SOURCE_WIDTH = 17  # source columns A..Q
TABLE_WIDTH = SOURCE_WIDTH + 1

PROGRAM_COLUMN = 0
KEY_COLUMN = 0  # position in the *source* row
GRADE_COLUMN = 6
SUBJECT_COLUMN = 7
LESSON_CODE_COLUMN = 8
LEVEL_COLUMN = 17

DEFAULT_HEADER = ["Program"] + [f"Column {chr(ord('A') + i)}" for i in range(SOURCE_WIDTH)]
DEFAULT_HEADER[GRADE_COLUMN] = "Grade"
DEFAULT_HEADER[SUBJECT_COLUMN] = "Subject"
DEFAULT_HEADER[LESSON_CODE_COLUMN] = "Lesson Code"
DEFAULT_HEADER[LEVEL_COLUMN] = "Core Subject / Level"


# --- grades ---
GRADE_RULES: tuple[tuple[frozenset, str], ...] = (
    (frozenset({"Standard 1", "Grade 1"}), "Primary 1"),
    (frozenset({"Standard 2", "Grade 2"}), "Primary 2"),
    (frozenset({"Standard 3", "Grade 3"}), "Primary 3"),
    (frozenset({"Standard 4", "Grade 4"}), "Primary 4"),
    (frozenset({"Standard 5", "Grade 5"}), "Primary 5"),
    (frozenset({"Grade 6", "Class 6"}), "Primary 6"),
    (frozenset({"Class 7", "Grade 7", "Primary 7"}), "JSS 1"),
    (frozenset({"Class 8"}), "JSS 2"),
    (frozenset({"Class 9"}), "JSS 3"),
    (frozenset({"Class 10", "Grade 10"}), "Class 10"),
)


# --- subjects ---
@dataclass(frozen=True)
class SubjectRule:
    name: str
    matches: Callable[[str, str], bool]  # (trimmed subject, normalized grade)
    replacement: str


GRADES_FOUR_AND_UP = frozenset(
    {"Primary 4", "Primary 5", "Primary 6", "JSS 1", "JSS 2", "JSS 3", "Class 10"}
)

SCIENCE_SUBJECTS = frozenset({
    "Basic Science and Technology",
    "Basic Science and Technology - Basic Science",
    "Science",
    "Science & Technology",
})

BECE_PREP = frozenset({
    "BECE BST Prep",
    "BECE English Prep",
    "BECE Mathematics Prep",
    "BECE National Values Prep",
    "BECE Pre-Vocational Studies Prep",
})

HSLC_PREP = frozenset({
    "HSLC Prep - English",
    "HSLC Prep - Mathematics",
    "HSLC Prep - Science",
    "HSLC Prep - Social Science",
})

KPSEA_PREP = frozenset({
    "KPSEA Prep Creative Arts",
    "KPSEA Prep Creative Arts and Social Studies",
    "KPSEA Prep English",
    "KPSEA Prep Integrated Sciences",
    "KPSEA Prep Kiswahili",
    "KPSEA Prep Mathematics",
    "KPSEA Prep Science & Technology",
    "KPSEA Prep Social Studies",
})

CO_CURRICULAR = frozenset({
    "Co-curricular",
    "Co-Curricular",
    "Co Curricular",
    "Co curricular",
    "Cocurricular",
    "Clubs",
})

HOLIDAY_MARKERS = ("Day", "day", " holiday")


def _one_of(values: frozenset) -> Callable[[str, str], bool]:
    return lambda subject, grade: subject in values


def _contains_all(*parts: str) -> Callable[[str, str], bool]:
    return lambda subject, grade: all(p in subject for p in parts)


def _is_mathematics(subject: str, grade: str) -> bool:
    if subject in ("Mathematics 1", "Mathematics 2", "Mathematics 3"):
        return True
    return any(p in subject for p in (" Mathematics", "Mathematics 1 ", "Mathematics 2 "))


SUBJECT_RULES: tuple[SubjectRule, ...] = (
    SubjectRule(
        "science_p4_plus",
        lambda subject, grade: grade in GRADES_FOUR_AND_UP and subject in SCIENCE_SUBJECTS,
        "Science (P4+)",
    ),
    SubjectRule("bece_prep", _one_of(BECE_PREP), "BECE Prep"),
    SubjectRule("hslc_prep", _one_of(HSLC_PREP), "HSLC Prep"),
    SubjectRule("kpsea_prep", _one_of(KPSEA_PREP), "KPSEA Prep"),
    SubjectRule("co_curricular", _one_of(CO_CURRICULAR), "Co-Curricular"),
    SubjectRule("english_reading", _contains_all("English Studies", "Reading"), "English Studies - Reading"),
    SubjectRule("english_language", _contains_all("English Studies", "Language"), "English Studies - Language"),
    SubjectRule("mathematics", _is_mathematics, "Mathematics"),
    SubjectRule("maths", _one_of(frozenset({"Maths", "Math"})), "Maths"),
    SubjectRule(
        "supplementary_english",
        _one_of(frozenset({"Supplementary English", "Supplemental English"})),
        "Supplementary English",
    ),
    SubjectRule(
        "supplementary_maths",
        _one_of(frozenset({"Supplementary Maths", "Supplemental Maths"})),
        "Supplementary Maths",
    ),
    SubjectRule("preparatory_english", _contains_all("Preparatory English"), "Preparatory English"),
    SubjectRule("preparatory_maths", _contains_all("Preparatory Maths"), "Preparatory Maths"),
    SubjectRule(
        "social_studies",
        lambda subject, grade: subject != "Social Studies and Science" and "Social Studies" in subject,
        "Social Studies",
    ),
    SubjectRule(
        "holiday",
        lambda subject, grade: any(m in subject for m in HOLIDAY_MARKERS),
        "Holiday Lesson(s)",
    ),
)


# --- lesson codes ---
CONTINGENCY_SUFFIX = "_C"
CONTINGENCY_LABEL = " - Contingency"


@dataclass(frozen=True)
class LevelRule:
    prefix: str
    label: str
    has_contingency: bool = True


# LAL/LBL are checked before LALG/LBLG, so the language levels never match.
LEVEL_RULES: tuple[LevelRule, ...] = (
    LevelRule("LAL", "Reading Level A"),
    LevelRule("LBL", "Reading Level B"),
    LevelRule("LCL", "Reading Level C"),
    LevelRule("LDL", "Reading Level D"),
    LevelRule("LEL", "Reading Level E"),
    LevelRule("LALG", "Language Level A", has_contingency=False),
    LevelRule("LBLG", "Language Level B", has_contingency=False),
    LevelRule("LAN", "Mathematics Level A"),
    LevelRule("LBN", "Mathematics Level B"),
    LevelRule("LCN", "Mathematics Level C"),
    LevelRule("LDN", "Mathematics Level D"),
    LevelRule("LEN", "Mathematics Level E"),
)
