"""
Eligibility Logic Module

Rule-based matching of student qualifications against program requirements.
"""

from .contracts import (
    QualificationRecord,
    RequirementRecord,
    QualificationMatch,
    RequirementMatch,
    MatchResult,
    ProgramMatch,
)
from .constants import MatchStatus, MatchDecision
from .grades import compare_grades, grade_band
from .matcher import match, check_requirement
from .runner import match_student_to_program, get_program_matches, count_program_matches

__all__ = [
    # Matcher
    "match",
    "check_requirement",
    "compare_grades",
    "grade_band",

    # Runner
    "match_student_to_program",
    "get_program_matches",
    "count_program_matches",

    # Contracts
    "QualificationRecord",
    "RequirementRecord",
    "QualificationMatch",
    "RequirementMatch",
    "MatchResult",
    "ProgramMatch",

    # Enums
    "MatchStatus",
    "MatchDecision",
]
