"""
Eligibility Matching Constants

Grade scales, type compatibility and decision thresholds used by the matcher.
"""

import os
from enum import Enum
from typing import Dict, List, Tuple

from dotenv import load_dotenv

load_dotenv()


# =============================================================================
# GRADE SCALES
# =============================================================================

# Plain letter grades, best first
LETTER_GRADE_ORDER: List[str] = ["A", "B", "C", "D", "E", "F"]

# WASSCE/WAEC grades, worst first (index comparison)
WASSCE_GRADE_ORDER: List[str] = ["F9", "E8", "D7", "C6", "C5", "C4", "B3", "B2", "A1"]

# COURSE requirements without a stated minimum
DEFAULT_COURSE_MIN_GRADE = "D"

# Band cut-offs for numeric grades, keyed by the top of the scale they apply to:
# scale_max -> (low_below, high_at_or_above)
NUMERIC_GRADE_BANDS: List[Tuple[float, Tuple[float, float]]] = [
    (4.0, (2.5, 3.5)),     # GPA
    (10.0, (5.5, 7.0)),    # IELTS-style band scores
    (120.0, (50.0, 70.0)), # percentages / TOEFL-style totals
]

LETTER_GRADE_BANDS: Dict[str, str] = {
    "A": "high",
    "B": "high",
    "C": "mid",
    "D": "low",
    "E": "low",
    "F": "low",
}

WASSCE_GRADE_BANDS: Dict[str, str] = {
    "A1": "high",
    "B2": "high",
    "B3": "high",
    "C4": "mid",
    "C5": "mid",
    "C6": "mid",
    "D7": "low",
    "E8": "low",
    "F9": "low",
}


# =============================================================================
# REQUIREMENT / QUALIFICATION COMPATIBILITY
# =============================================================================

# Requirement type -> qualification type that can satisfy it
COMPATIBLE_QUALIFICATION_TYPE: Dict[str, str] = {
    "GRADE": "HIGH_SCHOOL",
    "COURSE": "UNDERGRADUATE",
    "LANGUAGE": "LANGUAGE_TEST",
}

# Cannot be checked against static qualification data; always treated as met
ALWAYS_SATISFIED_REQUIREMENT_TYPES = frozenset({"INTERVIEW", "PORTFOLIO"})


# =============================================================================
# STATUS / DECISION ENUMS
# =============================================================================

class MatchStatus(str, Enum):
    MET = "met"
    PARTIAL = "partial"
    UNMET = "unmet"


class MatchDecision(str, Enum):
    ADMIT = "admit"
    APPLY_ANYWAY = "apply_anyway"
    BLOCK = "block"


# Minimum score for a non-qualifying program to still allow applying
APPLY_ANYWAY_THRESHOLD = int(os.getenv("MATCH_APPLY_THRESHOLD", "50"))

# Minimum score for a program to appear in a student's match list
MATCH_LISTING_THRESHOLD = 50
