"""
Relevance Scorer

Additive heuristic score for a single video/playlist hit against a student's
learning profile. Every rule is independent; the score has no upper bound.
"""

import re
from typing import List, Tuple

from .constants import (
    SCORE_PROGRAM_IN_TITLE,
    SCORE_DEPARTMENT_IN_TITLE,
    SCORE_PER_QUALIFICATION_SUBJECT,
    SCORE_PER_REQUIREMENT_SUBJECT,
    SCORE_POPULAR,
    SCORE_LONG_FORM,
    SCORE_PLAYLIST,
    SCORE_LEVEL_ALIGNMENT,
    POPULAR_VIEW_COUNT,
    LONG_FORM_SECONDS,
    BEGINNER_KEYWORDS,
    ADVANCED_KEYWORDS,
)
from .contracts import StudentLearningProfile, VideoCandidate, Difficulty

_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


def parse_iso_duration(value: str) -> int:
    """ISO-8601 duration ("PT1H2M3S") to seconds; 0 when unparseable."""
    m = _ISO_DURATION_RE.match((value or "").strip())
    if not m:
        return 0
    parts = {k: int(v) if v else 0 for k, v in m.groupdict().items()}
    return parts["days"] * 86400 + parts["hours"] * 3600 + parts["minutes"] * 60 + parts["seconds"]


def format_duration(seconds: int) -> str:
    if seconds <= 0:
        return ""
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def infer_difficulty(title: str, description: str = "") -> Difficulty:
    text = f"{title} {description}".lower()
    if any(k in text for k in ADVANCED_KEYWORDS):
        return Difficulty.ADVANCED
    if any(k in text for k in BEGINNER_KEYWORDS):
        return Difficulty.BEGINNER
    return Difficulty.INTERMEDIATE


def _contains(haystack: str, needle: str) -> bool:
    return bool(needle) and needle.lower() in haystack


def level_aligned(difficulty: Difficulty, profile: StudentLearningProfile) -> bool:
    """Beginner content for weaker grades, advanced content for strong grades or language-test holders."""
    bands = profile.grade_bands()
    if difficulty == Difficulty.BEGINNER:
        return "low" in bands
    if difficulty == Difficulty.ADVANCED:
        return "high" in bands or profile.has_language_test()
    return False


def score_candidate(candidate: VideoCandidate, profile: StudentLearningProfile) -> Tuple[int, List[str]]:
    """
    Returns:
        (score, matched subjects)
    """
    title = candidate.title.lower()
    score = 0
    skills: List[str] = []

    if profile.program_name and _contains(title, profile.program_name.strip()):
        score += SCORE_PROGRAM_IN_TITLE
    if profile.department_name and _contains(title, profile.department_name.strip()):
        score += SCORE_DEPARTMENT_IN_TITLE

    for subject in sorted(profile.qualification_subjects()):
        if _contains(title, subject):
            score += SCORE_PER_QUALIFICATION_SUBJECT
            skills.append(subject)

    for subject in sorted(profile.requirement_subjects()):
        if _contains(title, subject):
            score += SCORE_PER_REQUIREMENT_SUBJECT
            if subject not in skills:
                skills.append(subject)

    if candidate.view_count > POPULAR_VIEW_COUNT:
        score += SCORE_POPULAR
    if candidate.duration_seconds > LONG_FORM_SECONDS:
        score += SCORE_LONG_FORM
    if candidate.playlist:
        score += SCORE_PLAYLIST
    if level_aligned(candidate.difficulty, profile):
        score += SCORE_LEVEL_ALIGNMENT

    return score, [s.title() for s in skills]
