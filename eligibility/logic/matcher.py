"""
Eligibility Matcher

Checks a student's qualifications against a program's requirements.

Pipeline:
1. Per requirement: find satisfying qualifications -> met / partial / unmet
2. Group requirements by type; a group is satisfied only if all its
   requirements are met
3. Aggregate: strict qualification (every group satisfied) and a
   percentage score (met / total), then a decision from both

The matcher is pure and never raises on malformed records.
"""

import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import (
    COMPATIBLE_QUALIFICATION_TYPE,
    ALWAYS_SATISFIED_REQUIREMENT_TYPES,
    DEFAULT_COURSE_MIN_GRADE,
    APPLY_ANYWAY_THRESHOLD,
    MatchStatus,
    MatchDecision,
)
from .contracts import (
    QualificationRecord,
    RequirementRecord,
    QualificationMatch,
    RequirementMatch,
    MatchResult,
)
from .grades import compare_grades


def _type_of(value) -> str:
    # Accept enum members as well as raw strings
    return str(getattr(value, "value", value) or "").upper()


def _same_subject(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").strip().casefold() == (b or "").strip().casefold()


def _required_grade(requirement: RequirementRecord) -> Optional[str]:
    if requirement.min_grade:
        return requirement.min_grade
    if _type_of(requirement.type) == "COURSE":
        return DEFAULT_COURSE_MIN_GRADE
    return None


def check_qualification(
    qualification: QualificationRecord,
    requirement: RequirementRecord,
) -> Tuple[bool, str]:
    """
    Check one qualification against one requirement.

    Returns:
        (matches, reason)
    """
    req_type = _type_of(requirement.type)
    expected = COMPATIBLE_QUALIFICATION_TYPE.get(req_type)
    if expected is None or _type_of(qualification.type) != expected:
        return False, "Qualification type not compatible with requirement type"

    if requirement.subject and not _same_subject(qualification.subject, requirement.subject):
        return False, f"Subject mismatch: {qualification.subject} vs {requirement.subject}"

    min_grade = _required_grade(requirement)
    if min_grade and not compare_grades(qualification.grade, min_grade):
        return False, f"Grade too low: {qualification.grade} < {min_grade}"

    if req_type == "LANGUAGE":
        return True, "Meets language requirement"
    if req_type == "COURSE":
        return True, "Meets course requirement"
    return True, "Meets grade requirement"


def _partial_status(
    requirement: RequirementRecord,
    qualifications: Sequence[QualificationRecord],
) -> MatchStatus:
    """Evidence of the right kind exists but falls short."""
    req_type = _type_of(requirement.type)
    expected = COMPATIBLE_QUALIFICATION_TYPE.get(req_type)
    if expected is None:
        return MatchStatus.UNMET

    if req_type == "LANGUAGE":
        has_any = any(_type_of(q.type) == expected for q in qualifications)
        return MatchStatus.PARTIAL if has_any else MatchStatus.UNMET

    for q in qualifications:
        if _type_of(q.type) != expected:
            continue
        if not requirement.subject or _same_subject(q.subject, requirement.subject):
            return MatchStatus.PARTIAL
    return MatchStatus.UNMET


def check_requirement(
    requirement: RequirementRecord,
    qualifications: Sequence[QualificationRecord],
) -> RequirementMatch:
    """Evaluate a single requirement against all qualifications."""
    req_type = _type_of(requirement.type)
    matching: List[QualificationMatch] = []

    if req_type in ALWAYS_SATISFIED_REQUIREMENT_TYPES:
        status = MatchStatus.MET
    else:
        for q in qualifications:
            ok, reason = check_qualification(q, requirement)
            if ok:
                matching.append(QualificationMatch(
                    qualification_id=q.id,
                    type=_type_of(q.type),
                    subject=q.subject,
                    grade=q.grade,
                    verified=q.verified,
                    match_reason=reason,
                ))
        status = MatchStatus.MET if matching else _partial_status(requirement, qualifications)

    return RequirementMatch(
        requirement_id=requirement.id,
        type=req_type,
        subject=requirement.subject,
        min_grade=requirement.min_grade,
        description=requirement.description,
        status=status,
        matching_qualifications=matching,
    )


def group_by_type(matches: Iterable[RequirementMatch]) -> Dict[str, List[RequirementMatch]]:
    groups: Dict[str, List[RequirementMatch]] = defaultdict(list)
    for m in matches:
        groups[m.type].append(m)
    return dict(groups)


def percentage(met: int, total: int) -> int:
    """Rounded share of met requirements; half rounds up."""
    if total == 0:
        return 100
    return int(math.floor(met / total * 100 + 0.5))


def decide(qualifies: bool, match_score: int, threshold: int = APPLY_ANYWAY_THRESHOLD) -> MatchDecision:
    if qualifies:
        return MatchDecision.ADMIT
    if match_score >= threshold:
        return MatchDecision.APPLY_ANYWAY
    return MatchDecision.BLOCK


def match(
    qualifications: Sequence,
    requirements: Sequence,
    threshold: int = APPLY_ANYWAY_THRESHOLD,
) -> MatchResult:
    """
    Match qualifications against requirements.

    Args:
        qualifications: QualificationRecord instances or objects with the same attributes
        requirements: RequirementRecord instances or objects with the same attributes
        threshold: minimum score for an apply-anyway decision

    Returns:
        MatchResult with per-requirement status and aggregates
    """
    quals = [_as_record(QualificationRecord, q) for q in qualifications]
    reqs = [_as_record(RequirementRecord, r) for r in requirements]
    quals = [q for q in quals if q is not None]

    requirement_matches: List[RequirementMatch] = []
    for r in reqs:
        if r is None:
            # unreadable requirement counts against the student
            requirement_matches.append(RequirementMatch(type="UNKNOWN", status=MatchStatus.UNMET))
            continue
        requirement_matches.append(check_requirement(r, quals))

    groups = group_by_type(requirement_matches)
    qualifies = all(
        all(m.status == MatchStatus.MET for m in group)
        for group in groups.values()
    )

    met = sum(1 for m in requirement_matches if m.status == MatchStatus.MET)
    total = len(requirement_matches)
    score = percentage(met, total)

    return MatchResult(
        requirements=requirement_matches,
        met_requirements=met,
        total_requirements=total,
        match_score=score,
        qualifies=qualifies,
        decision=decide(qualifies, score, threshold),
    )


def _as_record(model, obj):
    if isinstance(obj, model):
        return obj
    try:
        if isinstance(obj, dict):
            return model.model_validate(obj)
        return model.model_validate(obj, from_attributes=True)
    except Exception:
        return None
