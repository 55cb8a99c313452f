"""
Matcher behaviour on plain records: per-requirement status, grouping,
score and decision.
"""

from eligibility.logic import match, check_requirement, MatchStatus, MatchDecision
from eligibility.logic.contracts import QualificationRecord, RequirementRecord
from eligibility.logic.matcher import percentage


def _q(type, subject, grade, verified=True):
    return QualificationRecord(type=type, subject=subject, grade=grade, verified=verified)


def _r(type, subject=None, min_grade=None):
    return RequirementRecord(type=type, subject=subject, min_grade=min_grade)


def test_no_requirements_scores_full_and_admits():
    result = match([_q("HIGH_SCHOOL", "Mathematics", "A")], [])
    assert result.match_score == 100
    assert result.qualifies is True
    assert result.decision == MatchDecision.ADMIT


def test_grade_requirement_met_with_subject_case_insensitive():
    rm = check_requirement(_r("GRADE", "Mathematics", "B"), [_q("HIGH_SCHOOL", " mathematics ", "A")])
    assert rm.status == MatchStatus.MET
    assert len(rm.matching_qualifications) == 1
    assert rm.matching_qualifications[0].match_reason == "Meets grade requirement"


def test_grade_requirement_needs_high_school_record():
    rm = check_requirement(_r("GRADE", "Mathematics", "B"), [_q("UNDERGRADUATE", "Mathematics", "A")])
    assert rm.status == MatchStatus.UNMET


def test_low_grade_in_right_subject_is_partial():
    rm = check_requirement(_r("GRADE", "Physics", "B"), [_q("HIGH_SCHOOL", "Physics", "D")])
    assert rm.status == MatchStatus.PARTIAL
    assert rm.matching_qualifications == []


def test_course_requirement_uses_default_minimum():
    req = _r("COURSE", "Programming")
    assert check_requirement(req, [_q("UNDERGRADUATE", "Programming", "D")]).status == MatchStatus.MET
    assert check_requirement(req, [_q("UNDERGRADUATE", "Programming", "E")]).status == MatchStatus.PARTIAL


def test_language_requirement_partial_with_any_test():
    req = _r("LANGUAGE", "IELTS", "6.5")
    assert check_requirement(req, [_q("LANGUAGE_TEST", "IELTS", "7.0")]).status == MatchStatus.MET
    assert check_requirement(req, [_q("LANGUAGE_TEST", "TOEFL", "100")]).status == MatchStatus.PARTIAL
    assert check_requirement(req, []).status == MatchStatus.UNMET


def test_interview_and_portfolio_always_met():
    result = match([], [_r("INTERVIEW"), _r("PORTFOLIO")])
    assert result.met_requirements == 2
    assert result.qualifies is True


def test_one_unmet_requirement_breaks_its_group():
    quals = [_q("HIGH_SCHOOL", "Mathematics", "A")]
    reqs = [_r("GRADE", "Mathematics", "B"), _r("GRADE", "Physics", "B")]
    result = match(quals, reqs)
    assert result.qualifies is False
    assert result.met_requirements == 1
    assert result.match_score == 50
    assert result.decision == MatchDecision.APPLY_ANYWAY


def test_score_below_threshold_blocks():
    quals = [_q("HIGH_SCHOOL", "Mathematics", "A")]
    reqs = [_r("GRADE", "Mathematics", "B"), _r("GRADE", "Physics", "B"), _r("LANGUAGE", "IELTS", "6.5")]
    result = match(quals, reqs)
    assert result.match_score == 33
    assert result.decision == MatchDecision.BLOCK


def test_qualifies_implies_full_score():
    quals = [_q("HIGH_SCHOOL", "Mathematics", "A"), _q("LANGUAGE_TEST", "IELTS", "7.5")]
    reqs = [_r("GRADE", "Mathematics", "B"), _r("LANGUAGE", "IELTS", "6.5"), _r("INTERVIEW")]
    result = match(quals, reqs)
    assert result.qualifies is True
    assert result.match_score == 100
    assert all(m.status == MatchStatus.MET for m in result.requirements)


def test_accepts_plain_dicts_and_skips_bad_records():
    quals = [{"type": "HIGH_SCHOOL", "subject": "Chemistry", "grade": "B"}, {"subject": "no type"}]
    reqs = [{"type": "GRADE", "subject": "Chemistry", "min_grade": "C"}, {"subject": "no type"}]
    result = match(quals, reqs)
    assert result.total_requirements == 2
    assert result.met_requirements == 1
    assert result.requirements[1].type == "UNKNOWN"
    assert result.requirements[1].status == MatchStatus.UNMET


def test_percentage_rounds_half_up():
    assert percentage(0, 0) == 100
    assert percentage(2, 3) == 67
    assert percentage(1, 8) == 13
    assert percentage(0, 4) == 0


def test_single_grade_requirement_met_and_missed():
    quals = [_q("HIGH_SCHOOL", "Math", "B")]

    met = match(quals, [_r("GRADE", "Math", "C")])
    assert met.requirements[0].status == MatchStatus.MET
    assert met.match_score == 100

    missed = match(quals, [_r("GRADE", "Math", "A")])
    assert missed.requirements[0].status != MatchStatus.MET
    assert missed.match_score == 0
    assert missed.qualifies is False


def test_match_is_idempotent():
    quals = [_q("HIGH_SCHOOL", "Mathematics", "B"), _q("LANGUAGE_TEST", "IELTS", "6.0")]
    reqs = [_r("GRADE", "Mathematics", "C"), _r("LANGUAGE", "IELTS", "6.5"), _r("PORTFOLIO")]
    assert match(quals, reqs) == match(quals, reqs)
