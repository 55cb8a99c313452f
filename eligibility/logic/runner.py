"""
Eligibility Runner

Orchestrates matcher runs over database records:
- one student against one program (detail view, apply check)
- one student against every program (match list and match counter)
"""

import logging
from typing import List
from uuid import UUID
from sqlalchemy.orm import Session

from utils.errors import NotFoundError
from .adapter import (
    fetch_student,
    fetch_qualifications,
    fetch_program,
    fetch_programs_with_requirements,
    to_requirement_records,
)
from .constants import MATCH_LISTING_THRESHOLD
from .contracts import ProgramMatch
from .matcher import match

logger = logging.getLogger("eligibility")


def _program_match(program, qualifications) -> ProgramMatch:
    result = match(qualifications, to_requirement_records(program))
    department = program.department
    university = department.university if department else None
    return ProgramMatch(
        program_id=program.id,
        program_name=program.name,
        department_name=department.name if department else "Unknown Department",
        university_name=university.name if university else "Unknown University",
        **result.model_dump(),
    )


def match_student_to_program(
    db: Session,
    student_id: UUID,
    program_id: UUID,
    verified_only: bool = False,
) -> ProgramMatch:
    """Score a single program for a student."""
    program = fetch_program(db, program_id)
    if not program:
        raise NotFoundError("Program not found")
    if not fetch_student(db, student_id):
        raise NotFoundError("Student not found")
    qualifications = fetch_qualifications(db, student_id, verified_only=verified_only)
    return _program_match(program, qualifications)


def get_program_matches(db: Session, student_id: UUID) -> List[ProgramMatch]:
    """
    Programs scoring at least MATCH_LISTING_THRESHOLD against the student's
    verified qualifications, best first. Programs without requirements are skipped.
    """
    qualifications = fetch_qualifications(db, student_id, verified_only=True)
    matches: List[ProgramMatch] = []
    for program in fetch_programs_with_requirements(db):
        if not program.requirements:
            continue
        pm = _program_match(program, qualifications)
        if pm.match_score >= MATCH_LISTING_THRESHOLD:
            matches.append(pm)
    logger.info("Student %s matched %d programs", student_id, len(matches))
    return sorted(matches, key=lambda m: m.match_score, reverse=True)


def count_program_matches(db: Session, student_id: UUID) -> int:
    """Number of programs the student strictly qualifies for."""
    qualifications = fetch_qualifications(db, student_id, verified_only=True)
    count = 0
    for program in fetch_programs_with_requirements(db):
        if not program.requirements:
            continue
        if _program_match(program, qualifications).qualifies:
            count += 1
    return count
