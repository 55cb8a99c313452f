"""
Eligibility API Routes

Program matches for the signed-in student.
"""

from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from db import get_db
from admissions.logic.policy import Policy
from utils.deps import current_policy, http_errors
from .logic.contracts import ProgramMatch
from .logic.runner import get_program_matches, count_program_matches, match_student_to_program


router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("", response_model=List[ProgramMatch], summary="Programs matching my verified qualifications")
def list_matches(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return get_program_matches(db, policy.require_student())


@router.get("/count", summary="Number of programs I strictly qualify for")
def match_count(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return {"count": count_program_matches(db, policy.require_student())}


@router.get("/{program_id}", response_model=ProgramMatch, summary="Requirement-by-requirement match for one program")
def program_match(
    program_id: UUID,
    verified_only: bool = Query(default=False),
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        return match_student_to_program(db, policy.require_student(), program_id, verified_only=verified_only)
