"""
Data Contracts for the Eligibility Matcher

Input records are deliberately loose (plain strings for enum fields) so a bad
value from storage degrades to an unmet requirement instead of a validation
error.
"""

from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from .constants import MatchStatus, MatchDecision


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class QualificationRecord(BaseModel):
    """A student's academic record as seen by the matcher."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    type: str
    subject: str = ""
    grade: str = ""
    verified: bool = False


class RequirementRecord(BaseModel):
    """One admission criterion of a program."""
    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    type: str
    subject: Optional[str] = None
    min_grade: Optional[str] = None
    description: str = ""


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class QualificationMatch(BaseModel):
    qualification_id: Optional[UUID] = None
    type: str
    subject: str
    grade: str
    verified: bool
    match_reason: str


class RequirementMatch(BaseModel):
    requirement_id: Optional[UUID] = None
    type: str
    subject: Optional[str] = None
    min_grade: Optional[str] = None
    description: str = ""
    status: MatchStatus
    matching_qualifications: List[QualificationMatch] = Field(default_factory=list)


class MatchResult(BaseModel):
    """
    Per-requirement breakdown plus both aggregate views:
    `qualifies` is the strict AND over requirement-type groups,
    `match_score` is the rounded share of met requirements.
    """
    requirements: List[RequirementMatch] = Field(default_factory=list)
    met_requirements: int = 0
    total_requirements: int = 0
    match_score: int = Field(default=0, ge=0, le=100)
    qualifies: bool = False
    decision: MatchDecision = MatchDecision.BLOCK


class ProgramMatch(MatchResult):
    program_id: UUID
    program_name: str
    department_name: str
    university_name: str
