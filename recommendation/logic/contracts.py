"""
Data Contracts for the Course Recommendation Enricher

StudentLearningProfile is the input assembled from the database,
VideoCandidate is the internal scored search hit and RecommendedCourse
is the cached/returned shape.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Set
from uuid import UUID
from pydantic import BaseModel, Field

from eligibility.logic.grades import grade_band


# =============================================================================
# ENUMS
# =============================================================================

class Relevance(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Difficulty(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class ProfileQualification(BaseModel):
    type: str
    subject: str
    grade: str = ""


class ProfileRequirement(BaseModel):
    type: str
    subject: str


class StudentLearningProfile(BaseModel):
    """What the enricher knows about a student."""
    student_id: UUID
    program_name: Optional[str] = None
    department_name: Optional[str] = None
    qualifications: List[ProfileQualification] = Field(default_factory=list)
    requirements: List[ProfileRequirement] = Field(default_factory=list)

    def qualification_subjects(self) -> Set[str]:
        return {q.subject.strip().lower() for q in self.qualifications if q.subject.strip()}

    def requirement_subjects(self) -> Set[str]:
        return {r.subject.strip().lower() for r in self.requirements if r.subject.strip()}

    def grade_bands(self) -> Set[str]:
        bands = set()
        for q in self.qualifications:
            if q.type == "LANGUAGE_TEST":
                continue
            band = grade_band(q.grade)
            if band:
                bands.add(band)
        return bands

    def has_language_test(self) -> bool:
        return any(q.type == "LANGUAGE_TEST" for q in self.qualifications)


# =============================================================================
# INTERNAL / OUTPUT CONTRACTS
# =============================================================================

class VideoCandidate(BaseModel):
    """A deduplicated provider hit carrying its internal score."""
    external_id: str
    title: str
    channel_title: str = ""
    description: str = ""
    thumbnail: str = ""
    published_at: Optional[str] = None
    playlist: bool = False
    duration_seconds: int = 0
    view_count: int = 0
    score: int = 0
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    skills: List[str] = Field(default_factory=list)


class RecommendedCourse(BaseModel):
    id: str
    name: str
    provider: str
    description: str = ""
    url: str = ""
    thumbnail: str = ""
    duration: str = ""
    view_count: int = 0
    published_at: Optional[str] = None
    relevance: Relevance = Relevance.MEDIUM
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    skills: List[str] = Field(default_factory=list)
    playlist: bool = False

    class Config:
        use_enum_values = True


class EnrichmentError(BaseModel):
    kind: str  # profile_not_found / configuration / no_results / unexpected
    message: str


class EnrichmentResult(BaseModel):
    """Outcome of one generation run; exactly one of courses/error is meaningful."""
    courses: List[RecommendedCourse] = Field(default_factory=list)
    error: Optional[EnrichmentError] = None
    queries: List[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def ok(self) -> bool:
        return self.error is None
