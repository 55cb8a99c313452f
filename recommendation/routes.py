"""
Recommendation API Routes

Video course recommendations for the signed-in student.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from admissions.logic.policy import Policy
from utils.deps import current_policy, http_errors
from .logic.contracts import RecommendedCourse
from .logic.enricher import CourseRecommendationEnricher
from .logic.rate_limiter import youtube_rate_limiter


router = APIRouter(prefix="/recommendations", tags=["recommendations"])


def get_enricher(db: Session) -> CourseRecommendationEnricher:
    return CourseRecommendationEnricher(db, rate_limiter=youtube_rate_limiter)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/courses", response_model=List[RecommendedCourse], summary="Recommended video courses")
def recommended_courses(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    """
    Cached for 24h per student. When the provider is unavailable the curated
    fallback list is returned instead of an error.
    """
    db: Session
    with db_session as db, http_errors():
        return get_enricher(db).recommend(policy.require_student())


@router.post("/courses/refresh", response_model=List[RecommendedCourse], summary="Regenerate recommendations")
def refresh_courses(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return get_enricher(db).recommend(policy.require_student(), force_refresh=True)


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/health", summary="Recommendation service health check")
def health_check():
    """Provider quota left in the current window."""
    return {
        "status": "ok",
        "engine": "recommendation",
        "quota_remaining": youtube_rate_limiter.remaining,
        "quota_resets_at": youtube_rate_limiter.resets_at.isoformat(),
    }
