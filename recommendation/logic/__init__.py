"""
Recommendation Logic Module

Video course recommendations derived from a student's applications and
qualifications, with a per-student cache and a curated fallback list.
"""

from .contracts import (
    StudentLearningProfile,
    VideoCandidate,
    RecommendedCourse,
    EnrichmentResult,
    EnrichmentError,
    Relevance,
    Difficulty,
)
from .enricher import CourseRecommendationEnricher, get_recommended_courses, fallback_courses
from .rate_limiter import FixedWindowRateLimiter, youtube_rate_limiter
from .youtube_client import YouTubeClient

__all__ = [
    # Main enricher
    "CourseRecommendationEnricher",
    "get_recommended_courses",
    "fallback_courses",

    # Provider
    "YouTubeClient",
    "FixedWindowRateLimiter",
    "youtube_rate_limiter",

    # Contracts
    "StudentLearningProfile",
    "VideoCandidate",
    "RecommendedCourse",
    "EnrichmentResult",
    "EnrichmentError",

    # Enums
    "Relevance",
    "Difficulty",
]
