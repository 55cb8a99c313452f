"""
Ranker

Orders scored candidates, labels relevance and maps them to RecommendedCourse.
"""

from typing import List

from .constants import (
    HIGH_RELEVANCE_MIN_SCORE,
    LOW_RELEVANCE_MAX_SCORE,
    MAX_RECOMMENDATIONS,
    FORCED_HIGH_COUNT,
)
from .contracts import VideoCandidate, RecommendedCourse, Relevance
from .scorer import format_duration


def rank_candidates(candidates: List[VideoCandidate], limit: int = MAX_RECOMMENDATIONS) -> List[VideoCandidate]:
    """Score descending, view count breaks ties."""
    ordered = sorted(candidates, key=lambda c: (c.score, c.view_count), reverse=True)
    return ordered[:limit]


def categorize(score: int) -> Relevance:
    if score >= HIGH_RELEVANCE_MIN_SCORE:
        return Relevance.HIGH
    if score <= LOW_RELEVANCE_MAX_SCORE:
        return Relevance.LOW
    return Relevance.MEDIUM


def course_url(candidate: VideoCandidate) -> str:
    if candidate.playlist:
        return f"https://www.youtube.com/playlist?list={candidate.external_id}"
    return f"https://www.youtube.com/watch?v={candidate.external_id}"


def to_courses(ranked: List[VideoCandidate]) -> List[RecommendedCourse]:
    """Label ranked candidates; the first FORCED_HIGH_COUNT are always High. Scores are dropped."""
    courses = []
    for position, c in enumerate(ranked):
        relevance = Relevance.HIGH if position < FORCED_HIGH_COUNT else categorize(c.score)
        courses.append(RecommendedCourse(
            id=c.external_id,
            name=c.title,
            provider=c.channel_title,
            description=c.description,
            url=course_url(c),
            thumbnail=c.thumbnail,
            duration="Playlist" if c.playlist else format_duration(c.duration_seconds),
            view_count=c.view_count,
            published_at=c.published_at,
            relevance=relevance,
            difficulty=c.difficulty,
            skills=c.skills,
            playlist=c.playlist,
        ))
    return courses
