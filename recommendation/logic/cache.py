"""
Recommendation Cache

One row per student holding the serialized course list and its expiry.
A row written at T serves reads strictly before T + CACHE_TTL.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.orm import Session

from recommendation.models import RecommendationCache
from .constants import CACHE_TTL
from .contracts import RecommendedCourse

logger = logging.getLogger("recommendation")


def is_fresh(entry: RecommendationCache, now: datetime) -> bool:
    return now < entry.expires_at


def get_cached_courses(db: Session, student_id: UUID, now: datetime) -> Optional[List[RecommendedCourse]]:
    entry = db.execute(
        select(RecommendationCache).where(RecommendationCache.student_id == student_id)
    ).scalar_one_or_none()
    if not entry or not is_fresh(entry, now):
        return None
    try:
        return [RecommendedCourse.model_validate(c) for c in entry.courses]
    except Exception as e:
        logger.warning(f"Discarding unreadable recommendation cache for {student_id}: {e}")
        return None


def store_courses(
    db: Session,
    student_id: UUID,
    courses: List[RecommendedCourse],
    now: datetime,
    ttl: timedelta = CACHE_TTL,
) -> RecommendationCache:
    """Upsert the student's cache row."""
    payload = [c.model_dump(mode="json") for c in courses]
    entry = db.execute(
        select(RecommendationCache).where(RecommendationCache.student_id == student_id)
    ).scalar_one_or_none()
    if entry:
        entry.courses = payload
        entry.expires_at = now + ttl
        entry.updated_at = now
    else:
        entry = RecommendationCache(
            student_id=student_id,
            courses=payload,
            expires_at=now + ttl,
            created_at=now,
            updated_at=now,
        )
        db.add(entry)
    db.flush()
    return entry


def invalidate(db: Session, student_id: UUID) -> None:
    entry = db.execute(
        select(RecommendationCache).where(RecommendationCache.student_id == student_id)
    ).scalar_one_or_none()
    if entry:
        db.delete(entry)
        db.flush()
