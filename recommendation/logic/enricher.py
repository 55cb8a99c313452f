"""
Course Recommendation Enricher

Main orchestrator for video course recommendations.

Pipeline flow:
1. Cache lookup - serve a fresh cache row if one exists
2. Profile loading - program, department, qualifications, requirements
3. Query generation - bounded, deduplicated search queries
4. Search - one provider call per query, gated by the rate limiter
5. Dedup + details - merge hits by id, one batched details call
6. Scoring and ranking - relevance score, top N, relevance labels
7. Cache write - upsert with a fixed TTL

Any failure in 2-6 resolves to the curated fallback list.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from utils.errors import NotFoundError
from .adapter import load_learning_profile
from .cache import get_cached_courses, store_courses
from .constants import FALLBACK_COURSES
from .contracts import (
    StudentLearningProfile,
    VideoCandidate,
    RecommendedCourse,
    EnrichmentResult,
    EnrichmentError,
)
from .query_builder import build_search_queries, results_per_query
from .rate_limiter import FixedWindowRateLimiter, youtube_rate_limiter
from .ranker import rank_candidates, to_courses
from .scorer import parse_iso_duration, infer_difficulty, score_candidate
from .youtube_client import YouTubeClient, YouTubeConfigError, YouTubeAPIError, QuotaExceededError

logger = logging.getLogger("recommendation")


def fallback_courses() -> List[RecommendedCourse]:
    return [RecommendedCourse(**c) for c in FALLBACK_COURSES]


def _candidate_from_item(item: Dict) -> Optional[VideoCandidate]:
    ident = item.get("id") or {}
    if isinstance(ident, str):
        external_id, playlist = ident, False
    elif ident.get("videoId"):
        external_id, playlist = ident["videoId"], False
    elif ident.get("playlistId"):
        external_id, playlist = ident["playlistId"], True
    else:
        return None

    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumb = thumbnails.get("high") or thumbnails.get("medium") or thumbnails.get("default") or {}
    title = snippet.get("title", "")
    description = snippet.get("description", "")
    return VideoCandidate(
        external_id=external_id,
        title=title,
        channel_title=snippet.get("channelTitle", ""),
        description=description,
        thumbnail=thumb.get("url", ""),
        published_at=snippet.get("publishedAt"),
        playlist=playlist,
        difficulty=infer_difficulty(title, description),
    )


class CourseRecommendationEnricher:
    """
    Best-effort course recommendations for a student.

    Defaults to the process-wide rate limiter so the daily quota is shared
    across requests. A client built through `client_factory` is owned by the
    enricher and closed after each generation run; an injected client is not.
    """

    def __init__(
        self,
        db: Session,
        client: Optional[YouTubeClient] = None,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        clock: Optional[Callable[[], datetime]] = None,
        client_factory: Optional[Callable[[], YouTubeClient]] = None,
    ):
        self.db = db
        self._client = client
        self._client_factory = client_factory or YouTubeClient
        self._owns_client = False
        self.rate_limiter = rate_limiter or youtube_rate_limiter
        self.clock = clock or datetime.utcnow

    @property
    def client(self) -> YouTubeClient:
        if self._client is None:
            self._client = self._client_factory()
            self._owns_client = True
        return self._client

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def recommend(self, student_id: UUID, force_refresh: bool = False) -> List[RecommendedCourse]:
        """
        Cached recommendations when fresh, otherwise a new generation run.
        Never raises; failures yield the fallback list, which is not cached.
        """
        now = self.clock()
        if not force_refresh:
            cached = get_cached_courses(self.db, student_id, now)
            if cached is not None:
                logger.info(f"Serving cached recommendations for student {student_id}")
                return cached

        result = self.generate(student_id)
        if not result.ok:
            logger.warning(
                f"Recommendation fallback for student {student_id} "
                f"({result.error.kind}): {result.error.message}"
            )
            return fallback_courses()

        try:
            store_courses(self.db, student_id, result.courses, now)
        except SQLAlchemyError as e:
            logger.error(f"Failed to cache recommendations for student {student_id}: {e}")
            self.db.rollback()
        return result.courses

    # ------------------------------------------------------------------
    # Generation pipeline
    # ------------------------------------------------------------------

    def generate(self, student_id: UUID) -> EnrichmentResult:
        """Run the uncached pipeline and report success or the failure kind."""
        try:
            profile = load_learning_profile(self.db, student_id)
            client = self.client
            queries = build_search_queries(profile)
            candidates = self._search(client, queries)
            if not candidates:
                return EnrichmentResult(
                    queries=queries,
                    error=EnrichmentError(kind="no_results", message="No search results for any query"),
                )
            self._attach_details(client, candidates)
            courses = self._rank(candidates, profile)
            logger.info(
                f"Generated {len(courses)} recommendations for student {student_id} "
                f"from {len(queries)} queries"
            )
            return EnrichmentResult(courses=courses, queries=queries)
        except NotFoundError as e:
            return EnrichmentResult(error=EnrichmentError(kind="profile_not_found", message=str(e)))
        except YouTubeConfigError as e:
            return EnrichmentResult(error=EnrichmentError(kind="configuration", message=str(e)))
        except Exception as e:
            logger.exception(f"Recommendation generation failed for student {student_id}")
            return EnrichmentResult(error=EnrichmentError(kind="unexpected", message=str(e)))
        finally:
            self.close()

    def close(self) -> None:
        """Release the HTTP pool of a client this enricher created."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
            self._owns_client = False

    def _search(self, client: YouTubeClient, queries: List[str]) -> List[VideoCandidate]:
        """Sequential searches; a failed or throttled query contributes nothing."""
        per_query = results_per_query(len(queries))
        by_id: Dict[str, VideoCandidate] = {}
        for query in queries:
            if not self.rate_limiter.try_acquire():
                logger.warning(f"YouTube daily quota exhausted; skipping query '{query}'")
                continue
            try:
                items = client.search(query, max_results=per_query)
            except QuotaExceededError as e:
                logger.warning(f"YouTube quota exceeded for query '{query}': {e}")
                continue
            except YouTubeAPIError as e:
                logger.error(f"YouTube search failed for query '{query}': {e}")
                continue
            for item in items:
                candidate = _candidate_from_item(item)
                if candidate and candidate.external_id not in by_id:
                    by_id[candidate.external_id] = candidate
        return list(by_id.values())

    def _attach_details(self, client: YouTubeClient, candidates: List[VideoCandidate]) -> None:
        video_ids = [c.external_id for c in candidates if not c.playlist]
        if not video_ids:
            return
        if not self.rate_limiter.try_acquire():
            logger.warning("YouTube daily quota exhausted; skipping video details")
            return
        try:
            details = client.video_details(video_ids)
        except YouTubeAPIError as e:
            logger.error(f"YouTube details lookup failed: {e}")
            return
        for c in candidates:
            d = details.get(c.external_id)
            if d:
                c.duration_seconds = parse_iso_duration(d.get("duration", ""))
                c.view_count = d.get("view_count", 0)

    def _rank(self, candidates: List[VideoCandidate], profile: StudentLearningProfile) -> List[RecommendedCourse]:
        for c in candidates:
            c.score, c.skills = score_candidate(c, profile)
        return to_courses(rank_candidates(candidates))


# Convenience function for simple usage
def get_recommended_courses(
    db: Session,
    student_id: UUID,
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
) -> List[RecommendedCourse]:
    enricher = CourseRecommendationEnricher(db, rate_limiter=rate_limiter)
    return enricher.recommend(student_id)
