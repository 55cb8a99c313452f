"""
Enricher pipeline against a mocked YouTube API (httpx.MockTransport).
"""

from datetime import datetime, timedelta

import uuid

import httpx

from conftest import make_user, make_catalog, add_requirement, add_qualification, add_application
from recommendation.logic import CourseRecommendationEnricher, FixedWindowRateLimiter, fallback_courses, get_recommended_courses
from recommendation.logic.youtube_client import YouTubeClient

T0 = datetime(2024, 3, 1, 12, 0)


def _hit(video_id=None, playlist_id=None, title="Lecture"):
    ident = {"videoId": video_id} if video_id else {"playlistId": playlist_id}
    return {
        "id": ident,
        "snippet": {
            "title": title,
            "channelTitle": "Open Courses",
            "description": "",
            "publishedAt": "2023-01-01T00:00:00Z",
            "thumbnails": {"medium": {"url": f"https://img/{video_id or playlist_id}.jpg"}},
        },
    }


class FakeYouTube:
    """Records requests and answers search/videos calls from fixed data."""

    def __init__(self, search_results, status_code=200, error_reason=None):
        self.search_results = search_results
        self.status_code = status_code
        self.error_reason = error_reason
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            body = {"error": {"errors": [{"reason": self.error_reason}]}}
            return httpx.Response(self.status_code, json=body)
        if request.url.path.endswith("/search"):
            query = request.url.params["q"]
            return httpx.Response(200, json={"items": self.search_results.get(query, [])})
        ids = request.url.params["id"].split(",")
        items = [
            {"id": i, "contentDetails": {"duration": "PT1H30M"}, "statistics": {"viewCount": "250000"}}
            for i in ids
        ]
        return httpx.Response(200, json={"items": items})

    @property
    def searches(self):
        return [r for r in self.requests if r.url.path.endswith("/search")]


def _enricher(db, fake, limiter=None, clock=None):
    client = YouTubeClient(api_key="k", http_client=httpx.Client(transport=httpx.MockTransport(fake)))
    return CourseRecommendationEnricher(
        db,
        client=client,
        rate_limiter=limiter or FixedWindowRateLimiter(max_requests=100, clock=lambda: T0),
        clock=clock or (lambda: T0),
    )


def _profiled_student(db):
    student = make_user(db).student
    _, _, prog = make_catalog(db)
    add_requirement(db, prog, "GRADE", "Mathematics", "B")
    add_qualification(db, student, "HIGH_SCHOOL", "Mathematics", "A")
    add_application(db, student, prog)
    return student


def test_results_are_deduplicated_and_ranked(db):
    student = _profiled_student(db)
    fake = FakeYouTube({
        "Computer Science full course": [
            _hit("v1", title="Computer Science full course"),
            _hit("v2", title="Cooking basics"),
        ],
        "introduction to Computing": [_hit("v1"), _hit(playlist_id="PL1", title="Computing playlist")],
        "Mathematics fundamentals": [_hit("v3", title="Mathematics for beginners")],
    })

    courses = _enricher(db, fake).recommend(student.id)

    ids = [c.id for c in courses]
    assert len(ids) == len(set(ids)) == 4
    assert ids[0] == "v1"
    assert all(c.relevance == "High" for c in courses[:3])
    top = courses[0]
    assert top.url == "https://www.youtube.com/watch?v=v1"
    assert top.duration == "1h 30m"
    assert top.view_count == 250000
    assert next(c for c in courses if c.id == "PL1").playlist is True


def test_fresh_cache_skips_provider(db):
    student = _profiled_student(db)
    fake = FakeYouTube({"Computer Science full course": [_hit("v1")]})
    now = [T0]
    enricher = _enricher(db, fake, clock=lambda: now[0])

    first = enricher.recommend(student.id)
    calls = len(fake.requests)
    now[0] = T0 + timedelta(hours=23)
    assert enricher.recommend(student.id) == first
    assert len(fake.requests) == calls

    now[0] = T0 + timedelta(hours=24)
    enricher.recommend(student.id)
    assert len(fake.requests) > calls


def test_force_refresh_bypasses_cache(db):
    student = _profiled_student(db)
    fake = FakeYouTube({"Computer Science full course": [_hit("v1")]})
    enricher = _enricher(db, fake)
    enricher.recommend(student.id)
    calls = len(fake.requests)
    enricher.recommend(student.id, force_refresh=True)
    assert len(fake.requests) > calls


def test_missing_api_key_falls_back(db):
    student = make_user(db).student
    enricher = CourseRecommendationEnricher(db, client_factory=lambda: YouTubeClient(api_key=None))
    result = enricher.generate(student.id)
    assert result.error.kind == "configuration"
    assert enricher.recommend(student.id) == fallback_courses()


def test_unknown_student_falls_back(db):
    fake = FakeYouTube({})
    enricher = _enricher(db, fake)
    assert enricher.generate(uuid.uuid4()).error.kind == "profile_not_found"
    assert enricher.recommend(uuid.uuid4()) == fallback_courses()
    assert fake.requests == []


def test_no_results_falls_back_and_is_not_cached(db):
    student = make_user(db).student
    fake = FakeYouTube({})
    enricher = _enricher(db, fake)
    assert enricher.recommend(student.id) == fallback_courses()
    assert enricher.recommend(student.id) == fallback_courses()
    # default queries were searched both times
    assert len(fake.searches) == 4


def test_exhausted_budget_stops_searching(db):
    student = _profiled_student(db)
    fake = FakeYouTube({
        "Computer Science full course": [_hit("v1")],
        "introduction to Computing": [_hit("v2")],
    })
    limiter = FixedWindowRateLimiter(max_requests=1, clock=lambda: T0)

    courses = _enricher(db, fake, limiter=limiter).recommend(student.id)

    assert [c.id for c in courses] == ["v1"]
    assert len(fake.requests) == 1
    assert limiter.remaining == 0


def test_provider_quota_error_yields_fallback(db):
    student = _profiled_student(db)
    fake = FakeYouTube({}, status_code=403, error_reason="quotaExceeded")
    assert _enricher(db, fake).recommend(student.id) == fallback_courses()


def test_convenience_function_uses_shared_limiter(db):
    student = make_user(db).student
    limiter = FixedWindowRateLimiter(max_requests=5, clock=lambda: T0)
    assert get_recommended_courses(db, student.id, rate_limiter=limiter) == fallback_courses()
    # no key configured: nothing was sent to the provider
    assert limiter.remaining == 5


def test_factory_built_client_is_closed_after_each_run(db):
    student = _profiled_student(db)
    fake = FakeYouTube({"Computer Science full course": [_hit("v1")]})
    created = []

    def factory():
        client = YouTubeClient(api_key="k", http_client=httpx.Client(transport=httpx.MockTransport(fake)))
        created.append(client)
        return client

    enricher = CourseRecommendationEnricher(
        db,
        rate_limiter=FixedWindowRateLimiter(max_requests=100, clock=lambda: T0),
        clock=lambda: T0,
        client_factory=factory,
    )
    assert [c.id for c in enricher.recommend(student.id)] == ["v1"]
    enricher.recommend(student.id, force_refresh=True)

    assert len(created) == 2
    assert all(c.http.is_closed for c in created)


def test_injected_client_is_left_open(db):
    student = _profiled_student(db)
    fake = FakeYouTube({"Computer Science full course": [_hit("v1")]})
    enricher = _enricher(db, fake)
    enricher.recommend(student.id)
    assert enricher.client.http.is_closed is False


def test_default_limiter_is_process_wide(db, monkeypatch):
    from recommendation.logic import enricher as enricher_module

    shared = FixedWindowRateLimiter(max_requests=3, clock=lambda: T0)
    monkeypatch.setattr(enricher_module, "youtube_rate_limiter", shared)
    assert CourseRecommendationEnricher(db).rate_limiter is shared

    student = _profiled_student(db)
    fake = FakeYouTube({"Computer Science full course": [_hit("v1")]})
    monkeypatch.setattr(
        enricher_module, "YouTubeClient",
        lambda: YouTubeClient(api_key="k", http_client=httpx.Client(transport=httpx.MockTransport(fake))),
    )
    get_recommended_courses(db, student.id)
    assert shared.remaining < 3
