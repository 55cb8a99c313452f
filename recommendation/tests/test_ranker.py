"""
Ranking and relevance labelling.
"""

from recommendation.logic.contracts import VideoCandidate, Relevance
from recommendation.logic.ranker import rank_candidates, to_courses, categorize


def _c(vid, score, views=0, playlist=False):
    return VideoCandidate(external_id=vid, title=f"Video {vid}", score=score, view_count=views, playlist=playlist)


def test_sorted_by_score_then_views():
    ranked = rank_candidates([_c("a", 10), _c("b", 40, views=5), _c("c", 40, views=900), _c("d", 0)])
    assert [c.external_id for c in ranked] == ["c", "b", "a", "d"]


def test_limit_applies_after_sorting():
    ranked = rank_candidates([_c(str(i), i) for i in range(30)], limit=15)
    assert len(ranked) == 15
    assert ranked[0].score == 29


def test_first_three_always_high():
    courses = to_courses(rank_candidates([_c("a", 0), _c("b", 1), _c("c", 2), _c("d", 3), _c("e", 35), _c("f", 60)]))
    assert [c.relevance for c in courses[:3]] == ["High"] * 3
    assert courses[3].id == "c"
    assert courses[3].relevance == "Low"


def test_categorize_thresholds():
    assert categorize(50) == Relevance.HIGH
    assert categorize(49) == Relevance.MEDIUM
    assert categorize(21) == Relevance.MEDIUM
    assert categorize(20) == Relevance.LOW


def test_playlist_urls_and_duration():
    video, playlist = to_courses([_c("vid1", 10), _c("PL1", 5, playlist=True)])
    assert video.url == "https://www.youtube.com/watch?v=vid1"
    assert playlist.url == "https://www.youtube.com/playlist?list=PL1"
    assert playlist.duration == "Playlist"
    assert not hasattr(video, "score")
