"""
YouTube Data API client

Thin httpx wrapper for the two calls the enricher needs:
- search: query -> snippet hits (videos and playlists)
- videos: id list -> duration + view count
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .constants import YOUTUBE_API_KEY, YOUTUBE_API_URL, YOUTUBE_TIMEOUT_SECONDS

logger = logging.getLogger("youtube")

# videos.list accepts at most 50 ids
MAX_IDS_PER_DETAILS_CALL = 50


class YouTubeConfigError(RuntimeError):
    pass


class YouTubeAPIError(RuntimeError):
    pass


class QuotaExceededError(YouTubeAPIError):
    pass


class YouTubeClient:
    def __init__(
        self,
        api_key: Optional[str] = YOUTUBE_API_KEY,
        base_url: str = YOUTUBE_API_URL,
        http_client: Optional[httpx.Client] = None,
    ):
        if not api_key:
            raise YouTubeConfigError("YOUTUBE_API_KEY not configured")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.http = http_client or httpx.Client(timeout=YOUTUBE_TIMEOUT_SECONDS)

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug("YouTube %s request: %s", path, params)
        params = {**params, "key": self.api_key}
        try:
            resp = self.http.get(f"{self.base_url}/{path}", params=params)
        except httpx.HTTPError as e:
            raise YouTubeAPIError(f"YouTube request failed: {e}") from e

        if resp.status_code == 403 and _error_reason(resp) in ("quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded"):
            raise QuotaExceededError("YouTube API quota exceeded")
        if resp.status_code != 200:
            raise YouTubeAPIError(f"YouTube API error: {resp.status_code} - {resp.text[:200]}")
        return resp.json()

    def search(self, query: str, max_results: int = 5) -> List[Dict[str, Any]]:
        data = self._get("search", {
            "part": "snippet",
            "q": query,
            "type": "video,playlist",
            "maxResults": max_results,
            "order": "relevance",
        })
        return data.get("items", [])

    def video_details(self, video_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Map of video id -> {"duration": ISO-8601 str, "view_count": int}."""
        if not video_ids:
            return {}
        data = self._get("videos", {
            "part": "contentDetails,statistics",
            "id": ",".join(video_ids[:MAX_IDS_PER_DETAILS_CALL]),
        })
        details = {}
        for item in data.get("items", []):
            stats = item.get("statistics") or {}
            try:
                views = int(stats.get("viewCount", 0))
            except (TypeError, ValueError):
                views = 0
            details[item.get("id")] = {
                "duration": (item.get("contentDetails") or {}).get("duration", ""),
                "view_count": views,
            }
        return details

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "YouTubeClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _error_reason(resp: httpx.Response) -> Optional[str]:
    try:
        errors = resp.json().get("error", {}).get("errors", [])
    except ValueError:
        return None
    return errors[0].get("reason") if errors else None
