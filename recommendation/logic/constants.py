"""
Course Recommendation Constants

Query limits, provider settings, relevance weights and the curated fallback list.
"""

import os
from datetime import timedelta
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PROVIDER SETTINGS
# =============================================================================

YOUTUBE_API_KEY = os.getenv("YOUTUBE_API_KEY")
YOUTUBE_API_URL = os.getenv("YOUTUBE_API_URL", "https://www.googleapis.com/youtube/v3")
YOUTUBE_TIMEOUT_SECONDS = float(os.getenv("YOUTUBE_TIMEOUT_SECONDS", "10"))

# Shared daily request budget for search + details calls
MAX_REQUESTS_PER_DAY = int(os.getenv("YOUTUBE_MAX_REQUESTS_PER_DAY", "100"))
QUOTA_WINDOW = timedelta(days=1)

# =============================================================================
# QUERY GENERATION
# =============================================================================

MAX_QUERIES = 10
RESULTS_PER_QUERY = 5
# Fewer results per query once the query list grows past this size
RESULTS_PER_QUERY_MANY = 3
MANY_QUERIES_THRESHOLD = 5

# Used when a student has neither applications nor qualifications yet
DEFAULT_QUERIES: List[str] = [
    "university study skills",
    "university admissions preparation",
]

# Qualification type -> query template
QUALIFICATION_QUERY_TEMPLATES: Dict[str, str] = {
    "HIGH_SCHOOL": "{subject} fundamentals",
    "UNDERGRADUATE": "advanced {subject}",
    "LANGUAGE_TEST": "{subject} exam preparation",
    "OTHER": "{subject} tutorial",
}

REQUIREMENT_QUERY_TEMPLATES: Dict[str, str] = {
    "LANGUAGE": "{subject} test preparation",
}
DEFAULT_REQUIREMENT_QUERY_TEMPLATE = "{subject} tutorial"

PROGRAM_QUERY_TEMPLATE = "{name} full course"
DEPARTMENT_QUERY_TEMPLATE = "introduction to {name}"

# =============================================================================
# RELEVANCE SCORING
# =============================================================================

SCORE_PROGRAM_IN_TITLE = 30
SCORE_DEPARTMENT_IN_TITLE = 20
SCORE_PER_QUALIFICATION_SUBJECT = 15
SCORE_PER_REQUIREMENT_SUBJECT = 10
SCORE_POPULAR = 5
SCORE_LONG_FORM = 8
SCORE_PLAYLIST = 12
SCORE_LEVEL_ALIGNMENT = 10

POPULAR_VIEW_COUNT = 100_000
LONG_FORM_SECONDS = 3600

HIGH_RELEVANCE_MIN_SCORE = 50
LOW_RELEVANCE_MAX_SCORE = 20
MAX_RECOMMENDATIONS = 15
FORCED_HIGH_COUNT = 3

BEGINNER_KEYWORDS = (
    "beginner", "beginners", "introduction", "intro to", "basics",
    "fundamentals", "101", "crash course", "for dummies",
)
ADVANCED_KEYWORDS = (
    "advanced", "expert", "masterclass", "in-depth", "deep dive", "graduate level",
)

# =============================================================================
# CACHE
# =============================================================================

CACHE_TTL = timedelta(hours=int(os.getenv("RECOMMENDATION_CACHE_HOURS", "24")))

# =============================================================================
# FALLBACK
# =============================================================================

FALLBACK_COURSES: List[Dict] = [
    {
        "id": "1",
        "name": "Advanced Mathematics",
        "provider": "Coursera",
        "description": "Core mathematics for university entry.",
        "url": "https://www.coursera.org/search?query=advanced%20mathematics",
        "relevance": "High",
        "difficulty": "Advanced",
    },
    {
        "id": "2",
        "name": "Python Programming",
        "provider": "edX",
        "description": "Introductory programming with Python.",
        "url": "https://www.edx.org/search?q=python%20programming",
        "relevance": "Medium",
        "difficulty": "Beginner",
    },
]
