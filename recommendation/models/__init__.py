# Recommendation ORM models
from .base import Base
from .recommendation_cache import RecommendationCache

__all__ = [
    "Base",
    "RecommendationCache",
]
