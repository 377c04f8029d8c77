"""Constants for the relevance ranker."""

# Score weights; a perfect article scores REACTION + COMMENT + RECENCY = 100
REACTION_WEIGHT: float = 50.0
COMMENT_WEIGHT: float = 30.0
RECENCY_WEIGHT: float = 20.0

# Cached scores older than this are ignored and swept
CACHE_EXPIRY_HOURS: int = 24

# Key prefix for cache entries in the backing key-value store
CACHE_KEY_PREFIX: str = "relevance_cache_"

# Sort options offered by the list view
SORT_LATEST = "latest"
SORT_POPULAR = "popular"
SORT_COMMENTS = "comments"
SORT_RELEVANT = "relevant"
SORT_OPTIONS: tuple[str, ...] = (SORT_LATEST, SORT_POPULAR, SORT_COMMENTS, SORT_RELEVANT)

COMPONENT_RANKER = "ranker"
