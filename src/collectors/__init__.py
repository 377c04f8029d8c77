"""Collector for challenge submissions published on a Forem instance."""

from src.collectors.classifier import (
    ClassifiedArticles,
    classify_submissions,
    validate_tag_name,
)
from src.collectors.errors import (
    CollectorError,
    CollectorErrorClass,
    ErrorRecord,
    ParseError,
    TagValidationError,
    UpstreamError,
)
from src.collectors.forem import ForemArticleClient
from src.collectors.metrics import CollectorMetrics
from src.collectors.models import Article, Organization, TagDataset, User


__all__ = [
    "Article",
    "ClassifiedArticles",
    "CollectorError",
    "CollectorErrorClass",
    "CollectorMetrics",
    "ErrorRecord",
    "ForemArticleClient",
    "Organization",
    "ParseError",
    "TagDataset",
    "TagValidationError",
    "UpstreamError",
    "User",
    "classify_submissions",
    "validate_tag_name",
]
