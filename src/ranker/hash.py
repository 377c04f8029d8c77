"""Content hashing for relevance cache invalidation.

The hash is a 32-bit rolling string hash (``h = h * 31 + unit`` with
signed wraparound) over UTF-16 code units, so values match those produced by
the browser front-end for the same data.
"""

from src.collectors.models import Article


_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def _utf16_code_units(text: str) -> list[int]:
    encoded = text.encode("utf-16-le")
    return [
        int.from_bytes(encoded[i : i + 2], "little") for i in range(0, len(encoded), 2)
    ]


def rolling_hash(text: str) -> int:
    """Compute the signed 32-bit rolling hash of a string.

    Args:
        text: Input string.

    Returns:
        Signed 32-bit integer.
    """
    value = 0
    for unit in _utf16_code_units(text):
        value = _to_int32((value << 5) - value + unit)
    return value


def article_fingerprint(article: Article) -> str:
    """Scoring-relevant fields of one article, joined by dashes."""
    return (
        f"{article.id}-{article.positive_reactions_count}-{article.comments_count}"
        f"-{article.edited_at or ''}-{article.published_at}"
    )


def compute_data_hash(articles: list[Article]) -> str:
    """Compute the content hash of an article set.

    Order-sensitive: reordering, adding or removing articles changes the
    hash, as does any change to id, reactions, comments, edit or publish
    timestamp.

    Args:
        articles: Articles in the order they will be scored.

    Returns:
        Signed decimal string of the hash.

    Examples:
        >>> compute_data_hash([])
        '0'
    """
    data = "|".join(article_fingerprint(article) for article in articles)
    return str(rolling_hash(data))
