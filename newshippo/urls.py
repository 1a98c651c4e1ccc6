"""Article URL parsing shared by ingestion, queries and workers."""
from typing import NamedTuple, Optional
from urllib.parse import urlparse

from .errors import ValidationError


class ParsedUrl(NamedTuple):
    url: str
    hostname: str


def parse_article_url(raw: Optional[str]) -> ParsedUrl:
    """
    Parse and normalize an article URL.

    Args:
        raw: The URL as received from a request or message

    Returns:
        The normalized URL (used as the article key) and its hostname

    Raises:
        ValidationError: If the URL is missing or lacks a scheme or hostname
    """
    if raw is None or not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Missing parameters: url")
    try:
        parsed = urlparse(raw.strip())
        hostname = parsed.hostname
    except ValueError as e:
        raise ValidationError(f"Bad input: cannot parse url {raw!r}: {e}") from e
    if not parsed.scheme or not hostname:
        raise ValidationError(f"Bad input: url {raw!r} has no scheme or hostname")
    return ParsedUrl(url=parsed.geturl(), hostname=hostname)
