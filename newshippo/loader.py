import logging
import re
from typing import List, Optional

import requests
from langchain_community.document_loaders import WebBaseLoader
from langchain_core.documents import Document

from .config import settings
from .errors import AnalysisError, ValidationError
from .urls import parse_article_url

logger = logging.getLogger(__name__)

# Common navigation and UI patterns to remove
UI_PATTERNS = [
    r'Sign in.*?account',
    r'Subscribe.*?newsletters?',
    r'Ad Feedback',
    r'How relevant is this ad to you\?',
    r'Facebook.*?Tweet.*?Email.*?Link.*?Link Copied!',
    r'See all topics',
    r'Terms of Use.*?Privacy Policy.*?Ad Choices',
    r'© \d{4}.*?All Rights Reserved',
    r'Close icon',
    r'\d+ min read',
]


def clean_text(text: str) -> str:
    """
    Clean up text extracted from web pages by removing excessive whitespace,
    normalizing newlines and removing navigation/UI elements.

    Args:
        text: Raw text from web page

    Returns:
        Cleaned text with normalized whitespace and filtered content
    """
    if not text:
        return ""

    for pattern in UI_PATTERNS:
        text = re.sub(pattern, '', text, flags=re.IGNORECASE | re.DOTALL)

    text = text.replace('\t', ' ')
    text = re.sub(r' {2,}', ' ', text)

    # Drop lines that are single words or very short (likely navigation)
    lines = []
    for line in text.split('\n'):
        line = line.strip()
        if line and (len(line.split()) > 2 or len(line) > 20):
            lines.append(line)

    return '\n'.join(lines).strip()


def validate_url(url: str) -> bool:
    """
    Validates if the given URL is properly formatted.

    Args:
        url: The URL to validate

    Returns:
        True if URL appears valid, False otherwise
    """
    try:
        parse_article_url(url)
        return True
    except ValidationError:
        return False


def load_document_from_url(url: str, timeout_seconds: Optional[float] = None) -> str:
    """
    Uses LangChain's WebBaseLoader to fetch and parse the main content
    of a web page.

    Args:
        url: The URL to load and parse
        timeout_seconds: HTTP timeout, defaults to ANALYSIS_TIMEOUT_SECONDS

    Returns:
        The cleaned page text

    Raises:
        AnalysisError: If the page cannot be fetched in time or has no usable text
    """
    if not validate_url(url):
        raise AnalysisError(f"Invalid URL format: {url}")

    timeout = timeout_seconds or settings.analysis_timeout_seconds
    logger.info(f"Loading document from URL: {url}")
    try:
        loader = WebBaseLoader(
            web_path=url,
            header_template={
                "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
            },
            requests_kwargs={"timeout": timeout},
            raise_for_status=True,
        )
        docs: List[Document] = loader.load()
    except requests.RequestException as e:
        logger.error(f"Failed to load document from {url}. Error: {e}")
        raise AnalysisError(f"Failed to load {url}: {e}") from e

    if not docs or not docs[0].page_content.strip():
        raise AnalysisError(f"No content found for URL: {url}")

    full_text = clean_text(docs[0].page_content)
    if not full_text:
        raise AnalysisError(f"Content empty after cleaning for URL: {url}")

    logger.info(f"Successfully loaded {len(full_text)} characters from {url}")
    return full_text
