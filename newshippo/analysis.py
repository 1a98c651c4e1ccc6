"""Text analysis capabilities run locally over the fetched article text."""
import logging
import re
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Protocol

import yake
from langdetect import DetectorFactory, LangDetectException, detect
from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from .config import settings
from .errors import AnalysisError
from .loader import load_document_from_url

logger = logging.getLogger(__name__)

DetectorFactory.seed = 0  # Deterministic language detection

SENTENCE_BOUNDARY = re.compile(r'(?<=[.!?])\s+')
WORD = re.compile(r"\b\w[\w'-]*\b")


class TextAnalysisClient(Protocol):
    """Four capability calls, each taking an article url and returning a raw mapping."""

    def extract_concepts(self, url: str) -> Dict[str, Any]: ...

    def identify_language(self, url: str) -> Dict[str, Any]: ...

    def analyze_sentiment(self, url: str) -> Dict[str, Any]: ...

    def get_text_statistics(self, url: str) -> Dict[str, Any]: ...


@lru_cache(maxsize=1)
def get_nlp_tools(max_concepts: int):
    """Initialize and cache NLP tools."""
    logger.info("🔧 Loading NLP tools...")
    sentiment_analyzer = SentimentIntensityAnalyzer()
    keyword_extractor = yake.KeywordExtractor(n=2, dedupLim=0.2, top=max_concepts, features=None)
    return sentiment_analyzer, keyword_extractor


class LocalTextAnalysisClient:
    """
    Fetches the article page and analyses its text in-process.

    YAKE extracts concepts, langdetect identifies the language, VADER scores
    sentiment and statistics are plain counts.
    """

    def __init__(self, load_text: Optional[Callable[[str], str]] = None, max_concepts: Optional[int] = None):
        self.load_text = load_text or load_document_from_url
        self.max_concepts = max_concepts or settings.max_concepts

    def extract_concepts(self, url: str) -> Dict[str, Any]:
        full_text = self.load_text(url)
        _, keyword_extractor = get_nlp_tools(self.max_concepts)
        keywords_tuples = keyword_extractor.extract_keywords(full_text)
        concepts = [kw for kw, score in keywords_tuples if len(kw) > 2]
        logger.info(f"Extracted {len(concepts)} concepts from {url}")
        return {"concepts": concepts}

    def identify_language(self, url: str) -> Dict[str, Any]:
        full_text = self.load_text(url)
        try:
            language = detect(full_text[:5000])
        except LangDetectException as e:
            raise AnalysisError(f"Language detection failed for {url}: {e}") from e
        return {"language": language}

    def analyze_sentiment(self, url: str) -> Dict[str, Any]:
        full_text = self.load_text(url)
        sentiment_analyzer, _ = get_nlp_tools(self.max_concepts)
        scores = sentiment_analyzer.polarity_scores(full_text[:5000])
        compound = scores.get("compound", 0.0)
        sentiment = "neutral"
        if compound >= 0.05:
            sentiment = "positive"
        elif compound <= -0.05:
            sentiment = "negative"
        return {
            "aggregate": {"sentiment": sentiment, "score": round(compound, 4)},
            "positive": scores.get("pos", 0.0),
            "negative": scores.get("neg", 0.0),
            "neutral": scores.get("neu", 0.0),
        }

    def get_text_statistics(self, url: str) -> Dict[str, Any]:
        full_text = self.load_text(url)
        return text_statistics(full_text)


def text_statistics(full_text: str) -> Dict[str, Any]:
    """Count sentences, words and characters of a text."""
    sentences = [s for s in SENTENCE_BOUNDARY.split(full_text.strip()) if s.strip()]
    words = WORD.findall(full_text)
    word_chars = sum(len(w) for w in words)
    return {
        "sentences": len(sentences),
        "words": len(words),
        "characters": len(full_text),
        "average_word_length": round(word_chars / len(words), 2) if words else 0.0,
        "average_sentence_length": round(len(words) / len(sentences), 2) if sentences else 0.0,
    }
