from datetime import datetime
from enum import Enum
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class EnrichmentKind(str, Enum):
    """The four enrichment capabilities, one message channel each."""
    CONCEPTS = "concepts"
    LANGUAGE = "language"
    SENTIMENT = "sentiment"
    STATISTICS = "statistics"


class SentimentAggregate(BaseModel):
    """
    Aggregate sentiment over the whole article.
    """
    sentiment: str = Field(..., min_length=1, description="Overall sentiment label")
    score: float = Field(default=0.0, ge=-1.0, le=1.0, description="Compound sentiment score")

    @field_validator('sentiment')
    def validate_sentiment_label(cls, v):
        # Normalize to lowercase
        v = v.lower()
        if v not in ['positive', 'negative', 'neutral']:
            raise ValueError('Sentiment label must be positive, negative, or neutral')
        return v


class TextStatistics(BaseModel):
    """
    Structured text metrics stored on the article.
    """
    sentences: int = Field(..., ge=0, description="Number of sentences")
    words: int = Field(default=0, ge=0, description="Number of words")
    characters: int = Field(default=0, ge=0, description="Number of characters")
    average_word_length: float = Field(default=0.0, ge=0.0, description="Mean characters per word")
    average_sentence_length: float = Field(default=0.0, ge=0.0, description="Mean words per sentence")


class Article(BaseModel):
    """
    Schema for the per-url article record.
    """
    url: str = Field(..., description="Canonical article URL, the record key")
    news_source: str = Field(..., alias="newsSource", description="Hostname the article was published on")
    concepts: Optional[List[str]] = Field(None, description="Concepts extracted from the article")
    lang: Optional[str] = Field(None, description="Detected language code")
    sentiment: Optional[SentimentAggregate] = Field(None, description="Aggregate sentiment")
    statistics: Optional[TextStatistics] = Field(None, description="Text statistics")

    class Config:
        populate_by_name = True

    def to_record(self) -> Dict[str, Any]:
        """Serialize with wire names, leaving unset enrichment fields out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NewsSource(BaseModel):
    """
    Schema for the per-hostname news source record.
    """
    url: str = Field(..., min_length=1, description="Hostname of the news source")


class EnrichmentRequest(BaseModel):
    """
    Message published once per enrichment channel. Carries only the url.
    """
    url: str = Field(..., min_length=1, description="URL of the article to enrich")


class ConceptsResult(BaseModel):
    kind: Literal["concepts"] = "concepts"
    concepts: List[Annotated[str, Field(min_length=1)]] = Field(..., min_length=1)

    article_field: ClassVar[str] = "concepts"

    def field_value(self) -> Any:
        return list(self.concepts)


class LanguageResult(BaseModel):
    kind: Literal["language"] = "language"
    language: str = Field(..., min_length=1, description="Language code, e.g. 'en'")

    article_field: ClassVar[str] = "lang"

    def field_value(self) -> Any:
        return self.language


class SentimentResult(BaseModel):
    kind: Literal["sentiment"] = "sentiment"
    aggregate: SentimentAggregate

    article_field: ClassVar[str] = "sentiment"

    def field_value(self) -> Any:
        return self.aggregate.model_dump(mode="json")


class StatisticsResult(TextStatistics):
    kind: Literal["statistics"] = "statistics"

    article_field: ClassVar[str] = "statistics"

    def field_value(self) -> Any:
        return self.model_dump(mode="json", exclude={"kind"})


EnrichmentResult = Annotated[
    Union[ConceptsResult, LanguageResult, SentimentResult, StatisticsResult],
    Field(discriminator="kind"),
]

_enrichment_result_adapter = TypeAdapter(EnrichmentResult)


def parse_enrichment_result(kind: EnrichmentKind, raw: Dict[str, Any]):
    """Validate a raw analysis response into the tagged result for ``kind``."""
    return _enrichment_result_adapter.validate_python({**raw, "kind": kind.value})


class SubmissionOutcome(BaseModel):
    """
    What a successful article submission did.
    """
    url: str
    article_created: bool
    source_created: bool
    published_channels: List[str] = Field(default_factory=list)


class NewsSourcePage(BaseModel):
    """
    One page of a cursor-based news source listing. ``next_cursor`` is 0 once exhausted.
    """
    items: List[NewsSource] = Field(default_factory=list)
    next_cursor: int = 0


class OperationResult(BaseModel):
    """
    Schema for the outcome of every operation: success or error, never partial.
    """
    status: Literal["success", "error"] = Field(..., description="Whether the operation succeeded")
    operation: str = Field(..., description="Name of the operation that produced this result")
    data: Optional[Any] = Field(None, description="Operation payload on success")
    error: Optional[str] = Field(None, description="Error message if the operation failed")
    error_type: Optional[str] = Field(None, description="Error class name if the operation failed")
    processing_time_seconds: Optional[float] = Field(None, ge=0.0, description="Time taken to process")
    created_at: datetime = Field(default_factory=datetime.now, description="Completion timestamp")

    class Config:
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }

    @property
    def ok(self) -> bool:
        return self.status == "success"


class ArticleRequest(BaseModel):
    """Article request body. The url may also be given as a query parameter."""
    url: Optional[str] = None
