from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------
# Page signals
# ------------------------------------------------------------
class HeadingMap(CamelModel):
    h1: List[str] = []
    h2: List[str] = []
    h3: List[str] = []


class ImageStats(CamelModel):
    total: int = 0
    without_alt: int = 0
    # 0 when the page has no images
    alt_optimization_rate: int = 0


class LinkStats(CamelModel):
    internal: int = 0
    external: int = 0
    # mailto:, tel:, #fragment ... count here but in neither bucket
    total: int = 0


class ContentStats(CamelModel):
    word_count: int = 0
    has_structured_data: bool = False
    has_open_graph: bool = False
    has_twitter_card: bool = False


class ResourceStats(CamelModel):
    scripts: int = 0
    stylesheets: int = 0


class PageSignals(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str
    domain: str = ""
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = []
    headings: HeadingMap = HeadingMap()
    images: ImageStats = ImageStats()
    links: LinkStats = LinkStats()
    content: ContentStats = ContentStats()
    resources: ResourceStats = ResourceStats()
    analyzed_at: str = Field(default_factory=utc_now_iso)


class SiteAnalysis(PageSignals):
    """PageSignals plus the optional narrative returned by the LLM."""

    ai_analysis: Optional[str] = None


# ------------------------------------------------------------
# Suggestions
# ------------------------------------------------------------
Priority = Literal["high", "medium", "low"]


class SuggestionRecord(CamelModel):
    category: str
    priority: Priority
    title: str
    description: str
    implementation: str


# ------------------------------------------------------------
# Topic cluster
# ------------------------------------------------------------
class PillarContent(CamelModel):
    title: str
    description: str
    target_keywords: List[str] = []
    estimated_word_count: int = 0
    content_outline: List[str] = []


class ClusterTopic(CamelModel):
    title: str
    keywords: List[str] = []
    content_type: str
    estimated_word_count: int = 0
    difficulty: str
    search_volume: str


class KeywordSet(CamelModel):
    primary: List[str] = []
    secondary: List[str] = []
    longtail: List[str] = []
    related: List[str] = []


class PublicationSchedule(CamelModel):
    pillar_content: str
    cluster_articles: str


class ContentStrategy(CamelModel):
    total_articles: int
    estimated_timeframe: str
    publication_schedule: PublicationSchedule
    interlinking_strategy: List[str] = []
    distribution_channels: List[str] = []
    measurement_kpis: List[str] = Field(default=[], alias="measurementKPIs")


class ClusterRecord(CamelModel):
    main_topic: str
    pillar_content: PillarContent
    cluster_topics: List[ClusterTopic]
    keywords: KeywordSet
    content_strategy: ContentStrategy
    seo_score: int = 0
    created_at: str = Field(default_factory=utc_now_iso)


# ------------------------------------------------------------
# Article
# ------------------------------------------------------------
class ArticleSection(CamelModel):
    id: str
    title: str
    level: int = 2
    target_word_count: float
    target_keywords: List[str] = []
    subsections: List[str] = []


class ArticleStructure(CamelModel):
    total_word_count: int
    sections: List[ArticleSection]


class HeadingEntry(CamelModel):
    level: int
    text: str
    keywords: List[str] = []


class ArticleSeoData(CamelModel):
    meta_title: str
    meta_description: str
    target_keywords: List[str] = []
    headings: List[HeadingEntry] = []


class ArticleRecord(CamelModel):
    title: str
    topic: str
    content: str
    word_count: int
    structure: ArticleStructure
    seo_data: ArticleSeoData
    reading_time: int
    published_at: str = Field(default_factory=utc_now_iso)
    last_updated: str = Field(default_factory=utc_now_iso)
    source: Literal["llm", "template"] = "template"


# ------------------------------------------------------------
# Projects
# ------------------------------------------------------------
ResultKind = Literal["siteAnalysis", "seoSuggestions", "topicCluster", "articleGeneration"]

RESULT_KINDS = ("siteAnalysis", "seoSuggestions", "topicCluster", "articleGeneration")


class ProjectResult(CamelModel):
    result: str
    generated_at: str
    topic: Optional[str] = None


class Project(CamelModel):
    id: str
    name: str
    url: str
    created_at: str
    updated_at: str
    # keyed by ResultKind; one entry per kind, overwritten on regeneration
    data: Dict[str, ProjectResult] = {}
