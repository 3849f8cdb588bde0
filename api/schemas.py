from typing import List, Optional

from pydantic import Field, field_validator

from core.article_builder import DEFAULT_TARGET_WORD_COUNT
from core.data_models import (
    ArticleRecord,
    CamelModel,
    ClusterRecord,
    Project,
    SiteAnalysis,
    SuggestionRecord,
)


class _TextInput(CamelModel):
    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value


class AnalyzeSiteRequest(_TextInput):
    """Body for POST /analyze-site."""
    url: Optional[str] = None


class SeoSuggestionsRequest(_TextInput):
    """Body for POST /seo-suggestions."""
    url: Optional[str] = None


class TopicClusterRequest(_TextInput):
    """Body for POST /topic-cluster. ``url`` attaches the result to that URL's project."""
    topic: Optional[str] = None
    url: Optional[str] = None


class GenerateArticleRequest(_TextInput):
    """Body for POST /generate-article. ``url`` attaches the result to that URL's project."""
    topic: Optional[str] = None
    target_word_count: int = DEFAULT_TARGET_WORD_COUNT
    url: Optional[str] = None


class AnalyzeSiteResponse(CamelModel):
    analysis: SiteAnalysis


class SeoSuggestionsResponse(CamelModel):
    suggestions: List[SuggestionRecord] = []


class TopicClusterResponse(CamelModel):
    cluster: ClusterRecord


class GenerateArticleResponse(CamelModel):
    article: ArticleRecord


class ProjectListResponse(CamelModel):
    projects: List[Project] = []


class ProjectResponse(CamelModel):
    project: Project


class DeleteProjectResponse(CamelModel):
    deleted: bool = Field(default=True)


class ErrorResponse(CamelModel):
    error: str
