import json
import os
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError as SchemaValidationError

from api.schemas import (
    AnalyzeSiteRequest,
    AnalyzeSiteResponse,
    DeleteProjectResponse,
    ErrorResponse,
    GenerateArticleRequest,
    GenerateArticleResponse,
    ProjectListResponse,
    ProjectResponse,
    SeoSuggestionsRequest,
    SeoSuggestionsResponse,
    TopicClusterRequest,
    TopicClusterResponse,
)
from core import prompts
from core.article_builder import article_title, build_article, design_article_structure
from core.data_models import ClusterRecord, PageSignals, SiteAnalysis, SuggestionRecord
from core.rule_engine import evaluate
from core.signal_extractor import extract
from core.topic_cluster import calculate_seo_score, build_topic_cluster
from utils.error_utils import GenerationFailure, UpstreamFetchError, ValidationError
from utils.http_utils import fetch_markup
from utils.llm_client import LLMClient, get_llm_client
from utils.persistence import ProjectStore
from utils.text_utils import clean_html_to_text, strip_code_fence, truncate_text

# ---------------------------------------------------------------------------
# Load environment from project-level .env
# ---------------------------------------------------------------------------
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(BASE_DIR, ".env")

load_dotenv(ENV_PATH)

app = FastAPI(title="SEO Content Assistant", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # dev: permissive
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# User-facing messages
MSG_URL_REQUIRED = "URLが必要です"
MSG_URL_INVALID = "有効なURLを入力してください"
MSG_TOPIC_REQUIRED = "トピックが必要です"
MSG_WORD_COUNT_INVALID = "目標文字数は正の整数で指定してください"
MSG_BAD_REQUEST = "リクエストの形式が正しくありません"
MSG_PROJECT_NOT_FOUND = "プロジェクトが見つかりません"
MSG_ANALYZE_FAILED = "分析中にエラーが発生しました"
MSG_SUGGESTIONS_FAILED = "SEO提案生成中にエラーが発生しました"
MSG_CLUSTER_FAILED = "トピッククラスター生成中にエラーが発生しました"
MSG_ARTICLE_FAILED = "記事生成中にエラーが発生しました"

# documented error envelope for the OpenAPI schema
INPUT_ERRORS = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
NOT_FOUND = {404: {"model": ErrorResponse}}

# visible text sent along with the signals for the narrative analysis
AI_CONTENT_LIMIT = 4000
MAX_LLM_SUGGESTIONS = 5

# ---------------------------------------------------------------------------
# Collaborators (tests monkeypatch _llm_client / _fetch_markup and override
# the get_project_store dependency)
# ---------------------------------------------------------------------------
_llm_client: LLMClient = get_llm_client()
_project_store: Optional[ProjectStore] = None


def get_project_store() -> ProjectStore:
    """Process-wide store, opened on first use."""
    global _project_store
    if _project_store is None:
        _project_store = ProjectStore()
    return _project_store


def _fetch_markup(url: str) -> str:
    return fetch_markup(url)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------
def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected {} {}: {}", request.method, request.url.path, exc)
    return _error_response(400, str(exc))


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Malformed body for {} {}: {}", request.method, request.url.path, exc.errors())
    return _error_response(400, MSG_BAD_REQUEST)


def _require_url(url: Optional[str]) -> str:
    if not url:
        raise ValidationError(MSG_URL_REQUIRED)
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        # e.g. an unterminated IPv6 literal
        raise ValidationError(MSG_URL_INVALID) from None
    if parsed.scheme not in ("http", "https") or not hostname:
        raise ValidationError(MSG_URL_INVALID)
    return url


def _require_topic(topic: Optional[str]) -> str:
    if not topic:
        raise ValidationError(MSG_TOPIC_REQUIRED)
    return topic


def _record_result(
    store: ProjectStore,
    url: Optional[str],
    kind: str,
    result: str,
    topic: Optional[str] = None,
) -> None:
    if not url:
        return
    try:
        project = store.get_or_create(url)
        store.upsert_result(project.id, kind, result, topic=topic)
    except Exception:  # noqa: BLE001
        logger.exception("Could not record {} for {}", kind, url)


# ---------------------------------------------------------------------------
# LLM-backed enrichment; every helper absorbs GenerationFailure
# ---------------------------------------------------------------------------
def _generate_ai_analysis(markup: str, signals: PageSignals) -> Optional[str]:
    summary = json.dumps(
        signals.model_dump(by_alias=True, exclude={"analyzed_at"}),
        ensure_ascii=False,
        indent=2,
    )
    visible_text = truncate_text(clean_html_to_text(markup), AI_CONTENT_LIMIT) or ""
    content = f"URL: {signals.url}\n\nページ情報(JSON):\n{summary}\n\n本文抜粋:\n{visible_text}"
    try:
        return _llm_client.generate(prompts.site_analysis_prompt(content))
    except GenerationFailure as exc:
        logger.warning("analyze-site: AI analysis unavailable: {}", exc)
        return None


def _generate_extra_suggestions(
    signals: PageSignals,
    existing: List[SuggestionRecord],
) -> List[SuggestionRecord]:
    prompt = prompts.seo_suggestions_prompt(
        signals.model_dump(by_alias=True, exclude={"analyzed_at"}),
        [s.model_dump(by_alias=True) for s in existing],
    )
    try:
        raw = _llm_client.generate_json(prompt)
    except GenerationFailure as exc:
        logger.warning("seo-suggestions: LLM suggestions unavailable: {}", exc)
        return []

    if not isinstance(raw, list):
        logger.warning("seo-suggestions: expected a JSON array, got {}", type(raw).__name__)
        return []

    seen = {s.title for s in existing}
    extra: List[SuggestionRecord] = []
    for item in raw:
        try:
            suggestion = SuggestionRecord.model_validate(item)
        except SchemaValidationError:
            logger.debug("seo-suggestions: dropping malformed suggestion {!r}", item)
            continue
        if suggestion.title in seen:
            continue
        seen.add(suggestion.title)
        extra.append(suggestion)
        if len(extra) >= MAX_LLM_SUGGESTIONS:
            break
    return extra


def _generate_cluster(topic: str) -> Optional[ClusterRecord]:
    try:
        raw = _llm_client.generate_json(prompts.topic_cluster_prompt(topic))
    except GenerationFailure as exc:
        logger.warning("topic-cluster: LLM cluster unavailable: {}", exc)
        return None

    if not isinstance(raw, dict):
        logger.warning("topic-cluster: expected a JSON object, got {}", type(raw).__name__)
        return None

    payload: Dict[str, Any] = {**raw, "mainTopic": topic}
    payload.pop("seoScore", None)
    payload.pop("createdAt", None)
    try:
        cluster = ClusterRecord.model_validate(payload)
    except SchemaValidationError as exc:
        logger.warning("topic-cluster: LLM cluster failed validation: {}", exc.error_count())
        return None
    if not cluster.cluster_topics:
        return None

    cluster.seo_score = calculate_seo_score(cluster.pillar_content, cluster.cluster_topics)
    return cluster


def _generate_article_body(topic: str, target_word_count: int) -> Optional[str]:
    structure = design_article_structure(topic, target_word_count)
    prompt = prompts.article_prompt(
        topic,
        article_title(topic),
        target_word_count,
        [s.model_dump() for s in structure.sections],
    )
    try:
        body = strip_code_fence(_llm_client.generate(prompt))
    except GenerationFailure as exc:
        logger.warning("generate-article: LLM body unavailable: {}", exc)
        return None
    return body or None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------
@app.post("/analyze-site", response_model=AnalyzeSiteResponse, responses=INPUT_ERRORS)
def analyze_site(
    req: AnalyzeSiteRequest,
    store: ProjectStore = Depends(get_project_store),
):
    """Fetch a page, extract its on-page signals and add an optional AI narrative."""
    url = _require_url(req.url)
    logger.info("analyze-site: url={!r}", url)

    try:
        markup = _fetch_markup(url)
        signals = extract(markup, url)
        analysis = SiteAnalysis.model_validate(
            {**signals.model_dump(), "ai_analysis": _generate_ai_analysis(markup, signals)}
        )
    except UpstreamFetchError as exc:
        return _error_response(500, f"{MSG_ANALYZE_FAILED}（{exc}）")
    except Exception:  # noqa: BLE001
        logger.exception("analyze-site: unhandled error")
        return _error_response(500, MSG_ANALYZE_FAILED)

    _record_result(store, url, "siteAnalysis", analysis.model_dump_json(by_alias=True))
    return AnalyzeSiteResponse(analysis=analysis)


@app.post("/seo-suggestions", response_model=SeoSuggestionsResponse, responses=INPUT_ERRORS)
def seo_suggestions(
    req: SeoSuggestionsRequest,
    store: ProjectStore = Depends(get_project_store),
):
    """Rule-engine suggestions for a page, optionally extended by the LLM."""
    url = _require_url(req.url)
    logger.info("seo-suggestions: url={!r}", url)

    try:
        signals = extract(_fetch_markup(url), url)
        suggestions = evaluate(signals)
        suggestions.extend(_generate_extra_suggestions(signals, suggestions))
    except UpstreamFetchError as exc:
        return _error_response(500, f"{MSG_SUGGESTIONS_FAILED}（{exc}）")
    except Exception:  # noqa: BLE001
        logger.exception("seo-suggestions: unhandled error")
        return _error_response(500, MSG_SUGGESTIONS_FAILED)

    response = SeoSuggestionsResponse(suggestions=suggestions)
    _record_result(store, url, "seoSuggestions", response.model_dump_json(by_alias=True))
    return response


@app.post("/topic-cluster", response_model=TopicClusterResponse, responses=INPUT_ERRORS)
def topic_cluster(
    req: TopicClusterRequest,
    store: ProjectStore = Depends(get_project_store),
):
    """Pillar/cluster content plan for a topic."""
    topic = _require_topic(req.topic)
    url = _require_url(req.url) if req.url else None
    logger.info("topic-cluster: topic={!r}", topic)

    try:
        cluster = _generate_cluster(topic) or build_topic_cluster(topic)
    except Exception:  # noqa: BLE001
        logger.exception("topic-cluster: unhandled error")
        return _error_response(500, MSG_CLUSTER_FAILED)

    _record_result(store, url, "topicCluster", cluster.model_dump_json(by_alias=True), topic=topic)
    return TopicClusterResponse(cluster=cluster)


@app.post("/generate-article", response_model=GenerateArticleResponse, responses=INPUT_ERRORS)
def generate_article(
    req: GenerateArticleRequest,
    store: ProjectStore = Depends(get_project_store),
):
    """Long-form article for a topic; template body when the LLM is unavailable."""
    topic = _require_topic(req.topic)
    if req.target_word_count <= 0:
        raise ValidationError(MSG_WORD_COUNT_INVALID)
    url = _require_url(req.url) if req.url else None
    logger.info("generate-article: topic={!r} target={}", topic, req.target_word_count)

    try:
        body = _generate_article_body(topic, req.target_word_count)
        article = build_article(topic, req.target_word_count, content=body)
    except Exception:  # noqa: BLE001
        logger.exception("generate-article: unhandled error")
        return _error_response(500, MSG_ARTICLE_FAILED)

    _record_result(store, url, "articleGeneration", article.model_dump_json(by_alias=True), topic=topic)
    return GenerateArticleResponse(article=article)


@app.get("/projects", response_model=ProjectListResponse)
def list_projects(limit: int = 50, store: ProjectStore = Depends(get_project_store)):
    return ProjectListResponse(projects=store.list_projects(limit=limit))


@app.get("/projects/{project_id}", response_model=ProjectResponse, responses=NOT_FOUND)
def get_project(project_id: str, store: ProjectStore = Depends(get_project_store)):
    project = store.get(project_id)
    if project is None:
        return _error_response(404, MSG_PROJECT_NOT_FOUND)
    return ProjectResponse(project=project)


@app.delete("/projects/{project_id}", response_model=DeleteProjectResponse, responses=NOT_FOUND)
def delete_project(project_id: str, store: ProjectStore = Depends(get_project_store)):
    if not store.delete(project_id):
        return _error_response(404, MSG_PROJECT_NOT_FOUND)
    return DeleteProjectResponse(deleted=True)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
