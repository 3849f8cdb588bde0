import pytest

from core.data_models import HeadingMap, ImageStats, LinkStats, PageSignals, ResourceStats
from core.rule_engine import (
    CATEGORY_ACCESSIBILITY,
    CATEGORY_LINKS,
    CATEGORY_META,
    CATEGORY_PERFORMANCE,
    CATEGORY_STRUCTURE,
    evaluate,
    is_well_structured,
)

GOOD_TITLE = "T" * 40
GOOD_DESCRIPTION = "説" * 130


def make_signals(**overrides) -> PageSignals:
    """A page that passes every rule unless overridden."""
    fields = {
        "url": "https://example.com",
        "domain": "example.com",
        "title": GOOD_TITLE,
        "description": GOOD_DESCRIPTION,
        "headings": HeadingMap(h1=["Main"], h2=["Sub"], h3=[]),
        "images": ImageStats(total=2, without_alt=0, alt_optimization_rate=100),
        "links": LinkStats(internal=5, external=1, total=6),
        "resources": ResourceStats(scripts=2, stylesheets=1),
    }
    fields.update(overrides)
    return PageSignals(**fields)


def titles(suggestions):
    return [s.title for s in suggestions]


def test_clean_page_produces_no_suggestions():
    assert evaluate(make_signals()) == []


def test_missing_title_is_high_priority():
    result = evaluate(make_signals(title=None))
    assert len(result) == 1
    assert result[0].priority == "high"
    assert result[0].category == CATEGORY_META
    assert result[0].title == "タイトルタグが見つかりません"


@pytest.mark.parametrize(
    "length,expected",
    [
        (29, ["タイトルが短すぎます"]),
        (30, []),
        (60, []),
        (61, ["タイトルが長すぎます"]),
    ],
)
def test_title_length_boundaries(length, expected):
    result = evaluate(make_signals(title="a" * length))
    assert titles(result) == expected
    for suggestion in result:
        assert suggestion.priority == "medium"
        assert str(length) in suggestion.description


def test_description_rules():
    missing = evaluate(make_signals(description=None))
    assert [(s.priority, s.title) for s in missing] == [
        ("high", "メタディスクリプションが設定されていません")
    ]

    short = evaluate(make_signals(description="d" * 119))
    assert [(s.priority, s.title) for s in short] == [("medium", "メタディスクリプションが短すぎます")]

    # no upper bound
    assert evaluate(make_signals(description="d" * 500)) == []


def test_missing_h1_gives_exactly_one_high_structural_suggestion():
    result = evaluate(make_signals(headings=HeadingMap(h1=[], h2=["Sub"], h3=[])))
    high = [s for s in result if s.priority == "high"]
    assert len(high) == 1
    assert high[0].category == CATEGORY_STRUCTURE
    assert high[0].title == "H1タグが見つかりません"


def test_single_h1_gives_no_h1_count_suggestion():
    result = evaluate(make_signals(headings=HeadingMap(h1=["Only"], h2=["Sub"], h3=[])))
    assert "H1タグが見つかりません" not in titles(result)
    assert "H1タグが複数あります" not in titles(result)


def test_multiple_h1_is_medium_and_reports_count():
    result = evaluate(make_signals(headings=HeadingMap(h1=["A", "B", "C"], h2=["Sub"], h3=[])))
    h1 = [s for s in result if s.title == "H1タグが複数あります"]
    assert len(h1) == 1
    assert h1[0].priority == "medium"
    assert "3" in h1[0].description


@pytest.mark.parametrize(
    "h1,h2,h3,expected",
    [
        (1, 1, 0, True),
        (1, 0, 0, True),
        (1, 2, 5, True),
        (1, 0, 1, False),
        (0, 1, 1, False),
        (2, 1, 0, False),
    ],
)
def test_heading_hierarchy_proxy(h1, h2, h3, expected):
    signals = make_signals(
        headings=HeadingMap(h1=["x"] * h1, h2=["y"] * h2, h3=["z"] * h3)
    )
    assert is_well_structured(signals) is expected
    assert ("見出し構造を改善してください" in titles(evaluate(signals))) is (not expected)


def test_missing_alt_mentions_count():
    result = evaluate(make_signals(images=ImageStats(total=5, without_alt=3)))
    assert len(result) == 1
    assert result[0].category == CATEGORY_ACCESSIBILITY
    assert result[0].priority == "medium"
    assert "3" in result[0].description


def test_few_internal_links_is_low_priority():
    result = evaluate(make_signals(links=LinkStats(internal=4, external=0, total=4)))
    assert [(s.category, s.priority) for s in result] == [(CATEGORY_LINKS, "low")]


def test_performance_rules_thresholds():
    assert evaluate(make_signals(resources=ResourceStats(scripts=10, stylesheets=5))) == []

    result = evaluate(make_signals(resources=ResourceStats(scripts=11, stylesheets=6)))
    assert [(s.category, s.priority) for s in result] == [
        (CATEGORY_PERFORMANCE, "medium"),
        (CATEGORY_PERFORMANCE, "low"),
    ]
    assert "11" in result[0].description
    assert "6" in result[1].description


def test_rule_order_is_stable_when_everything_fires():
    signals = make_signals(
        title=None,
        description=None,
        headings=HeadingMap(h1=[], h2=[], h3=["orphan"]),
        images=ImageStats(total=1, without_alt=1),
        links=LinkStats(internal=0, external=0, total=0),
        resources=ResourceStats(scripts=20, stylesheets=9),
    )
    result = evaluate(signals)
    assert titles(result) == [
        "タイトルタグが見つかりません",
        "メタディスクリプションが設定されていません",
        "H1タグが見つかりません",
        "見出し構造を改善してください",
        "alt属性が設定されていない画像があります",
        "内部リンクを増やしてください",
        "JavaScriptファイルが多すぎます",
        "CSSファイルの最適化",
    ]


def test_evaluate_is_deterministic():
    signals = make_signals(title="short", images=ImageStats(total=3, without_alt=3))
    first = [s.model_dump() for s in evaluate(signals)]
    second = [s.model_dump() for s in evaluate(signals)]
    assert first == second
