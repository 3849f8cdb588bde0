"""
Heuristic SEO rules over PageSignals.

evaluate() runs a fixed, ordered list of rules. Each rule is a pure
function returning a SuggestionRecord or None; a rule that does not
trigger contributes nothing. Order is part of the output contract.
"""

from typing import Callable, List, Optional

from core.data_models import PageSignals, SuggestionRecord

TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
DESCRIPTION_MIN_LENGTH = 120
MIN_INTERNAL_LINKS = 5
MAX_SCRIPT_FILES = 10
MAX_STYLESHEETS = 5

CATEGORY_META = "メタタグ"
CATEGORY_STRUCTURE = "コンテンツ構造"
CATEGORY_ACCESSIBILITY = "アクセシビリティ"
CATEGORY_LINKS = "リンク構造"
CATEGORY_PERFORMANCE = "パフォーマンス"

Rule = Callable[[PageSignals], Optional[SuggestionRecord]]


def title_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    title = signals.title
    if not title:
        return SuggestionRecord(
            category=CATEGORY_META,
            priority="high",
            title="タイトルタグが見つかりません",
            description="ページにtitleタグを追加してください。SEOにとって最も重要な要素の一つです。",
            implementation="<title>適切なページタイトル（50-60文字程度）</title>",
        )

    length = len(title)
    if length < TITLE_MIN_LENGTH:
        return SuggestionRecord(
            category=CATEGORY_META,
            priority="medium",
            title="タイトルが短すぎます",
            description=f"現在のタイトル長: {length}文字。30-60文字程度が推奨されます。",
            implementation="より詳細で魅力的なタイトルに変更してください。",
        )
    if length > TITLE_MAX_LENGTH:
        return SuggestionRecord(
            category=CATEGORY_META,
            priority="medium",
            title="タイトルが長すぎます",
            description=f"現在のタイトル長: {length}文字。検索結果で切り詰められる可能性があります。",
            implementation="60文字以内に収めるようタイトルを短縮してください。",
        )
    return None


def description_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    description = signals.description
    if not description:
        return SuggestionRecord(
            category=CATEGORY_META,
            priority="high",
            title="メタディスクリプションが設定されていません",
            description="ページの内容を要約したメタディスクリプションを追加してください。",
            implementation='<meta name="description" content="ページの内容を120-160文字で要約">',
        )

    # no upper bound check
    if len(description) < DESCRIPTION_MIN_LENGTH:
        return SuggestionRecord(
            category=CATEGORY_META,
            priority="medium",
            title="メタディスクリプションが短すぎます",
            description=f"現在の長さ: {len(description)}文字。120-160文字程度が推奨されます。",
            implementation="より詳細な説明を追加してください。",
        )
    return None


def h1_count_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    count = len(signals.headings.h1)
    if count == 0:
        return SuggestionRecord(
            category=CATEGORY_STRUCTURE,
            priority="high",
            title="H1タグが見つかりません",
            description="ページの主題を表すH1タグを追加してください。",
            implementation="<h1>ページのメイントピック</h1>",
        )
    if count > 1:
        return SuggestionRecord(
            category=CATEGORY_STRUCTURE,
            priority="medium",
            title="H1タグが複数あります",
            description=f"{count}個のH1タグが見つかりました。1ページにつき1つのH1タグが推奨されます。",
            implementation="追加のH1タグをH2またはH3に変更してください。",
        )
    return None


def is_well_structured(signals: PageSignals) -> bool:
    """
    Coarse proxy for a sane heading outline: exactly one H1, and H3s only
    when at least one H2 exists. Counts only; actual nesting order in the
    document is not inspected.
    """
    h1 = len(signals.headings.h1)
    h2 = len(signals.headings.h2)
    h3 = len(signals.headings.h3)
    return h1 == 1 and (h2 > 0 or h3 == 0)


def heading_hierarchy_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    if is_well_structured(signals):
        return None
    return SuggestionRecord(
        category=CATEGORY_STRUCTURE,
        priority="medium",
        title="見出し構造を改善してください",
        description="見出しタグ（H1-H6）を階層的に使用してください。",
        implementation="H1→H2→H3の順序で見出しを構造化してください。",
    )


def image_alt_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    missing = signals.images.without_alt
    if missing <= 0:
        return None
    return SuggestionRecord(
        category=CATEGORY_ACCESSIBILITY,
        priority="medium",
        title="alt属性が設定されていない画像があります",
        description=f"{missing}個の画像にalt属性が設定されていません。",
        implementation='<img src="image.jpg" alt="画像の説明文">',
    )


def internal_links_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    count = signals.links.internal
    if count >= MIN_INTERNAL_LINKS:
        return None
    return SuggestionRecord(
        category=CATEGORY_LINKS,
        priority="low",
        title="内部リンクを増やしてください",
        description=f"現在の内部リンク数: {count}個。関連ページへの内部リンクを追加してください。",
        implementation="関連するページへのリンクを追加して、サイト内の回遊性を向上させてください。",
    )


def script_count_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    count = signals.resources.scripts
    if count <= MAX_SCRIPT_FILES:
        return None
    return SuggestionRecord(
        category=CATEGORY_PERFORMANCE,
        priority="medium",
        title="JavaScriptファイルが多すぎます",
        description=f"{count}個のスクリプトファイルが読み込まれています。",
        implementation="スクリプトファイルを統合または遅延読み込みを検討してください。",
    )


def stylesheet_count_rule(signals: PageSignals) -> Optional[SuggestionRecord]:
    count = signals.resources.stylesheets
    if count <= MAX_STYLESHEETS:
        return None
    return SuggestionRecord(
        category=CATEGORY_PERFORMANCE,
        priority="low",
        title="CSSファイルの最適化",
        description=f"{count}個のCSSファイルが読み込まれています。",
        implementation="CSSファイルを統合して読み込み時間を短縮してください。",
    )


RULES: List[Rule] = [
    title_rule,
    description_rule,
    h1_count_rule,
    heading_hierarchy_rule,
    image_alt_rule,
    internal_links_rule,
    script_count_rule,
    stylesheet_count_rule,
]


def evaluate(signals: PageSignals) -> List[SuggestionRecord]:
    """Run every rule in order and collect the suggestions that fired."""
    suggestions: List[SuggestionRecord] = []
    for rule in RULES:
        suggestion = rule(signals)
        if suggestion is not None:
            suggestions.append(suggestion)
    return suggestions
