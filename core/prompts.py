"""Prompt templates sent to the text generation backend."""

import json
from typing import Any, Dict, List

SITE_ANALYSIS_PROMPT = """あなたは専門的なWebサイト分析者です。以下の内容をSEOの観点から詳細に分析してください。

分析対象:
{content}

- 分析結果は具体的で実用的な内容にする
- 改善提案は実装可能で効果的なものを含める
- 数値やデータがある場合は具体的に言及する

回答は日本語の文章で返してください。"""

SEO_SUGGESTIONS_PROMPT = """あなたはSEOコンサルタントです。以下のページ分析結果と、ルールベースで検出済みの改善点を読み、追加で有効な改善提案を最大5件挙げてください。

ページ分析結果(JSON):
{signals}

検出済みの改善点(JSON):
{existing}

検出済みの改善点と重複する提案は含めないでください。
次の形式のJSON配列のみを返してください:
[
  {{
    "category": "カテゴリ名",
    "priority": "high | medium | low",
    "title": "提案のタイトル",
    "description": "問題の説明",
    "implementation": "具体的な実装方法"
  }}
]"""

TOPIC_CLUSTER_PROMPT = """あなたはコンテンツ戦略の専門家です。トピッククラスター理論に基づき、メイントピック「{topic}」のトピッククラスターを設計してください。

次のキーを持つJSONオブジェクトのみを返してください:
- mainTopic: 文字列
- pillarContent: {{title, description, targetKeywords[], estimatedWordCount, contentOutline[]}}
- clusterTopics: [{{title, keywords[], contentType, estimatedWordCount, difficulty(初級|中級|上級), searchVolume(High|Medium|Low)}}] を8件程度
- keywords: {{primary[], secondary[], longtail[], related[]}}
- contentStrategy: {{totalArticles, estimatedTimeframe, publicationSchedule: {{pillarContent, clusterArticles}}, interlinkingStrategy[], distributionChannels[], measurementKPIs[]}}"""

ARTICLE_PROMPT = """あなたはプロのSEOライターです。「{topic}」について、約{target_word_count}文字の記事をMarkdownで執筆してください。

記事タイトル(H1): {title}

以下の見出し構成(H2)と小見出し(H3)に必ず従ってください:
{outline}

- 各セクションは具体例を交えて実用的に書く
- 見出し以外に説明文やコードフェンスを付けない
- 記事本文のみを返す"""


def site_analysis_prompt(content: str) -> str:
    return SITE_ANALYSIS_PROMPT.format(content=content)


def seo_suggestions_prompt(signals: Dict[str, Any], existing: List[Dict[str, Any]]) -> str:
    return SEO_SUGGESTIONS_PROMPT.format(
        signals=json.dumps(signals, ensure_ascii=False, indent=2),
        existing=json.dumps(existing, ensure_ascii=False, indent=2),
    )


def topic_cluster_prompt(topic: str) -> str:
    return TOPIC_CLUSTER_PROMPT.format(topic=topic)


def article_prompt(topic: str, title: str, target_word_count: int, sections: List[Dict[str, Any]]) -> str:
    outline_lines: List[str] = []
    for section in sections:
        outline_lines.append(f"## {section['title']}")
        for sub in section.get("subsections", []):
            outline_lines.append(f"### {sub}")
    return ARTICLE_PROMPT.format(
        topic=topic,
        title=title,
        target_word_count=target_word_count,
        outline="\n".join(outline_lines),
    )
