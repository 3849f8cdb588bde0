"""
Deterministic long-form article builder.

design_article_structure() lays out twelve fixed H2 sections for a topic;
build_article_content() renders a Markdown body from per-section
templates. The LLM path reuses the same structure and only swaps the body,
so section titles never depend on whether generation succeeded.
"""

import math
from typing import Dict, List, Optional, Tuple

from core.data_models import (
    ArticleRecord,
    ArticleSection,
    ArticleSeoData,
    ArticleStructure,
    HeadingEntry,
)
from utils.text_utils import count_words

DEFAULT_TARGET_WORD_COUNT = 20000
WORDS_PER_MINUTE = 200
SECTION_COUNT = 12
# a section shorter than this share of its target gets a "詳細解説" block
PADDING_THRESHOLD = 0.8

# (id, title template, weight, keyword suffixes, subsections)
_SECTION_BLUEPRINTS: List[Tuple[str, str, float, Tuple[str, ...], Tuple[str, ...]]] = [
    ("introduction", "{t}とは？基本概念から理解する", 1.2,
     ("とは", "基本", "概念"),
     ("{t}の定義と重要性", "{t}が注目される理由", "{t}の基本的な仕組み")),
    ("benefits-importance", "{t}のメリットと重要性", 1.0,
     ("メリット", "効果", "重要性"),
     ("{t}による具体的なメリット", "ビジネスへの影響", "個人レベルでの恩恵")),
    ("getting-started", "{t}を始める前に知っておくべき基礎知識", 1.3,
     ("基礎", "準備", "始める前"),
     ("必要な知識・スキル", "準備すべきツールや環境", "初心者が陥りがちな誤解")),
    ("step-by-step-guide", "{t}の始め方：ステップバイステップガイド", 1.5,
     ("始め方", "やり方", "手順"),
     ("ステップ1: 基本設定と準備", "ステップ2: 初期設定と基本操作",
      "ステップ3: 実践的な活用方法", "ステップ4: 効果測定と改善")),
    ("best-practices", "{t}のベストプラクティス", 1.2,
     ("コツ", "ポイント", "成功"),
     ("効果を最大化するコツ", "時間を節約する方法", "品質を向上させるテクニック")),
    ("common-mistakes", "{t}でよくある間違いと対処法", 1.0,
     ("失敗", "間違い", "対処法"),
     ("初心者がよく犯す間違い", "中級者が陥りがちな罠", "問題が発生した時の対処法")),
    ("tools-resources", "{t}に役立つツールとリソース", 1.1,
     ("ツール", "おすすめ", "リソース"),
     ("必須ツールの紹介", "無料で使えるリソース", "有料ツールの比較検討")),
    ("advanced-techniques", "{t}の上級テクニック", 1.3,
     ("上級", "テクニック", "応用"),
     ("上級者向けの活用方法", "応用テクニックの実践", "プロが使う秘訣")),
    ("case-studies", "{t}の成功事例と実践例", 1.0,
     ("事例", "成功", "実例"),
     ("企業での成功事例", "個人レベルでの活用例", "業界別の実践事例")),
    ("trends-future", "{t}の最新トレンドと将来性", 1.0,
     ("トレンド", "将来性", "最新"),
     ("2024年の最新動向", "将来の発展予測", "業界への影響と変化")),
    ("faq", "{t}に関するよくある質問", 0.8,
     ("FAQ", "質問", "疑問"),
     ("基本的な質問と回答", "技術的な質問と解決策", "トラブルシューティング")),
    ("conclusion", "まとめ：{t}を効果的に活用するために", 0.7,
     ("まとめ", "活用", "効果的"),
     ("重要ポイントの振り返り", "次のアクションステップ", "継続的な改善のための提案")),
]

# Body lines per section id; "\n### ...\n" entries open a subsection.
_SECTION_BODIES: Dict[str, Tuple[str, ...]] = {
    "introduction": (
        "{t}は、現代のビジネス環境において重要な概念として注目を集めています。",
        "\n### {t}の定義と重要性\n",
        "{t}とは、簡単に説明すると...（ここで具体的な定義を展開）",
        "具体的には以下のような特徴があります：",
        "- 特徴1: 詳細な説明",
        "- 特徴2: 詳細な説明",
        "- 特徴3: 詳細な説明",
        "\n### {t}が注目される理由\n",
        "近年、{t}が注目される背景には複数の要因があります。",
        "第一に、技術の進歩により...",
        "第二に、市場環境の変化により...",
        "\n### {t}の基本的な仕組み\n",
        "{t}の基本的な仕組みを理解するために、以下の要素を考えてみましょう。",
    ),
    "benefits-importance": (
        "{t}を導入することで得られるメリットは多岐にわたります。",
        "\n### {t}による具体的なメリット\n",
        "**1. 効率性の向上**",
        "{t}を活用することで、従来の作業時間を大幅に短縮できます。",
        "**2. 品質の向上**",
        "一貫性のある高品質な結果を得ることができます。",
        "**3. コスト削減**",
        "長期的な視点で見ると、大幅なコスト削減効果が期待できます。",
        "\n### ビジネスへの影響\n",
        "企業レベルでの{t}導入は、競争優位性の確保に直結します。",
        "\n### 個人レベルでの恩恵\n",
        "個人が{t}を習得することで得られる利益について説明します。",
    ),
    "getting-started": (
        "{t}を始める前に、基礎となる知識を身につけることが重要です。",
        "\n### 必要な知識・スキル\n",
        "{t}を効果的に活用するためには、以下の基礎知識が必要です：",
        "- 基礎知識1: 詳細説明",
        "- 基礎知識2: 詳細説明",
        "- 基礎知識3: 詳細説明",
        "\n### 準備すべきツールや環境\n",
        "実際に{t}を始めるために必要なツールや環境設定について説明します。",
        "\n### 初心者が陥りがちな誤解\n",
        "{t}について初心者がよく持つ誤解を解説し、正しい理解を促進します。",
    ),
    "step-by-step-guide": (
        "ここでは、{t}を実際に始めるための具体的なステップを詳しく解説します。",
        "\n### ステップ1: 基本設定と準備\n",
        "最初に行うべき基本的な設定について説明します。",
        "1. 初期設定の手順",
        "2. 環境構築の方法",
        "3. 必要なアカウントの作成",
        "\n### ステップ2: 初期設定と基本操作\n",
        "基本的な操作方法を習得しましょう。",
        "\n### ステップ3: 実践的な活用方法\n",
        "実際の業務やプロジェクトでの活用方法を学びます。",
        "\n### ステップ4: 効果測定と改善\n",
        "実施した結果の測定方法と継続的改善のアプローチを説明します。",
    ),
    "best-practices": (
        "{t}を最大限に活用するためのベストプラクティスをご紹介します。",
        "\n### 効果を最大化するコツ\n",
        "以下のコツを実践することで、{t}の効果を最大化できます：",
        "- コツ1: 具体的な実践方法",
        "- コツ2: 具体的な実践方法",
        "- コツ3: 具体的な実践方法",
        "\n### 時間を節約する方法\n",
        "効率的に作業を進めるための時間節約テクニックを紹介します。",
        "\n### 品質を向上させるテクニック\n",
        "一貫して高品質な結果を出すためのテクニックを解説します。",
    ),
    "common-mistakes": (
        "{t}を実践する際によくある間違いと、その対処法について説明します。",
        "\n### 初心者がよく犯す間違い\n",
        "**間違い1: 説明**",
        "対処法: 具体的な解決策",
        "**間違い2: 説明**",
        "対処法: 具体的な解決策",
        "\n### 中級者が陥りがちな罠\n",
        "ある程度経験を積んだ人でも陥りがちな問題について解説します。",
        "\n### 問題が発生した時の対処法\n",
        "トラブルが発生した際の系統的な対処アプローチを説明します。",
    ),
    "tools-resources": (
        "{t}を効果的に実践するために役立つツールやリソースを紹介します。",
        "\n### 必須ツールの紹介\n",
        "**ツール1**",
        "- 特徴: 主な機能と特徴",
        "- 利用方法: 基本的な使い方",
        "- 価格: 料金体系",
        "\n### 無料で使えるリソース\n",
        "コストをかけずに活用できるリソースを紹介します。",
        "\n### 有料ツールの比較検討\n",
        "投資する価値のある有料ツールの比較と選択基準を説明します。",
    ),
    "advanced-techniques": (
        "{t}をマスターするための上級テクニックを解説します。",
        "\n### 上級者向けの活用方法\n",
        "基本をマスターした方向けの高度な活用方法を紹介します。",
        "\n### 応用テクニックの実践\n",
        "実際のプロジェクトで使える応用テクニックを詳しく説明します。",
        "\n### プロが使う秘訣\n",
        "プロフェッショナルが実践している秘訣やノウハウを公開します。",
    ),
    "case-studies": (
        "{t}の実際の成功事例を通じて、具体的な活用方法を学びましょう。",
        "\n### 企業での成功事例\n",
        "**事例1: 企業A**",
        "- 課題: 抱えていた問題",
        "- 解決策: {t}を使った解決アプローチ",
        "- 結果: 得られた成果",
        "\n### 個人レベルでの活用例\n",
        "個人が{t}を活用して成果を上げた事例を紹介します。",
        "\n### 業界別の実践事例\n",
        "異なる業界での{t}活用例を比較分析します。",
    ),
    "trends-future": (
        "{t}の最新トレンドと将来の展望について解説します。",
        "\n### 2024年の最新動向\n",
        "現在注目されている{t}の最新動向を詳しく分析します。",
        "\n### 将来の発展予測\n",
        "専門家の見解と市場分析に基づく将来予測を説明します。",
        "\n### 業界への影響と変化\n",
        "{t}が各業界に与える影響と変化の方向性を考察します。",
    ),
    "faq": (
        "{t}に関してよく寄せられる質問とその回答をまとめました。",
        "\n### 基本的な質問と回答\n",
        "**Q1: {t}を始めるのに特別なスキルは必要ですか？**",
        "A1: 基本的な知識があれば始められますが、以下のスキルがあると有利です...",
        "**Q2: どのくらいの期間で成果が出ますか？**",
        "A2: 個人差はありますが、一般的には...",
        "\n### 技術的な質問と解決策\n",
        "より技術的な質問に対する詳細な回答を提供します。",
        "\n### トラブルシューティング\n",
        "よくある問題と、その解決方法をまとめています。",
    ),
    "conclusion": (
        "この記事では、{t}について包括的に解説してきました。",
        "\n### 重要ポイントの振り返り\n",
        "記事全体で説明した重要なポイントを振り返ります：",
        "1. {t}の基本概念と重要性",
        "2. 実践的な始め方とステップ",
        "3. ベストプラクティスと避けるべき間違い",
        "4. 上級テクニックと応用方法",
        "\n### 次のアクションステップ\n",
        "この記事を読み終えた後に取るべき具体的なアクションを提案します。",
        "\n### 継続的な改善のための提案\n",
        "{t}のスキルを継続的に向上させるためのアドバイスを提供します。",
    ),
}


def article_title(topic: str) -> str:
    return f"{topic}の完全ガイド：初心者から上級者まで対応した徹底解説"


def design_article_structure(topic: str, target_word_count: int = DEFAULT_TARGET_WORD_COUNT) -> ArticleStructure:
    base = target_word_count // SECTION_COUNT
    sections = [
        ArticleSection(
            id=section_id,
            title=title.format(t=topic),
            level=2,
            target_word_count=base * weight,
            target_keywords=[f"{topic} {kw}" for kw in keyword_suffixes],
            subsections=[s.format(t=topic) for s in subsections],
        )
        for section_id, title, weight, keyword_suffixes, subsections in _SECTION_BLUEPRINTS
    ]
    return ArticleStructure(total_word_count=target_word_count, sections=sections)


def _section_body(topic: str, section: ArticleSection) -> str:
    lines = _SECTION_BODIES.get(section.id)
    if lines is None:
        body = f"{section.title}に関する詳細な内容をここに展開します。"
    else:
        body = "\n\n".join(line.format(t=topic) for line in lines)

    if count_words(body) < section.target_word_count * PADDING_THRESHOLD:
        body += "\n\n### 詳細解説\n\n"
        body += (
            f"{topic}の{section.title.lower()}について、さらに詳しく解説します。"
            "実際の活用シーンを想定した具体例を交えながら、理解を深めていきましょう。\n\n"
        )
        body += "この分野における最新の研究結果や業界動向も含めて、包括的な情報を提供いたします。"
    return body


def build_article_content(topic: str, structure: ArticleStructure) -> str:
    parts: List[str] = [f"# {article_title(topic)}\n\n"]
    parts.append(
        f"{topic}について包括的に学びたい方のための完全ガイドです。"
        "基本概念から実践的な活用方法まで、段階的に詳しく解説していきます。\n\n"
    )
    parts.append(
        f"この記事では、{topic}の基本的な理解から始まり、実際の活用方法、"
        "よくある間違いとその対処法、さらには上級者向けのテクニックまで幅広くカバーしています。\n\n"
    )

    parts.append("## 目次\n\n")
    for index, section in enumerate(structure.sections, start=1):
        parts.append(f"{index}. [{section.title}](#{section.id})\n")
        for subsection in section.subsections:
            parts.append(f"   - {subsection}\n")
    parts.append("\n---\n\n")

    for section in structure.sections:
        parts.append(f"## {section.title}\n\n")
        parts.append(_section_body(topic, section))
        parts.append("\n---\n\n")

    return "".join(parts)


def build_article(
    topic: str,
    target_word_count: int = DEFAULT_TARGET_WORD_COUNT,
    content: Optional[str] = None,
) -> ArticleRecord:
    """
    Assemble the article record. ``content`` is an LLM-written body; when it
    is None the template renderer produces one.
    """
    structure = design_article_structure(topic, target_word_count)
    source = "llm" if content else "template"
    body = content or build_article_content(topic, structure)
    words = count_words(body)

    return ArticleRecord(
        title=article_title(topic),
        topic=topic,
        content=body,
        word_count=words,
        structure=structure,
        seo_data=ArticleSeoData(
            meta_title=f"{topic}の完全ガイド | 初心者から上級者まで",
            meta_description=(
                f"{topic}について知りたいすべてがここに。基本概念から実践的な活用方法まで、"
                "専門家が徹底解説します。初心者でも安心して学べる完全ガイドです。"
            ),
            target_keywords=[
                topic,
                f"{topic} とは",
                f"{topic} 方法",
                f"{topic} 始め方",
                f"{topic} 完全ガイド",
            ],
            headings=[
                HeadingEntry(level=s.level, text=s.title, keywords=s.target_keywords)
                for s in structure.sections
            ],
        ),
        reading_time=math.ceil(words / WORDS_PER_MINUTE),
        source=source,
    )
