"""
Deterministic topic-cluster builder.

Pillar/cluster model: one comprehensive pillar piece plus smaller cluster
articles that link back to it. Used directly when no LLM is configured and
as the fallback when the LLM answer cannot be used.
"""

from typing import List

from core.data_models import (
    ClusterRecord,
    ClusterTopic,
    ContentStrategy,
    KeywordSet,
    PillarContent,
    PublicationSchedule,
)

DIFFICULTY_LEVELS = ("初級", "中級", "上級")

RELATED_TERMS = [
    "効果", "方法", "手順", "コツ", "ポイント", "テクニック",
    "初心者", "上級者", "始め方", "やり方", "使い方",
    "メリット", "デメリット", "比較", "おすすめ",
    "最新", "トレンド", "2024", "将来性",
]

# (title suffix, keyword suffixes, content type, words, difficulty, search volume)
_CLUSTER_BLUEPRINTS = [
    ("の基本概念", ("基本", "初心者", "入門"), "解説記事", 3000, "初級", "Medium"),
    ("のメリット・デメリット", ("メリット", "デメリット", "利点"), "比較記事", 2500, "初級", "Medium"),
    ("の始め方ステップバイステップ", ("始め方", "やり方", "手順"), "ハウツー記事", 4000, "中級", "High"),
    ("でよくある失敗と対策", ("失敗", "間違い", "注意点"), "対策記事", 3500, "中級", "Medium"),
    ("の上級テクニック", ("上級", "テクニック", "応用"), "上級ガイド", 5000, "上級", "Low"),
    ("の最新トレンド2024", ("トレンド", "2024", "最新"), "トレンド記事", 2800, "中級", "Medium"),
    ("ツール・サービス比較", ("比較", "ツール", "おすすめ"), "比較記事", 6000, "中級", "High"),
    ("でよくある質問30選", ("FAQ", "質問", "疑問"), "FAQ記事", 4500, "初級", "Medium"),
]


def build_pillar_content(topic: str) -> PillarContent:
    return PillarContent(
        title=f"{topic}の完全ガイド",
        description=(
            f"{topic}に関する包括的な情報をまとめた詳細ガイド。"
            "初心者から上級者まで対応した完全版コンテンツです。"
        ),
        target_keywords=[topic, f"{topic} とは", f"{topic} 方法", f"{topic} 完全ガイド"],
        estimated_word_count=15000,
        content_outline=[
            f"{topic}とは？基本概念の解説",
            f"{topic}の重要性と必要性",
            f"{topic}を始める前に知っておくべきこと",
            f"{topic}の具体的な実践方法",
            f"{topic}でよくある間違いと対処法",
            f"{topic}の最新トレンドと将来性",
            f"{topic}に関するよくある質問",
            "まとめと次のステップ",
        ],
    )


def build_cluster_topics(topic: str) -> List[ClusterTopic]:
    return [
        ClusterTopic(
            title=f"{topic}{suffix}",
            keywords=[f"{topic} {kw}" for kw in keyword_suffixes],
            content_type=content_type,
            estimated_word_count=words,
            difficulty=difficulty,
            search_volume=volume,
        )
        for suffix, keyword_suffixes, content_type, words, difficulty, volume in _CLUSTER_BLUEPRINTS
    ]


def build_keywords(topic: str) -> KeywordSet:
    return KeywordSet(
        primary=[topic, f"{topic} とは", f"{topic} 方法", f"{topic} 始め方"],
        secondary=[
            f"{topic} 初心者",
            f"{topic} 基本",
            f"{topic} 手順",
            f"{topic} やり方",
            f"{topic} コツ",
            f"{topic} ポイント",
        ],
        longtail=[
            f"{topic} 初心者 始め方",
            f"{topic} 効果的な方法",
            f"{topic} 失敗しない コツ",
            f"{topic} おすすめ ツール",
            f"{topic} メリット デメリット",
            f"{topic} 2024 最新 トレンド",
        ],
        related=[f"{topic} {term}" for term in RELATED_TERMS],
    )


def build_content_strategy(cluster_topics: List[ClusterTopic]) -> ContentStrategy:
    return ContentStrategy(
        total_articles=len(cluster_topics) + 1,
        estimated_timeframe="3-6ヶ月",
        publication_schedule=PublicationSchedule(
            pillar_content="1ヶ月目",
            cluster_articles="2-6ヶ月目（週1-2本ペース）",
        ),
        interlinking_strategy=[
            "ピラーコンテンツから各クラスター記事への内部リンク設置",
            "クラスター記事からピラーコンテンツへの誘導リンク",
            "関連性の高いクラスター記事同士の相互リンク",
            "トピッククラスター専用のランディングページ作成",
        ],
        distribution_channels=[
            "オーガニック検索",
            "ソーシャルメディア",
            "メルマガ配信",
            "他サイトでの言及・被リンク獲得",
        ],
        measurement_kpis=[
            "対象キーワードでの検索順位向上",
            "クラスター全体でのオーガニックトラフィック増加",
            "滞在時間とページ/セッション数の向上",
            "コンバージョン率の改善",
        ],
    )


def calculate_seo_score(pillar: PillarContent, cluster_topics: List[ClusterTopic]) -> int:
    """Coverage score in 0..100 for a pillar plus its clusters."""
    score = 0

    score += 20 if pillar.estimated_word_count > 10000 else 10
    score += 15 if len(pillar.target_keywords) >= 4 else 10

    if cluster_topics:
        avg_words = sum(t.estimated_word_count for t in cluster_topics) / len(cluster_topics)
    else:
        avg_words = 0
    score += 20 if avg_words > 3000 else 15

    content_types = {t.content_type for t in cluster_topics}
    score += 15 if len(content_types) >= 4 else 10

    difficulties = {t.difficulty for t in cluster_topics}
    score += 15 if all(level in difficulties for level in DIFFICULTY_LEVELS) else 10

    score += 15 if len(cluster_topics) >= 8 else 10

    return min(score, 100)


def build_topic_cluster(topic: str) -> ClusterRecord:
    pillar = build_pillar_content(topic)
    cluster_topics = build_cluster_topics(topic)
    return ClusterRecord(
        main_topic=topic,
        pillar_content=pillar,
        cluster_topics=cluster_topics,
        keywords=build_keywords(topic),
        content_strategy=build_content_strategy(cluster_topics),
        seo_score=calculate_seo_score(pillar, cluster_topics),
    )
