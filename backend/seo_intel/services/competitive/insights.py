"""
Competitive insights from metric comparisons and content gaps.

Rule-based insights are always available. When a ``TextCompletionService``
is configured the generator asks it for richer insights first, and falls
back to the rules if the call fails or yields no usable insight.
"""

import logging
import math
from typing import Any, Optional

from seo_intel.errors import CompletionServiceError, MalformedCompletionResponse
from seo_intel.models.competitive import (
    CompetitiveComparison,
    CompetitiveSummary,
    CompetitorInsight,
    ContentGapAnalysis,
    GapDifficulty,
    MetricComparison,
    PerformanceGap,
)
from seo_intel.models.crawl import PageRecord
from seo_intel.services.competitive.constants import (
    CONTENT_GAP_ACTION_ITEMS,
    CONTENT_GAP_IMPACT,
    CRITICAL_GAP_IMPACT,
    DEFAULT_ACTION_ITEMS,
    EASY_METRICS,
    HARD_METRICS,
    MAX_LONG_TERM_OPPORTUNITIES,
    MAX_PROMPT_KEYWORDS,
    MAX_QUICK_WINS,
    MAX_TOPICS_IN_EVIDENCE,
    METRIC_ACTION_ITEMS,
    METRIC_CATEGORIES,
    MIN_MISSING_TOPICS_FOR_INSIGHT,
    PRIORITY_RANK,
    QUICK_WIN_METRICS,
    QUICK_WIN_MIN_IMPACT,
    TRAFFIC_PER_TOPIC,
    TRAFFIC_TOPIC_FACTOR,
)
from seo_intel.services.competitive.gap_analyzer import GapThresholds
from seo_intel.services.competitive.metrics import compare_site_metrics, compute_site_metrics
from seo_intel.services.content_analysis.llm_utils import parse_completion_json
from seo_intel.services.ports import TextCompletionService

logger = logging.getLogger(__name__)

DEFAULT_INSIGHT_IMPACT = 5


def format_metric_name(metric: str) -> str:
    return metric.replace("_", " ")


def estimate_traffic_potential(topic_count: int) -> int:
    """Rough monthly visitors from covering *topic_count* new topics."""
    return round(topic_count * TRAFFIC_PER_TOPIC * TRAFFIC_TOPIC_FACTOR)


# =============================================================================
# Rule-based analysis
# =============================================================================


def estimate_gap_difficulty(metric: str, gap: float) -> GapDifficulty:
    if metric in EASY_METRICS:
        return "easy" if gap < 10 else "medium"
    if metric in HARD_METRICS:
        return "medium" if gap < 5 else "hard"
    if gap < 5:
        return "easy"
    if gap < 15:
        return "medium"
    return "hard"


def analyze_performance_gaps(metrics: dict[str, MetricComparison]) -> list[PerformanceGap]:
    """Metrics the competitor leads on by more than a minor margin, easiest wins first."""
    gaps = [
        PerformanceGap(
            metric=name,
            gap=abs(m.difference),
            impact="high" if m.significance == "critical" else "medium",
            difficulty=estimate_gap_difficulty(name, abs(m.difference)),
        )
        for name, m in metrics.items()
        if m.advantage == "competitor" and m.significance != "minor"
    ]
    ease = {"easy": 3, "medium": 2, "hard": 1}
    gaps.sort(key=lambda g: PRIORITY_RANK[g.impact] + ease[g.difficulty], reverse=True)
    return gaps


def _rank(insight: CompetitorInsight) -> int:
    return PRIORITY_RANK[insight.priority] * 10 + insight.impact


def generate_fallback_insights(
    metrics: dict[str, MetricComparison], gaps: ContentGapAnalysis
) -> list[CompetitorInsight]:
    insights = []

    for name, m in metrics.items():
        if m.advantage != "competitor" or m.significance != "critical":
            continue
        insights.append(
            CompetitorInsight(
                category=METRIC_CATEGORIES.get(name, "general"),
                priority="high",
                impact=CRITICAL_GAP_IMPACT,
                recommendation=(
                    f"Improve {format_metric_name(name)} - competitor is "
                    f"{m.percentage_diff}% ahead"
                ),
                evidence=[
                    f"Your score: {m.main:g}",
                    f"Competitor score: {m.competitor:g}",
                    f"Performance gap: {abs(m.difference):g} points",
                ],
                action_items=list(METRIC_ACTION_ITEMS.get(name, DEFAULT_ACTION_ITEMS)),
            )
        )

    missing = gaps.missing_topics
    if len(missing) >= MIN_MISSING_TOPICS_FOR_INSIGHT:
        insights.append(
            CompetitorInsight(
                category="content-gaps",
                priority="high",
                impact=CONTENT_GAP_IMPACT,
                recommendation=(
                    f"Create content for {len(missing)} topics where competitor "
                    "has coverage but you don't"
                ),
                evidence=[
                    f"Missing topics: {', '.join(missing[:MAX_TOPICS_IN_EVIDENCE])}",
                    f"Estimated traffic opportunity: "
                    f"{estimate_traffic_potential(len(missing))} monthly visitors",
                ],
                action_items=list(CONTENT_GAP_ACTION_ITEMS),
            )
        )

    insights.sort(key=_rank, reverse=True)
    return insights


def summarize_competition(
    metrics: dict[str, MetricComparison],
    gaps: ContentGapAnalysis,
    insights: list[CompetitorInsight],
) -> CompetitiveSummary:
    strengths = [name for name, m in metrics.items() if m.advantage == "main"]
    weaknesses = [name for name, m in metrics.items() if m.advantage == "competitor"]

    overall = "neutral"
    if len(strengths) > len(weaknesses):
        overall = "main"
    elif len(weaknesses) > len(strengths):
        overall = "competitor"

    quick_wins = [
        i.recommendation
        for i in insights
        if i.impact >= QUICK_WIN_MIN_IMPACT
        and (i.priority == "high" or i.category in ("content-gaps", "content-optimization"))
    ]

    return CompetitiveSummary(
        overall_advantage=overall,
        strength_areas=[format_metric_name(n).capitalize() for n in strengths],
        weakness_areas=[format_metric_name(n).capitalize() for n in weaknesses],
        quick_wins=quick_wins[:MAX_QUICK_WINS],
        long_term_opportunities=gaps.missing_topics[:MAX_LONG_TERM_OPPORTUNITIES],
    )


# =============================================================================
# Completion-backed insights
# =============================================================================

INSIGHT_SYSTEM_PROMPT = (
    "You are an expert competitive SEO strategist. Analyze competitive data "
    "and provide specific, actionable insights: high-impact opportunities, "
    "tactics the competitor uses successfully, and concrete action steps. "
    "Be specific with numbers and measurable outcomes."
)

INSIGHT_SCHEMA_HINT = """{
  "insights": [
    {
      "category": "content-gaps|technical-seo|keyword-strategy|user-experience",
      "priority": "high|medium|low",
      "impact": 8,
      "recommendation": "Specific action to take",
      "evidence": ["Supporting data points"],
      "actionItems": ["Concrete steps to implement"]
    }
  ]
}"""


def build_insight_prompt(
    metrics: dict[str, MetricComparison],
    gaps: ContentGapAnalysis,
    performance_gaps: list[PerformanceGap],
) -> str:
    gap_lines = [
        f"- {format_metric_name(g.metric)}: {g.gap:g} point gap "
        f"({g.impact} impact, {g.difficulty} difficulty)"
        for g in performance_gaps
    ] or ["No significant performance gaps identified"]

    if gaps.missing_topics:
        keywords = ", ".join(gaps.opportunity_keywords[:MAX_PROMPT_KEYWORDS]) or "none"
        content_lines = [
            f"- missing topics: {len(gaps.missing_topics)} gap, "
            f"{estimate_traffic_potential(len(gaps.missing_topics))} potential monthly "
            f"visitors (keywords: {keywords})"
        ]
    else:
        content_lines = ["No major content opportunities identified"]

    quick_win_lines = [
        f"- Optimize {format_metric_name(name)}: "
        f"{min(round(abs(m.difference) * 10), 100)}% impact, 2-4 weeks"
        for name, m in metrics.items()
        if name in QUICK_WIN_METRICS and m.advantage == "competitor"
    ] or ["No quick wins identified"]

    threat_lines = [
        f"- Competitor significantly outperforms in {format_metric_name(name)}"
        for name, m in metrics.items()
        if m.advantage == "competitor" and m.significance == "critical"
    ] or ["No immediate competitive threats"]

    sections = [
        ("PERFORMANCE GAPS", gap_lines),
        ("CONTENT OPPORTUNITIES", content_lines),
        ("QUICK WINS IDENTIFIED", quick_win_lines),
        ("COMPETITIVE THREATS", threat_lines),
    ]
    body = "\n\n".join(f"{title}:\n" + "\n".join(lines) for title, lines in sections)
    return (
        "Analyze this competitive intelligence data and provide 8-12 specific, "
        "actionable insights for improving SEO performance against the "
        f"competitor:\n\n{body}\n\n"
        "Focus on the highest ROI opportunities first."
    )


def parse_insight(entry: Any) -> Optional[CompetitorInsight]:
    """Coerce one reply entry into an insight; ``None`` if it has no recommendation."""
    if not isinstance(entry, dict):
        return None
    recommendation = entry.get("recommendation")
    if not isinstance(recommendation, str) or not recommendation.strip():
        return None

    category = entry.get("category")
    priority = entry.get("priority")
    impact = entry.get("impact")
    if (
        isinstance(impact, bool)
        or not isinstance(impact, (int, float))
        or (isinstance(impact, float) and not math.isfinite(impact))
    ):
        impact = DEFAULT_INSIGHT_IMPACT
    evidence = entry.get("evidence")
    actions = entry.get("actionItems", entry.get("action_items"))

    return CompetitorInsight(
        category=category if isinstance(category, str) and category.strip() else "general",
        priority=priority if isinstance(priority, str) and priority in PRIORITY_RANK else "medium",
        impact=min(max(round(impact), 1), 10),
        recommendation=recommendation.strip(),
        evidence=[e for e in evidence if isinstance(e, str)] if isinstance(evidence, list) else [],
        action_items=(
            [a for a in actions if isinstance(a, str)] if isinstance(actions, list) else []
        ),
    )


class CompetitiveInsightGenerator:
    """Compares two crawled sites and explains the differences."""

    def __init__(
        self,
        completion: Optional[TextCompletionService] = None,
        thresholds: Optional[GapThresholds] = None,
    ) -> None:
        self.completion = completion
        self.thresholds = thresholds or GapThresholds()

    async def compare(
        self,
        main_pages: list[PageRecord],
        competitor_pages: list[PageRecord],
        gaps: ContentGapAnalysis,
    ) -> CompetitiveComparison:
        main_metrics = compute_site_metrics(main_pages)
        competitor_metrics = compute_site_metrics(competitor_pages)
        metrics = compare_site_metrics(main_metrics, competitor_metrics, self.thresholds)
        performance_gaps = analyze_performance_gaps(metrics)

        insights = await self._ai_insights(metrics, gaps, performance_gaps)
        from_ai = bool(insights)
        if not from_ai:
            insights = generate_fallback_insights(metrics, gaps)

        logger.info(
            f"Competitive comparison complete: {len(performance_gaps)} performance gaps, "
            f"{len(insights)} insights ({'AI' if from_ai else 'rule-based'})"
        )
        return CompetitiveComparison(
            main_metrics=main_metrics,
            competitor_metrics=competitor_metrics,
            metrics=metrics,
            performance_gaps=performance_gaps,
            insights=insights,
            summary=summarize_competition(metrics, gaps, insights),
            ai_insights=from_ai,
        )

    async def _ai_insights(
        self,
        metrics: dict[str, MetricComparison],
        gaps: ContentGapAnalysis,
        performance_gaps: list[PerformanceGap],
    ) -> list[CompetitorInsight]:
        if self.completion is None:
            return []
        try:
            raw = await self.completion.complete(
                INSIGHT_SYSTEM_PROMPT,
                build_insight_prompt(metrics, gaps, performance_gaps),
                INSIGHT_SCHEMA_HINT,
            )
            data = parse_completion_json(raw)
        except CompletionServiceError as e:
            logger.warning(f"Insight completion failed, using rule-based insights: {e}")
            return []
        except MalformedCompletionResponse as e:
            logger.warning(f"Malformed insight response, using rule-based insights: {e}")
            return []
        except Exception as e:
            logger.warning(
                f"Completion service raised {e.__class__.__name__} for insights, "
                f"using rule-based insights: {e}"
            )
            return []

        entries = data.get("insights") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            logger.warning("Insight response has no 'insights' list, using rule-based insights")
            return []

        insights = [i for i in map(parse_insight, entries) if i is not None]
        insights.sort(key=_rank, reverse=True)
        return insights
