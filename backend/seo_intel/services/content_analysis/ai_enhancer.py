"""
AI-assisted duplicate analysis.

Exact matching runs locally first. Template detection, content
categorization, and intent-conflict detection are then sent to the
``TextCompletionService`` in a small, bounded number of token-budgeted
batches. Calls are sequential with a short pause between them.

Any batch whose completion fails (any error raised by the service, or
unrepairable JSON) falls back to a local heuristic for that batch, so the
result is never worse than the heuristic alone. Malformed entries are dropped.
"""

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, Field

from seo_intel.errors import CompletionServiceError, MalformedCompletionResponse
from seo_intel.models.content import (
    AnalysisBatch,
    CompetingPage,
    ContentCategory,
    ContentItem,
    ContentType,
    DuplicateGroup,
    EnhancedAnalysisResult,
    EnhancerStats,
    IntentConflict,
    TemplateInstance,
    TemplatePattern,
)
from seo_intel.services.content_analysis.constants import (
    AI_BATCH_SIZE,
    AI_CALL_DELAY_MS,
    BOILERPLATE_MIN_PAGES,
    BOILERPLATE_WARNING_RATIO,
    DEFAULT_IMPROVEMENT_STRATEGY,
    DEFAULT_ROOT_CAUSE,
    EXACT_IMPROVEMENT_STRATEGY,
    EXACT_ROOT_CAUSE,
    MAX_CATEGORY_BATCHES,
    MAX_INTENT_BATCHES,
    MAX_PROMPT_ITEMS,
    MAX_TEMPLATE_BATCHES,
    MIN_ITEMS_FOR_INTENT,
    MIN_ITEMS_FOR_TEMPLATES,
    TEMPLATE_SIMILARITY_SCORE,
    TEMPLATE_VARIABLE_MARKER,
    VALID_CATEGORY_TYPES,
)
from seo_intel.services.content_analysis.llm_utils import parse_completion_json
from seo_intel.services.content_analysis.preprocessor import calculate_content_stats
from seo_intel.services.content_analysis.similarity import (
    SimilarityOptions,
    build_groups,
    determine_impact_level,
    find_exact_matches,
    normalize_content,
)
from seo_intel.services.content_analysis.token_budget import (
    BatchOptions,
    create_analysis_batches,
    create_token_budget,
    sanitize_for_prompt,
)
from seo_intel.services.ports import TextCompletionService

logger = logging.getLogger(__name__)

AskFn = Callable[[str, str, str], Awaitable[str]]

_IMPACT_BY_BUSINESS = {"high": "High", "medium": "Medium", "low": "Low"}

# pydantic's ValidationError is a ValueError; OverflowError comes from float/round.
_REJECTED_ENTRY_ERRORS = (TypeError, ValueError, OverflowError)


# =============================================================================
# Prompts
# =============================================================================

TEMPLATE_SYSTEM_PROMPT = (
    "You are an SEO expert analyzing {content_type} for template patterns. "
    "Identify content that follows similar patterns with only variable parts "
    "changing (like location names, product names, etc.)."
)

TEMPLATE_SCHEMA_HINT = """{
  "patterns": [
    {
      "pattern": "Services in [LOCATION]",
      "variables": ["LOCATION"],
      "instances": [
        {"content": "Services in Boston", "url": "https://example.com/boston",
         "extractedVariables": {"LOCATION": "Boston"}}
      ],
      "businessImpact": "high|medium|low",
      "recommendation": "Specific advice for this pattern"
    }
  ]
}"""

CATEGORY_SYSTEM_PROMPT = (
    "You are an SEO expert categorizing {content_type} by their purpose: "
    "boilerplate (repeated elements like headers/footers), navigation "
    "(menus/links), value (unique content for users), cta (call-to-action), "
    "template (pattern-based)."
)

CATEGORY_SCHEMA_HINT = """{
  "categories": [
    {"content": "About Our Company", "type": "boilerplate", "confidence": 85,
     "reason": "Generic about content repeated across pages"}
  ]
}"""

INTENT_SYSTEM_PROMPT = (
    "You are an SEO expert identifying pages that compete for the same user "
    "intent. Find {content_type} that target the same search intent or user "
    "goal, even if worded differently."
)

INTENT_SCHEMA_HINT = """{
  "conflicts": [
    {
      "intent": "Learn about web design services",
      "confidence": 90,
      "competingPages": [
        {"url": "https://example.com/web-design", "content": "Professional Web Design",
         "intentMatch": 95}
      ],
      "consolidationSuggestion": "Merge these pages or target different aspects"
    }
  ]
}"""


def _content_list(items: list[ContentItem]) -> str:
    return "\n".join(
        f'{i}. "{sanitize_for_prompt(item.content)}" (URL: {item.url})'
        for i, item in enumerate(items[:MAX_PROMPT_ITEMS], start=1)
    )


def build_template_prompt(items: list[ContentItem], content_type: str) -> str:
    return (
        f"Analyze these {content_type} for template patterns where only "
        f"variable parts change:\n\n{_content_list(items)}\n\n"
        "Identify patterns like:\n"
        '- "Services in [CITY]" where only city names change\n'
        '- "[PRODUCT] - Free Shipping" where only product names change\n'
        '- "About [COMPANY]" where only company names change'
    )


def build_category_prompt(items: list[ContentItem], content_type: str) -> str:
    return (
        f"Categorize these {content_type} by their purpose and SEO value:\n\n"
        f"{_content_list(items)}\n\n"
        "Categories:\n"
        "- boilerplate: Repeated elements (headers, footers, legal text)\n"
        "- navigation: Menus, breadcrumbs, site navigation\n"
        "- value: Unique content providing user value\n"
        "- cta: Call-to-action elements\n"
        "- template: Pattern-based content"
    )


def build_intent_prompt(items: list[ContentItem], content_type: str) -> str:
    return (
        f"Find {content_type} that compete for the same user search intent:\n\n"
        f"{_content_list(items)}\n\n"
        "Look for:\n"
        "- Different wordings for same service/product\n"
        "- Multiple pages targeting same keywords\n"
        "- Similar user goals despite different phrasing"
    )


# =============================================================================
# Response validation
# =============================================================================


def _pick(entry: dict, *keys: str) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # JSON allows NaN and Infinity
    return isinstance(value, int) or math.isfinite(value)


def is_valid_template(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("pattern"), str)
        and isinstance(entry.get("variables"), list)
        and isinstance(entry.get("instances"), list)
        and isinstance(entry.get("recommendation"), str)
    )


def is_valid_category(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("content"), str)
        and isinstance(entry.get("type"), str)
        and entry["type"] in VALID_CATEGORY_TYPES
        and _is_number(entry.get("confidence"))
        and isinstance(entry.get("reason"), str)
    )


def is_valid_intent(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("intent"), str)
        and _is_number(entry.get("confidence"))
        and isinstance(_pick(entry, "competingPages", "competing_pages"), list)
    )


def _parse_template(entry: dict) -> TemplatePattern:
    instances = []
    for raw in entry["instances"]:
        if not isinstance(raw, dict):
            continue
        if not isinstance(raw.get("url"), str) or not isinstance(raw.get("content"), str):
            continue
        variables = _pick(raw, "extractedVariables", "extracted_variables") or {}
        instances.append(
            TemplateInstance(
                content=raw["content"],
                url=raw["url"],
                extracted_variables=(
                    {str(k): str(v) for k, v in variables.items()}
                    if isinstance(variables, dict)
                    else {}
                ),
            )
        )

    impact = _pick(entry, "businessImpact", "business_impact")
    return TemplatePattern(
        pattern=entry["pattern"],
        variables=[str(v) for v in entry["variables"]],
        instances=instances,
        business_impact=(
            impact if isinstance(impact, str) and impact in _IMPACT_BY_BUSINESS else "medium"
        ),
        recommendation=entry["recommendation"],
    )


def _parse_intent(entry: dict) -> IntentConflict:
    pages = []
    for raw in _pick(entry, "competingPages", "competing_pages"):
        if isinstance(raw, dict) and isinstance(raw.get("url"), str):
            match = _pick(raw, "intentMatch", "intent_match")
            pages.append(
                CompetingPage(
                    url=raw["url"],
                    content=str(raw.get("content") or ""),
                    intent_match=float(match) if _is_number(match) else 0.0,
                )
            )
    suggestion = _pick(entry, "consolidationSuggestion", "consolidation_suggestion")
    return IntentConflict(
        intent=entry["intent"],
        confidence=float(entry["confidence"]),
        competing_pages=pages,
        consolidation_suggestion=suggestion if isinstance(suggestion, str) else None,
    )


def _entries(data: Any, key: str) -> list:
    if not isinstance(data, dict):
        raise MalformedCompletionResponse(str(data)[:200], f"Expected an object with '{key}'")
    entries = data.get(key)
    return entries if isinstance(entries, list) else []


# =============================================================================
# Heuristics (used when the completion service is unavailable)
# =============================================================================


def detect_slot_templates(items: list[ContentItem]) -> list[TemplatePattern]:
    """Find items sharing every word but one, e.g. "plumbing services in [VARIABLE]".

    A pattern needs at least two distinct URLs and two distinct values in
    the variable slot. Each item joins at most one pattern, largest first.
    """
    buckets: dict[tuple, list[tuple[ContentItem, str]]] = {}
    for item in items:
        words = normalize_content(item.content).split()
        if len(words) < 2:
            continue
        for slot in range(len(words)):
            key = (len(words), slot, tuple(words[:slot]), tuple(words[slot + 1 :]))
            buckets.setdefault(key, []).append((item, words[slot]))

    patterns: list[TemplatePattern] = []
    assigned: set[int] = set()

    for key in sorted(buckets, key=lambda k: len(buckets[k]), reverse=True):
        members = [(item, value) for item, value in buckets[key] if id(item) not in assigned]
        if len({item.url for item, _ in members}) < 2:
            continue
        if len({value for _, value in members}) < 2:
            continue

        _, slot, before, after = key
        pattern = " ".join([*before, TEMPLATE_VARIABLE_MARKER, *after])
        count = len(members)
        patterns.append(
            TemplatePattern(
                pattern=pattern,
                variables=["VARIABLE"],
                instances=[
                    TemplateInstance(
                        content=item.content,
                        url=item.url,
                        extracted_variables={"VARIABLE": value},
                    )
                    for item, value in members
                ],
                business_impact="high" if count >= 5 else "medium" if count >= 3 else "low",
                recommendation=(
                    f'{count} pages share the pattern "{pattern}". Add content '
                    "specific to each variant beyond the swapped term."
                ),
            )
        )
        assigned.update(id(item) for item, _ in members)

    return patterns


def heuristic_categories(
    items: list[ContentItem], all_items: list[ContentItem]
) -> dict[str, ContentCategory]:
    """Label content that recurs on many distinct pages as boilerplate."""
    pages_by_text: dict[str, set[str]] = {}
    for item in all_items:
        pages_by_text.setdefault(normalize_content(item.content), set()).add(item.url)

    categories: dict[str, ContentCategory] = {}
    for item in items:
        page_count = len(pages_by_text.get(normalize_content(item.content), ()))
        if page_count >= BOILERPLATE_MIN_PAGES and item.content not in categories:
            categories[item.content] = ContentCategory(
                type="boilerplate",
                confidence=min(50 + page_count * 5, 90),
                reason=f"Repeated verbatim on {page_count} pages",
            )
    return categories


# =============================================================================
# Conversion to duplicate groups
# =============================================================================


def _unique_urls(urls: list[str]) -> list[str]:
    return list(dict.fromkeys(urls))


def templates_to_groups(patterns: list[TemplatePattern]) -> list[DuplicateGroup]:
    groups = []
    for pattern in patterns:
        urls = _unique_urls([inst.url for inst in pattern.instances])
        if len(urls) < 2:
            continue
        groups.append(
            DuplicateGroup(
                content=pattern.pattern,
                urls=urls,
                similarity_score=TEMPLATE_SIMILARITY_SCORE,
                impact_level=_IMPACT_BY_BUSINESS[pattern.business_impact],
                duplication_type="template",
                template_pattern=pattern.pattern,
                root_cause=f"Template pattern detected: {pattern.pattern}",
                improvement_strategy=pattern.recommendation.strip()
                or DEFAULT_IMPROVEMENT_STRATEGY,
            )
        )
    return groups


def intents_to_groups(
    conflicts: list[IntentConflict], options: SimilarityOptions
) -> list[DuplicateGroup]:
    groups = []
    for conflict in conflicts:
        urls = _unique_urls([page.url for page in conflict.competing_pages])
        if len(urls) < 2:
            continue
        confidence = conflict.confidence * 100 if conflict.confidence <= 1 else conflict.confidence
        groups.append(
            DuplicateGroup(
                content=conflict.intent,
                urls=urls,
                similarity_score=max(0, min(100, round(confidence))),
                impact_level=determine_impact_level(len(urls), options),
                duplication_type="intent",
                root_cause=f"Multiple pages target the same intent: {conflict.intent}",
                improvement_strategy=conflict.consolidation_suggestion
                or DEFAULT_IMPROVEMENT_STRATEGY,
            )
        )
    return groups


def exact_groups(
    items: list[ContentItem], options: SimilarityOptions
) -> list[DuplicateGroup]:
    clusters = [(members, 100) for members in find_exact_matches(items)]
    return [
        group.model_copy(
            update={
                "root_cause": EXACT_ROOT_CAUSE,
                "improvement_strategy": EXACT_IMPROVEMENT_STRATEGY,
            }
        )
        for group in build_groups(clusters, "exact", options)
    ]


def with_default_explanations(group: DuplicateGroup) -> DuplicateGroup:
    """Fill in a generic root cause / strategy where the source omitted one."""
    updates = {}
    if not (group.root_cause or "").strip():
        updates["root_cause"] = DEFAULT_ROOT_CAUSE
    if not (group.improvement_strategy or "").strip():
        updates["improvement_strategy"] = DEFAULT_IMPROVEMENT_STRATEGY
    return group.model_copy(update=updates) if updates else group


# =============================================================================
# Enhancer
# =============================================================================


class EnhancerOptions(BaseModel):
    batch_size: int = Field(default=AI_BATCH_SIZE, ge=1)
    call_delay_ms: int = Field(default=AI_CALL_DELAY_MS, ge=0)
    enable_template_detection: bool = True
    enable_content_categorization: bool = True
    enable_intent_analysis: bool = True
    max_template_batches: int = MAX_TEMPLATE_BATCHES
    max_category_batches: int = MAX_CATEGORY_BATCHES
    max_intent_batches: int = MAX_INTENT_BATCHES
    boilerplate_warning_ratio: float = BOILERPLATE_WARNING_RATIO
    similarity: SimilarityOptions = Field(default_factory=SimilarityOptions)


class AIEnhancedDetector:
    """Duplicate analysis enriched by a ``TextCompletionService``.

    With no completion service every analysis kind uses its heuristic.
    """

    def __init__(
        self,
        completion: Optional[TextCompletionService] = None,
        options: Optional[EnhancerOptions] = None,
    ) -> None:
        self.completion = completion
        self.options = options or EnhancerOptions()

    async def enhance(
        self, items: list[ContentItem], content_type: ContentType
    ) -> EnhancedAnalysisResult:
        if not items:
            return EnhancedAnalysisResult()

        opts = self.options
        logger.info(f"AI-enhanced analysis: processing {len(items)} {content_type} items")

        result = EnhancedAnalysisResult(total_analyzed=len(items))
        stats = EnhancerStats()
        fallbacks: set[str] = set()

        groups = exact_groups(items, opts.similarity)
        stats.exact_matches = len(groups)

        batches = create_analysis_batches(
            items,
            content_type,
            create_token_budget(calculate_content_stats(items)),
            BatchOptions(batch_size=min(opts.batch_size, MAX_PROMPT_ITEMS)),
        )
        ask = self._make_ask()

        if opts.enable_template_detection and len(items) >= MIN_ITEMS_FOR_TEMPLATES:
            result.template_patterns = await self._detect_templates(
                batches[: opts.max_template_batches], content_type, ask, fallbacks
            )
            template_groups = templates_to_groups(result.template_patterns)
            groups.extend(template_groups)
            stats.template_matches = len(template_groups)

        if opts.enable_content_categorization:
            result.content_categories = await self._categorize(
                batches[: opts.max_category_batches], items, content_type, ask, fallbacks
            )
            stats.boilerplate_content = sum(
                1 for c in result.content_categories.values() if c.type == "boilerplate"
            )

        if (
            opts.enable_intent_analysis
            and content_type in ("titles", "descriptions")
            and len(items) >= MIN_ITEMS_FOR_INTENT
        ):
            result.intent_conflicts = await self._detect_intents(
                batches[: opts.max_intent_batches], content_type, ask, fallbacks
            )
            groups.extend(intents_to_groups(result.intent_conflicts, opts.similarity))
            stats.intent_conflicts = len(result.intent_conflicts)

        result.duplicate_groups = [with_default_explanations(g) for g in groups]
        result.duplicate_count = sum(len(g.urls) - 1 for g in result.duplicate_groups)
        stats.fallbacks = sorted(fallbacks)
        result.stats = stats
        result.strategic_insights = generate_strategic_insights(
            result, content_type, opts.boilerplate_warning_ratio
        )

        logger.info(
            f"AI-enhanced analysis complete for {content_type}: "
            f"{len(result.duplicate_groups)} duplicate groups, "
            f"{len(result.template_patterns)} template patterns, "
            f"{len(result.intent_conflicts)} intent conflicts"
        )
        return result

    # ------------------------------------------------------------------
    # Completion calls
    # ------------------------------------------------------------------

    def _make_ask(self) -> Optional[AskFn]:
        if self.completion is None:
            return None
        completion = self.completion
        delay = self.options.call_delay_ms / 1000
        calls = 0

        async def ask(system_prompt: str, user_prompt: str, schema_hint: str) -> str:
            nonlocal calls
            if calls and delay > 0:
                await asyncio.sleep(delay)
            calls += 1
            return await completion.complete(system_prompt, user_prompt, schema_hint)

        return ask

    async def _request(
        self,
        ask: Optional[AskFn],
        system_prompt: str,
        user_prompt: str,
        schema_hint: str,
        key: str,
    ) -> Optional[list]:
        """Send one request; ``None`` means the caller should fall back."""
        if ask is None:
            return None
        try:
            raw = await ask(system_prompt, user_prompt, schema_hint)
            return _entries(parse_completion_json(raw), key)
        except CompletionServiceError as e:
            logger.warning(f"Completion failed for '{key}' batch, using heuristic: {e}")
        except MalformedCompletionResponse as e:
            logger.warning(f"Malformed '{key}' response, using heuristic: {e}")
        except Exception as e:
            logger.warning(
                f"Completion service raised {e.__class__.__name__} for '{key}' "
                f"batch, using heuristic: {e}"
            )
        return None

    async def _detect_templates(
        self,
        batches: list[AnalysisBatch],
        content_type: str,
        ask: Optional[AskFn],
        fallbacks: set[str],
    ) -> list[TemplatePattern]:
        patterns: list[TemplatePattern] = []
        for batch in batches:
            entries = await self._request(
                ask,
                TEMPLATE_SYSTEM_PROMPT.format(content_type=content_type),
                build_template_prompt(batch.items, content_type),
                TEMPLATE_SCHEMA_HINT,
                "patterns",
            )
            if entries is None:
                fallbacks.add("templates")
                patterns.extend(detect_slot_templates(batch.items))
                continue
            for entry in entries:
                if not is_valid_template(entry):
                    logger.debug(f"Rejected template entry: {entry!r}")
                    continue
                try:
                    patterns.append(_parse_template(entry))
                except _REJECTED_ENTRY_ERRORS as e:
                    logger.warning(f"Rejected template entry: {e}")
        return patterns

    async def _categorize(
        self,
        batches: list[AnalysisBatch],
        all_items: list[ContentItem],
        content_type: str,
        ask: Optional[AskFn],
        fallbacks: set[str],
    ) -> dict[str, ContentCategory]:
        categories: dict[str, ContentCategory] = {}
        for batch in batches:
            entries = await self._request(
                ask,
                CATEGORY_SYSTEM_PROMPT.format(content_type=content_type),
                build_category_prompt(batch.items, content_type),
                CATEGORY_SCHEMA_HINT,
                "categories",
            )
            if entries is None:
                fallbacks.add("categories")
                categories.update(heuristic_categories(batch.items, all_items))
                continue
            for entry in entries:
                if not is_valid_category(entry):
                    continue
                try:
                    categories[entry["content"]] = ContentCategory(
                        type=entry["type"],
                        confidence=float(entry["confidence"]),
                        reason=entry["reason"],
                    )
                except _REJECTED_ENTRY_ERRORS as e:
                    logger.warning(f"Rejected category entry: {e}")
        return categories

    async def _detect_intents(
        self,
        batches: list[AnalysisBatch],
        content_type: str,
        ask: Optional[AskFn],
        fallbacks: set[str],
    ) -> list[IntentConflict]:
        conflicts: list[IntentConflict] = []
        for batch in batches:
            entries = await self._request(
                ask,
                INTENT_SYSTEM_PROMPT.format(content_type=content_type),
                build_intent_prompt(batch.items, content_type),
                INTENT_SCHEMA_HINT,
                "conflicts",
            )
            if entries is None:
                # No local heuristic can judge search intent.
                fallbacks.add("intent")
                continue
            for entry in entries:
                if not is_valid_intent(entry):
                    continue
                try:
                    conflicts.append(_parse_intent(entry))
                except _REJECTED_ENTRY_ERRORS as e:
                    logger.warning(f"Rejected intent entry: {e}")
        return conflicts


def generate_strategic_insights(
    result: EnhancedAnalysisResult,
    content_type: str,
    boilerplate_warning_ratio: float = BOILERPLATE_WARNING_RATIO,
) -> list[str]:
    insights: list[str] = []

    if result.template_patterns:
        high_impact = sum(1 for p in result.template_patterns if p.business_impact == "high")
        if high_impact:
            insights.append(
                f"STRATEGIC: {high_impact} high-impact template patterns detected in "
                f"{content_type}. Over-templated content can hurt SEO rankings."
            )
        instances = sum(len(p.instances) for p in result.template_patterns)
        insights.append(
            f"INSIGHT: {instances} pages use template patterns. Consider "
            "differentiating content to improve unique value proposition."
        )

    if result.intent_conflicts:
        insights.append(
            f"COMPETITION: {len(result.intent_conflicts)} intent conflicts found. "
            "Multiple pages competing for same user searches can split rankings."
        )

    boilerplate = result.stats.boilerplate_content
    if boilerplate and result.total_analyzed:
        ratio = boilerplate / result.total_analyzed
        if ratio > boilerplate_warning_ratio:
            insights.append(
                f"WARNING: {round(ratio * 100)}% of {content_type} is boilerplate "
                "content. Focus on creating more unique value-driven content."
            )

    return insights
