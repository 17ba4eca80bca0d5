"""Tests for seo_intel.services.content_analysis.token_budget."""

from seo_intel.models.content import ContentItem, ContentStats, TokenBudget
from seo_intel.services.content_analysis.token_budget import (
    BatchOptions,
    create_analysis_batches,
    create_token_budget,
    estimate_tokens,
    prioritize_content,
    sanitize_for_prompt,
)


def _item(content: str, url: str = "https://example.com/page") -> ContentItem:
    return ContentItem(content=content, url=url)


class TestEstimateTokens:
    def test_chars_over_four_plus_buffer(self):
        # 40 chars -> 10 tokens + 20% buffer
        assert estimate_tokens("a" * 40) == 12

    def test_rounds_up(self):
        assert estimate_tokens("abcde") == 3

    def test_empty(self):
        assert estimate_tokens("") == 0


class TestCreateTokenBudget:
    def test_tiers(self):
        assert create_token_budget("low").max_input_tokens == 2000
        assert create_token_budget("medium").max_input_tokens == 4000
        assert create_token_budget("high").max_input_tokens == 6000

    def test_available_excludes_reserved(self):
        budget = create_token_budget("low", reserved_tokens=300)
        assert budget.available_tokens == 1700

    def test_accepts_content_stats(self):
        budget = create_token_budget(ContentStats(complexity="high"))
        assert budget.available_tokens == 5500


class TestPrioritizeContent:
    def test_home_and_recurring_first(self):
        items = [
            _item("Deep article", "https://example.com/blog/deep"),
            _item("Contact us today", "https://example.com/contact"),
            _item("Welcome home", "https://example.com/"),
        ]
        ordered = prioritize_content(items, "titles")
        assert [i.content for i in ordered] == [
            "Welcome home",
            "Contact us today",
            "Deep article",
        ]

    def test_recurring_content_boosted(self):
        items = [
            _item("Unique one", "https://example.com/a"),
            _item("Shared text", "https://example.com/b"),
            _item("shared TEXT", "https://example.com/c"),
        ]
        ordered = prioritize_content(items, "headings")
        assert [i.url for i in ordered] == [
            "https://example.com/b",
            "https://example.com/c",
            "https://example.com/a",
        ]


class TestCreateAnalysisBatches:
    def test_force_closes_at_batch_size(self):
        items = [_item(f"Item number {i}") for i in range(40)]
        batches = create_analysis_batches(
            items, "titles", create_token_budget("high"), BatchOptions(batch_size=15)
        )
        assert [len(b.items) for b in batches] == [15, 15, 10]
        assert [b.priority for b in batches] == [1, 2, 3]
        assert all(b.content_type == "titles" for b in batches)

    def test_every_item_lands_in_exactly_one_batch(self):
        items = [_item(f"Paragraph {i} " + "text " * (i % 7) * 20) for i in range(30)]
        batches = create_analysis_batches(items, "paragraphs", create_token_budget("low"))
        batched = [item for b in batches for item in b.items]
        assert len(batched) == len(items)
        assert {id(i) for i in batched} == {id(i) for i in items}

    def test_batches_stay_within_budget(self):
        items = [_item("word " * 50) for _ in range(20)]
        budget = create_token_budget("low")
        batches = create_analysis_batches(items, "paragraphs", budget)
        assert len(batches) > 1
        assert all(b.estimated_tokens <= budget.available_tokens for b in batches)

    def test_oversized_item_gets_its_own_batch(self):
        budget = TokenBudget(
            max_input_tokens=100, max_output_tokens=10, reserved_tokens=50, available_tokens=50
        )
        small, big = _item("short item text"), _item("x" * 400)
        batches = create_analysis_batches(
            [small, big, small],
            "paragraphs",
            budget,
            BatchOptions(prioritize_by_impact=False),
        )
        assert [len(b.items) for b in batches] == [1, 1, 1]
        assert batches[1].items[0].content == "x" * 400
        assert batches[1].estimated_tokens == 120

    def test_empty_input(self):
        assert create_analysis_batches([], "titles", create_token_budget()) == []


class TestSanitizeForPrompt:
    def test_escapes_quotes_and_newlines(self):
        assert sanitize_for_prompt('Say "hi"\nnow') == 'Say \\"hi\\"\\nnow'

    def test_truncates(self):
        assert len(sanitize_for_prompt("a" * 500)) == 200
