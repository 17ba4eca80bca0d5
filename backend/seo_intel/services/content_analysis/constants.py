"""Named constants for the content analysis package.

The impact thresholds and weights are empirically chosen; callers override
them through the option objects rather than editing these values.
"""

# ---------------------------------------------------------------------------
# Similarity detection
# ---------------------------------------------------------------------------
MIN_CONTENT_LENGTH = 10  # Items shorter than this are ignored
FUZZY_MATCH_THRESHOLD = 85  # Tier 2 minimum combined score (0-100)
SEMANTIC_MATCH_THRESHOLD = 75  # Tier 3 minimum combined score (0-100)
MIN_SIGNIFICANT_WORD_LENGTH = 3  # Jaccard / keyphrase words must be longer than 2
MAX_EXAMPLES = 5

# Tier 2 weights (sum to 1.0)
FUZZY_WEIGHT_LEVENSHTEIN = 0.5
FUZZY_WEIGHT_JACCARD = 0.3
FUZZY_WEIGHT_LENGTH = 0.2

# Tier 3 weights (sum to 1.0)
SEMANTIC_WEIGHT_JACCARD = 0.4
SEMANTIC_WEIGHT_STRUCTURE = 0.2
SEMANTIC_WEIGHT_KEYPHRASE = 0.4

# ---------------------------------------------------------------------------
# Impact levels (group size thresholds)
# ---------------------------------------------------------------------------
CRITICAL_IMPACT_MIN_PAGES = 10
HIGH_IMPACT_MIN_PAGES = 5
MEDIUM_IMPACT_MIN_PAGES = 3

# ---------------------------------------------------------------------------
# Token budgeting
# ---------------------------------------------------------------------------
CHARS_PER_TOKEN = 4
TOKEN_ESTIMATE_BUFFER = 0.2  # Safety margin added on top of chars/4
MAX_INPUT_TOKENS_BY_COMPLEXITY = {"high": 6_000, "medium": 4_000, "low": 2_000}
MAX_OUTPUT_TOKENS = 2_000
RESERVED_TOKENS = 500  # Room for the system prompt and instructions
DEFAULT_BATCH_SIZE = 15  # Max items per batch regardless of tokens

# Content type weights for prioritization
CONTENT_TYPE_WEIGHTS = {
    "titles": 100,
    "descriptions": 80,
    "headings": 60,
    "paragraphs": 40,
}
HOME_PAGE_BOOST = 20
ABOUT_CONTACT_BOOST = 10
RECURRING_CONTENT_BOOST = 15

# ---------------------------------------------------------------------------
# Preprocessing
# ---------------------------------------------------------------------------
MAX_ITEM_LENGTH = 500  # Sanitized ContentItem upper bound (characters)
HIGH_COMPLEXITY_ITEMS = 50
HIGH_COMPLEXITY_TOKENS = 5_000
MEDIUM_COMPLEXITY_ITEMS = 20
MEDIUM_COMPLEXITY_TOKENS = 2_000

# ---------------------------------------------------------------------------
# AI enhancement
# ---------------------------------------------------------------------------
AI_BATCH_SIZE = 20
AI_TEMPERATURE = 0.2
AI_MAX_OUTPUT_TOKENS = 3_000
AI_CALL_DELAY_MS = 100  # Pause between sequential completion calls
MAX_TEMPLATE_BATCHES = 2
MAX_CATEGORY_BATCHES = 2
MAX_INTENT_BATCHES = 1
MIN_ITEMS_FOR_TEMPLATES = 3
MIN_ITEMS_FOR_INTENT = 3
MAX_PROMPT_ITEMS = 15
MAX_PROMPT_ITEM_LENGTH = 200
TEMPLATE_SIMILARITY_SCORE = 85
INTENT_SIMILARITY_SCORE = 80
BOILERPLATE_MIN_PAGES = 3  # Heuristic: content on this many pages is boilerplate
BOILERPLATE_WARNING_RATIO = 0.3

VALID_CATEGORY_TYPES = frozenset({"boilerplate", "navigation", "value", "cta", "template"})

DEFAULT_ROOT_CAUSE = "Similar content detected across multiple pages"
DEFAULT_IMPROVEMENT_STRATEGY = (
    "Differentiate this content for each page to target distinct queries"
)
EXACT_ROOT_CAUSE = "Identical content found on multiple pages"
EXACT_IMPROVEMENT_STRATEGY = (
    "Create unique content for each page targeting different aspects or keywords"
)
TEMPLATE_VARIABLE_MARKER = "[VARIABLE]"

# ---------------------------------------------------------------------------
# Rule-based recommendations
# ---------------------------------------------------------------------------
RECOMMENDATIONS = {
    "titles": [
        "Create unique, descriptive titles for each page",
        "Include target keywords naturally in titles",
        "Keep titles under 60 characters for better display",
    ],
    "descriptions": [
        "Write unique meta descriptions for each page",
        "Include relevant keywords and compelling calls-to-action",
        "Keep descriptions between 150-160 characters",
    ],
    "headings": [
        "Give every page a unique, descriptive H1",
        "Avoid generic headings like \"Welcome\" or \"About\"",
        "Keep a logical heading hierarchy with keyword-relevant subheadings",
    ],
    "paragraphs": [
        "Rewrite paragraphs that repeat across pages so each page adds unique value",
        "Consolidate shared boilerplate text instead of repeating it on every page",
    ],
}
UNIQUE_CONTENT_MESSAGES = {
    "titles": "Titles appear to be unique across pages",
    "descriptions": "Meta descriptions appear to be unique across pages",
    "headings": "Headings appear to be unique across pages",
    "paragraphs": "Paragraph content appears to be unique across pages",
}
OVERALL_RECOMMENDATIONS = [
    "Review content for uniqueness across all pages",
    "Develop distinct value propositions for each page",
]
