"""Named constants for competitive gap analysis.

Margins and bonuses are empirically chosen; override them through
``GapThresholds`` rather than editing these values.
"""

import re

# ---------------------------------------------------------------------------
# Topic extraction
# ---------------------------------------------------------------------------
MAX_TOPICS_PER_PAGE = 5
MIN_TOPIC_LENGTH = 3
MAX_TOPIC_LENGTH = 30
MIN_PHRASE_WORD_LENGTH = 3  # Words shorter than this are dropped before shingling
MAX_CLUSTER_KEYWORDS = 10
TOPIC_HEADING_MAX_LEVEL = 2  # H1 and H2 only

STOP_WORD_PATTERNS = (
    re.compile(r"^(the|and|or|but|in|on|at|to|for|of|with|by)\s"),
    re.compile(r"\s(the|and|or|but|in|on|at|to|for|of|with|by)$"),
    re.compile(r"^(how|what|where|when|why|who)\s"),
)

# ---------------------------------------------------------------------------
# Topic strength (0-100)
# ---------------------------------------------------------------------------
STRENGTH_PER_PAGE = 10
MAX_PAGE_STRENGTH = 50
DEPTH_BONUSES = ((500, 30), (300, 20), (100, 10))  # (min avg words, bonus)
OPTIMIZED_RATIO_WEIGHT = 20

MISSING_TOPIC_MIN_STRENGTH = 30
MAX_MISSING_TOPICS = 10
TOPIC_DEDUP_SIMILARITY = 0.7

# ---------------------------------------------------------------------------
# Keyword gaps
# ---------------------------------------------------------------------------
MAX_PAGE_COUNT_SCORE = 6
PAGE_COUNT_SCORE_FACTOR = 2
IDEAL_DENSITY_RANGE = (0.5, 2.0)
IDEAL_DENSITY_BONUS = 3
ANY_DENSITY_BONUS = 1
ACTIVE_TARGETING_MIN_PAGES = 2
ACTIVE_TARGETING_MIN_DENSITY = 1.0
MAX_OPPORTUNITY = 10

HIGH_OPPORTUNITY_MIN = 7
MEDIUM_OPPORTUNITY_MIN = 4
OPPORTUNITY_KEYWORD_MIN = 6
MAX_OPPORTUNITY_KEYWORDS = 10
MAX_MISSING_KEYWORDS = 20
MAX_WEAK_KEYWORDS = 15

# ---------------------------------------------------------------------------
# Content volume
# ---------------------------------------------------------------------------
CONTENT_AREAS = {
    "blog": ("blog", "article", "post", "news"),
    "product": ("product", "item", "buy", "shop"),
    "service": ("service", "offering", "solution"),
    "support": ("support", "help", "faq", "contact"),
    "about": ("about", "team", "company", "history"),
    "resource": ("resource", "download", "tool", "template"),
    "guide": ("guide", "tutorial", "how-to", "step"),
    "case-study": ("case", "study", "example", "success"),
}
HIGH_VOLUME_GAP = 5
MEDIUM_VOLUME_GAP = 2

# ---------------------------------------------------------------------------
# Under-optimized areas (competitor must beat main by these margins)
# ---------------------------------------------------------------------------
WORD_COUNT_RATIO = 1.5
ALT_TEXT_MARGIN = 20  # percentage points
INTERNAL_LINKS_RATIO = 1.5
HEADING_USAGE_MARGIN = 15  # percentage points

AREA_CONTENT_DEPTH = "content depth and comprehensive coverage"
AREA_IMAGE_ALT = "image optimization and alt text usage"
AREA_INTERNAL_LINKING = "internal linking strategy"
AREA_HEADINGS = "heading structure and hierarchy"

# ---------------------------------------------------------------------------
# Site metrics (share of pages meeting each on-page rule, 0-100)
# ---------------------------------------------------------------------------
OPTIMAL_TITLE_LENGTH = (30, 60)
OPTIMAL_DESCRIPTION_LENGTH = (120, 160)
MIN_HEADINGS_FOR_STRUCTURE = 3
MIN_ALT_TEXT_RATIO = 0.8
MIN_INTERNAL_LINKS = 2
SUBSTANTIAL_WORD_COUNT = 300

# Partial credit in the content quality score
NEAR_OPTIMAL_CREDIT = 0.5
THIN_CONTENT_CREDIT = 0.3

# ---------------------------------------------------------------------------
# Metric comparison
# ---------------------------------------------------------------------------
ADVANTAGE_MARGIN = 2  # points either side of equal count as neutral
CRITICAL_PERCENT_DIFF = 30
CRITICAL_ABSOLUTE_DIFF = 10
IMPORTANT_PERCENT_DIFF = 15
IMPORTANT_ABSOLUTE_DIFF = 5

# Metrics where a lower value is better
LOWER_IS_BETTER_METRICS = frozenset({"critical_issues"})

# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------
CRITICAL_GAP_IMPACT = 8
CONTENT_GAP_IMPACT = 7
MIN_MISSING_TOPICS_FOR_INSIGHT = 3
MAX_TOPICS_IN_EVIDENCE = 5
TRAFFIC_PER_TOPIC = 150
TRAFFIC_TOPIC_FACTOR = 0.7

QUICK_WIN_METRICS = ("images_optimization", "description_optimization")
QUICK_WIN_MIN_IMPACT = 7
MAX_QUICK_WINS = 3
MAX_LONG_TERM_OPPORTUNITIES = 5
MAX_PROMPT_KEYWORDS = 10

EASY_METRICS = frozenset({"images_optimization", "description_optimization"})
HARD_METRICS = frozenset({"content_quality"})

PRIORITY_RANK = {"high": 3, "medium": 2, "low": 1}

METRIC_CATEGORIES = {
    "title_optimization": "content-optimization",
    "description_optimization": "content-optimization",
    "headings_optimization": "content-optimization",
    "images_optimization": "technical-seo",
    "critical_issues": "technical-seo",
    "content_quality": "content-gaps",
}

METRIC_ACTION_ITEMS = {
    "title_optimization": [
        "Audit all page titles for length and keyword optimization",
        "Rewrite titles to include primary keywords in first 60 characters",
        "Ensure each page has unique, descriptive titles",
    ],
    "description_optimization": [
        "Write compelling meta descriptions for all pages",
        "Include relevant keywords naturally in descriptions",
        "Keep descriptions between 120-160 characters",
    ],
    "headings_optimization": [
        "Establish clear heading hierarchy on all pages",
        "Include target keywords in H1 and H2 tags",
        "Ensure only one H1 per page",
    ],
    "images_optimization": [
        "Add descriptive alt text to all images",
        "Optimize image file names with relevant keywords",
        "Compress images for faster loading",
    ],
    "critical_issues": [
        "Add a title, meta description and a single H1 to every page",
        "Re-crawl after fixes to confirm no page is missing core tags",
    ],
    "content_quality": [
        "Enhance content depth, readability, and value proposition",
    ],
}
DEFAULT_ACTION_ITEMS = ["Analyze competitor approach and implement best practices"]

CONTENT_GAP_ACTION_ITEMS = [
    "Conduct detailed topic research for missing areas",
    "Create content calendar for new topic coverage",
    "Develop comprehensive content for top 3 missing topics first",
]
