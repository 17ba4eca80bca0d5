"""Named constants for the crawler package.

Centralizes all magic numbers so they can be tuned from one place.
"""

import re

# ---------------------------------------------------------------------------
# Crawl behaviour
# ---------------------------------------------------------------------------
CONCURRENT_CRAWL_LIMIT = 3  # Pages fetched together per batch
DEFAULT_MAX_PAGES = 20
DEFAULT_DELAY_MS = 500  # Sleep between batches
PAGE_TIMEOUT_SECONDS = 10.0
ROBOTS_TIMEOUT_SECONDS = 5.0
MAX_REDIRECTS = 5
USER_AGENT = "SEO-Optimizer-Bot/1.0 (+https://seooptimizer.com/bot)"
AGENT_TOKEN = "seo-optimizer-bot"  # Matched against robots.txt User-agent lines

# ---------------------------------------------------------------------------
# URL priority
# ---------------------------------------------------------------------------
BASE_PRIORITY = 10
DEPTH_PENALTY = 2  # Per path segment
ROOT_BONUS = 10
HIGH_VALUE_BONUS = 5
QUERY_PARAM_PENALTY = 1  # Per query parameter
MIN_PRIORITY = 1
MAX_PRIORITY = 20
ROOT_SEED_PRIORITY = 25  # Seeds sit above the normal range to go first
START_URL_SEED_PRIORITY = 20
HIGH_VALUE_PATH_RE = re.compile(
    r"/(about|contact|services|products|blog|faq)($|/)", re.IGNORECASE
)

# ---------------------------------------------------------------------------
# URL normalization
# ---------------------------------------------------------------------------
TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "fbclid",
        "gclid",
        "_ga",
    }
)
TRACKING_PARAM_PREFIX = "utm_"
DEFAULT_PORTS = {"http": 80, "https": 443}
SKIPPED_LINK_PREFIXES = ("javascript:", "#", "mailto:", "tel:")

# ---------------------------------------------------------------------------
# Page extraction
# ---------------------------------------------------------------------------
MAX_PARAGRAPHS_PER_PAGE = 10
MIN_PARAGRAPH_LENGTH = 30  # Characters, shorter paragraphs are skipped
MAX_PARAGRAPH_LENGTH = 300
RAW_TEXT_SAMPLE_LENGTH = 1_000
KEYWORD_MIN_WORD_LENGTH = 4
KEYWORD_MIN_COUNT = 3
MAX_KEYWORDS_PER_PAGE = 20

# ---------------------------------------------------------------------------
# Sitemaps
# ---------------------------------------------------------------------------
MAX_SITEMAP_URLS = 100
MAX_CHILD_SITEMAPS = 5
