"""URL canonicalization, crawl priority, and robots path matching.

Two URLs that normalize to the same string are the same crawl unit.
"""

import re
from typing import Iterable, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

from seo_intel.services.crawler.constants import (
    BASE_PRIORITY,
    DEFAULT_PORTS,
    DEPTH_PENALTY,
    HIGH_VALUE_BONUS,
    HIGH_VALUE_PATH_RE,
    MAX_PRIORITY,
    MIN_PRIORITY,
    QUERY_PARAM_PENALTY,
    ROOT_BONUS,
    SKIPPED_LINK_PREFIXES,
    TRACKING_PARAM_PREFIX,
    TRACKING_PARAMS,
)

_HTTP_SCHEMES = ("http", "https")


def _is_tracking_param(key: str) -> bool:
    return key in TRACKING_PARAMS or key.startswith(TRACKING_PARAM_PREFIX)


def normalize_host(host: str) -> str:
    """Lowercase *host* and strip any leading ``www.`` labels."""
    host = host.lower()
    while host.startswith("www.") and len(host) > 4:
        host = host[4:]
    return host


def normalize_url(url: str) -> str:
    """
    Canonicalize an http(s) URL. Idempotent.

    - drops the fragment
    - strips a leading ``www.`` from the host
    - drops default ports (80 for http, 443 for https)
    - removes tracking query parameters (``utm_*``, fbclid, gclid, _ga)
    - drops a trailing slash from any non-root path

    Non-http(s) or unparseable URLs are returned unchanged.
    """
    try:
        parsed = urlparse(url.strip())
        port = parsed.port
    except ValueError:
        return url

    scheme = parsed.scheme.lower()
    if scheme not in _HTTP_SCHEMES or not parsed.hostname:
        return url

    host = normalize_host(parsed.hostname)
    if ":" in host:  # IPv6 literal
        host = f"[{host}]"
    netloc = host if port is None or DEFAULT_PORTS[scheme] == port else f"{host}:{port}"

    path = parsed.path or "/"
    if len(path) > 1:
        path = path.rstrip("/") or "/"

    query = parsed.query
    if query:
        pairs = parse_qsl(query, keep_blank_values=True)
        kept = [(k, v) for k, v in pairs if not _is_tracking_param(k)]
        if len(kept) != len(pairs):
            query = urlencode(kept)

    return urlunparse((scheme, netloc, path, parsed.params, query, ""))


def url_host(url: str) -> str:
    """Normalized host of *url* (empty string if it has none)."""
    try:
        return normalize_host(urlparse(url).hostname or "")
    except ValueError:
        return ""


def site_root(url: str) -> str:
    """Scheme + host root of *url*, normalized."""
    parsed = urlparse(url)
    return normalize_url(f"{parsed.scheme}://{parsed.netloc}/")


def resolve_link(href: Optional[str], page_url: str) -> Optional[str]:
    """Resolve an ``<a href>`` against *page_url* and normalize it.

    Returns ``None`` for empty, fragment, javascript, mailto, tel, and
    non-http(s) links.
    """
    if not href:
        return None
    href = href.strip()
    if not href or href.lower().startswith(SKIPPED_LINK_PREFIXES):
        return None
    try:
        absolute = urljoin(page_url, href)
    except ValueError:
        return None
    if urlparse(absolute).scheme.lower() not in _HTTP_SCHEMES:
        return None
    normalized = normalize_url(absolute)
    if not normalized.startswith(("http://", "https://")):
        return None
    return normalized


def calculate_url_priority(url: str) -> int:
    """Crawl priority for a discovered URL (higher = more important).

    Base 10, -2 per path segment, +10 for the root, +5 for high-value
    sections (about/contact/services/...), -1 per query parameter,
    clamped to [1, 20].
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return MIN_PRIORITY

    path = parsed.path or "/"
    priority = BASE_PRIORITY
    segments = [s for s in path.split("/") if s]
    priority -= len(segments) * DEPTH_PENALTY

    if path == "/":
        priority += ROOT_BONUS

    if HIGH_VALUE_PATH_RE.search(path):
        priority += HIGH_VALUE_BONUS

    priority -= len(parse_qsl(parsed.query, keep_blank_values=True)) * QUERY_PARAM_PENALTY

    return max(MIN_PRIORITY, min(MAX_PRIORITY, priority))


def _wildcard_to_regex(rule: str) -> re.Pattern:
    anchored = rule.endswith("$")
    body = rule[:-1] if anchored else rule
    pattern = ".*".join(re.escape(part) for part in body.split("*"))
    return re.compile(f"^{pattern}{'$' if anchored else ''}")


def is_url_allowed(url: str, disallowed_paths: Iterable[str]) -> bool:
    """Check *url*'s path against robots.txt disallow rules.

    Plain rules match the exact path or anything below it as a directory;
    rules containing ``*`` or ending in ``$`` use robots wildcard matching.
    """
    path = urlparse(url).path or "/"

    for rule in disallowed_paths:
        if "*" in rule or rule.endswith("$"):
            if _wildcard_to_regex(rule).match(path):
                return False
            continue
        directory = rule if rule.endswith("/") else f"{rule}/"
        if path == rule or path.startswith(directory):
            return False

    return True
