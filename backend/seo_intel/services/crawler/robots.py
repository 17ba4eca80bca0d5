"""robots.txt fetching and parsing.

Pre-crawl step that collects the disallow rules applying to this crawler
(``User-agent: *`` or our own agent token) plus any advertised sitemaps.
No LLM calls, only HTTP and parsing.
"""

import logging

import httpx

from seo_intel.errors import RobotsParseError
from seo_intel.models.crawl import RobotsRules
from seo_intel.services.crawler.constants import AGENT_TOKEN, ROBOTS_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def _agent_applies(agent: str, agent_token: str) -> bool:
    agent = agent.strip().lower()
    return agent == "*" or agent_token in agent


def parse_robots_txt(text: str, agent_token: str = AGENT_TOKEN) -> RobotsRules:
    """Parse robots.txt content into the rules that apply to *agent_token*.

    Consecutive ``User-agent`` lines form one group; a group applies if any
    of its agents is ``*`` or contains our token. ``Allow`` for an exact path
    in an applicable group removes a previously collected ``Disallow`` of
    that path. A blank line ends the current group.
    """
    disallowed: set[str] = set()
    sitemaps: list[str] = []

    group_applies = False
    in_agent_lines = False

    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line:
            if not raw_line.strip():
                group_applies = False
                in_agent_lines = False
            continue

        if ":" not in line:
            continue
        field, value = line.split(":", 1)
        field = field.strip().lower()
        value = value.strip()

        if field == "user-agent":
            applies = _agent_applies(value, agent_token)
            group_applies = (group_applies or applies) if in_agent_lines else applies
            in_agent_lines = True
            continue

        in_agent_lines = False

        if field == "sitemap":
            if value:
                sitemaps.append(value)
        elif field == "disallow" and group_applies:
            if value:
                disallowed.add(value)
        elif field == "allow" and group_applies:
            if value:
                disallowed.discard(value)

    return RobotsRules(disallowed_paths=disallowed, sitemaps=sitemaps)


async def _fetch_robots_txt(client: httpx.AsyncClient, root_url: str) -> str:
    robots_url = root_url.rstrip("/") + "/robots.txt"
    try:
        resp = await client.get(robots_url, timeout=ROBOTS_TIMEOUT_SECONDS)
    except httpx.HTTPError as e:
        raise RobotsParseError(f"Could not fetch {robots_url}: {e}") from e
    if resp.status_code != 200:
        raise RobotsParseError(f"{robots_url} returned HTTP {resp.status_code}")
    return resp.text


async def fetch_robots_rules(
    client: httpx.AsyncClient, root_url: str, agent_token: str = AGENT_TOKEN
) -> RobotsRules:
    """Fetch and parse robots.txt for the site at *root_url*.

    Any failure yields an empty (permissive) rule set.
    """
    try:
        text = await _fetch_robots_txt(client, root_url)
        return parse_robots_txt(text, agent_token)
    except RobotsParseError as e:
        logger.info(f"No usable robots.txt for {root_url}, crawling permissively: {e}")
        return RobotsRules()
