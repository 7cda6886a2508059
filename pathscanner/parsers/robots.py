"""robots.txt parsing and path matching."""

import math
from typing import Dict, Optional
from urllib.parse import urljoin, urlsplit

import httpx

from pathscanner.core.models import RobotsDirective, USER_AGENT


class RobotsParser:
    """
    Turns robots.txt text into a RobotsDirective and answers allow checks.

    Fetch failures never block a scan: anything other than a usable 2xx
    response yields the permissive directive.
    """

    def __init__(self, client: Optional[httpx.Client] = None, logger=None):
        self.client = client or httpx.Client(
            follow_redirects=True, headers={"User-Agent": USER_AGENT})
        self.logger = logger

    def parse(self, text: str) -> RobotsDirective:
        blocks: Dict[str, RobotsDirective] = {}
        sitemaps = []
        current: Optional[RobotsDirective] = None

        for raw in (text or "").splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or ":" not in line:
                continue
            key, value = line.split(":", 1)
            key = key.strip().lower()
            value = value.strip()
            if not value:
                continue

            if key == "user-agent":
                current = blocks.setdefault(value, RobotsDirective(user_agent=value))
            elif key == "sitemap":
                if value not in sitemaps:
                    sitemaps.append(value)
            elif key in ("disallow", "allow", "crawl-delay"):
                if current is None:
                    current = blocks.setdefault("*", RobotsDirective(user_agent="*"))
                if key == "disallow":
                    current.disallow.append(value)
                elif key == "allow":
                    current.allow.append(value)
                else:
                    delay = _parse_delay(value)
                    if delay is not None:
                        current.crawl_delay_seconds = delay

        for block in blocks.values():
            block.sitemap_urls = list(sitemaps)

        if "*" in blocks:
            return blocks["*"]
        if blocks:
            return next(iter(blocks.values()))
        directive = RobotsDirective.permissive()
        directive.sitemap_urls = list(sitemaps)
        return directive

    def fetch_and_parse(self, base_url: str, timeout_ms: int = 10000) -> RobotsDirective:
        url = urljoin(base_url, "/robots.txt")
        try:
            resp = self.client.get(url, timeout=timeout_ms / 1000.0)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            if self.logger:
                self.logger.warn(f"robots.txt fetch failed: {url} — {exc}")
            return RobotsDirective.permissive()

        if resp.status_code == 404:
            if self.logger:
                self.logger.debug(f"No robots.txt at {url}")
            return RobotsDirective.permissive()
        if not resp.is_success:
            if self.logger:
                self.logger.warn(f"robots.txt returned HTTP {resp.status_code}, ignoring it")
            return RobotsDirective.permissive()

        return self.parse(resp.text)

    def is_allowed(self, path: str, directive: RobotsDirective) -> bool:
        # Allow is checked before Disallow; first match wins in each list.
        for pattern in directive.allow:
            if _matches(path, pattern):
                return True
        for pattern in directive.disallow:
            if _matches(path, pattern):
                return False
        return True

    def is_url_allowed(self, url: str, directive: RobotsDirective) -> bool:
        return self.is_allowed(urlsplit(url).path or "/", directive)


def _matches(path: str, pattern: str) -> bool:
    if pattern == "/":
        return True
    if pattern == "":
        return False
    if pattern.endswith("*"):
        return path.startswith(pattern[:-1])
    return path.startswith(pattern)


def _parse_delay(value: str) -> Optional[float]:
    try:
        delay = float(value)
    except ValueError:
        return None
    if not math.isfinite(delay) or delay < 0:
        return None
    return delay
