"""Crawler — same-origin link discovery using stdlib html.parser."""

from html.parser import HTMLParser
from typing import List, Optional, Set, Tuple
from urllib.parse import urldefrag, urljoin, urlsplit

import httpx

from pathscanner.core.models import URLRecord, URLSource
from pathscanner.core.ratelimit import RateLimiter


_DEFAULT_PORTS = {"http": 80, "https": 443}


# ── HTML parsers ───────────────────────────────────────────────

class _LinkExtractor(HTMLParser):
    """Extract <a href> links from HTML."""

    def __init__(self):
        super().__init__()
        self.links: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag == "a":
            for name, value in attrs:
                if name == "href" and value:
                    self.links.append(value.strip())


# ── Helper functions ───────────────────────────────────────────

def extract_links(html: str, base_url: str) -> List[str]:
    """
    Extract <a href> targets from HTML as absolute, fragment-free URLs,
    deduplicated in document order.
    """
    parser = _LinkExtractor()
    parser.feed(html)
    parser.close()

    links: List[str] = []
    seen: Set[str] = set()
    for href in parser.links:
        try:
            absolute, _ = urldefrag(urljoin(base_url, href))
        except ValueError:
            continue
        if absolute and absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


def origin_of(url: str) -> Optional[Tuple[str, str, int]]:
    """(scheme, host, port) for http(s) URLs, else None."""
    try:
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        port = parts.port or _DEFAULT_PORTS.get(scheme)
    except ValueError:
        return None
    if scheme not in _DEFAULT_PORTS or not parts.hostname:
        return None
    return scheme, parts.hostname.lower(), port


def is_same_origin(base_url: str, target_url: str) -> bool:
    """Check if target_url is same-origin as base_url."""
    base = origin_of(base_url)
    return base is not None and base == origin_of(target_url)


# ── Crawler class ──────────────────────────────────────────────

class LinkCrawler:
    """
    Visit-once link crawler for a single origin.

    Usage:
        crawler = LinkCrawler("http://example.com/", client, RateLimiter(2))
        found = crawler.crawl("http://example.com/", 0, 2)

    The visited set belongs to this instance; fetch failures are counted in
    ``errors`` and never raised.
    """

    def __init__(self, base_url: str, client: httpx.Client,
                 rate_limiter: RateLimiter, timeout_ms: int = 10000, logger=None):
        if origin_of(base_url) is None:
            raise ValueError(f"Invalid base URL: {base_url}")
        self.base_url = base_url
        self.client = client
        self.rate_limiter = rate_limiter
        self.timeout_ms = timeout_ms
        self.logger = logger
        self.errors = 0
        self._visited: Set[str] = set()

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def update_rate_limit(self, crawl_delay_seconds: float) -> None:
        """Honor a robots.txt Crawl-delay (only ever slows down)."""
        self.rate_limiter.tighten_interval(crawl_delay_seconds * 1000.0)

    def crawl(self, url: str, current_depth: int, max_depth: int) -> List[URLRecord]:
        """Fetch *url* and return the same-origin pages it links to."""
        if current_depth >= max_depth or url in self._visited:
            return []
        self._visited.add(url)

        self.rate_limiter.wait()
        if self.logger:
            self.logger.debug(f"Visiting [{current_depth}] {url}")

        html = self._fetch(url)
        if html is None:
            return []

        try:
            links = extract_links(html, url)
        except Exception as exc:
            self._failed(url, f"HTML parse error ({type(exc).__name__}: {exc})")
            return []

        found = []
        for link in links:
            if link in self._visited or not is_same_origin(self.base_url, link):
                continue
            found.append(URLRecord(url=link, source=URLSource.CRAWL,
                                   depth=current_depth + 1))
        return found

    # ── Internal helpers ───────────────────────────────────────

    def _fetch(self, url: str) -> Optional[str]:
        """GET a URL and return its HTML body, or None on error."""
        try:
            resp = self.client.get(url, follow_redirects=True,
                                   headers={"Accept": "text/html"},
                                   timeout=self.timeout_ms / 1000.0)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._failed(url, str(exc) or type(exc).__name__)
            return None

        if not resp.is_success:
            self._failed(url, f"HTTP {resp.status_code}")
            return None
        ctype = resp.headers.get("content-type", "").lower()
        if "text/html" not in ctype:
            self._failed(url, f"not HTML ({ctype or 'no content-type'})")
            return None
        return resp.text

    def _failed(self, url: str, reason: str) -> None:
        self.errors += 1
        if self.logger:
            self.logger.warn(f"Crawl failed: {url} — {reason}")
