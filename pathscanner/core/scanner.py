"""PathScanner — one bounded scan of a single origin."""

import time
from collections import deque
from dataclasses import replace
from typing import Deque, Dict, List, Optional
from urllib.parse import urljoin, urlsplit

import httpx

from pathscanner.core.crawler import LinkCrawler
from pathscanner.core.forms import FormExtractor
from pathscanner.core.models import (
    CrawlStats, FormRecord, RobotsDirective, ScanResult, ScanSummary,
    ScannerConfig, URLRecord, URLSource,
)
from pathscanner.core.normalizer import URLNormalizer
from pathscanner.core.ratelimit import RateLimiter
from pathscanner.parsers.robots import RobotsParser
from pathscanner.parsers.sitemap import SitemapParser

MAX_SITEMAP_INDEX_DEPTH = 2
MAX_SITEMAP_FETCHES = 20


class InvalidTargetError(ValueError):
    """The target URL cannot be scanned."""


def validate_target(url: str) -> None:
    try:
        parts = urlsplit((url or "").strip())
        host = parts.hostname
        parts.port  # raises ValueError when out of range
    except ValueError:
        raise InvalidTargetError(f"Invalid target URL: {url}") from None
    if parts.scheme.lower() not in ("http", "https") or not host:
        raise InvalidTargetError(f"Invalid target URL: {url}")


class PathScanner:
    """
    Runs robots → sitemaps → crawl → form extraction → ranking, in order.

    Usage:
        with PathScanner(ScannerConfig(max_depth=1), logger=log) as scanner:
            result = scanner.scan("https://example.com/")
    """

    def __init__(self, config: Optional[ScannerConfig] = None,
                 client: Optional[httpx.Client] = None, logger=None):
        self.config = config or ScannerConfig()
        self.logger = logger
        self._owns_client = client is None
        self.client = client or httpx.Client(
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.timeout_ms / 1000.0,
        )
        self.robots_parser = RobotsParser(self.client, logger)
        self.sitemap_parser = SitemapParser(self.client, logger)
        self.form_extractor = FormExtractor()
        self.normalizer = URLNormalizer()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # ── Public API ─────────────────────────────────────────────

    def scan(self, target_url: str) -> ScanResult:
        validate_target(target_url)
        target_url = target_url.strip()
        started = time.monotonic()
        cfg = self.config

        stats = CrawlStats()
        records: List[URLRecord] = []
        index: Dict[str, URLRecord] = {}   # normalized url → record

        if self.logger:
            self.logger.info(f"Fetching robots.txt for {target_url}")
        robots = self.robots_parser.fetch_and_parse(target_url, cfg.timeout_ms)

        if self.logger:
            self.logger.info("Fetching sitemaps")
        sitemap_urls = self._fetch_sitemaps(target_url, robots.sitemap_urls)
        stats.sitemap_urls = len(sitemap_urls)

        # ── Seed frontier ──────────────────────────────────────
        for url in sitemap_urls:
            if cfg.respect_robots and not self.robots_parser.is_url_allowed(url, robots):
                stats.skipped_urls += 1
                continue
            self._add(URLRecord(url=url, source=URLSource.SITEMAP), records, index)

        # The seed is never filtered by robots.txt
        self._add(URLRecord(url=target_url, source=URLSource.INITIAL), records, index)

        crawler = LinkCrawler(target_url, self.client, RateLimiter(cfg.rate_limit),
                              timeout_ms=cfg.timeout_ms, logger=self.logger)
        if robots.crawl_delay_seconds:
            crawler.update_rate_limit(robots.crawl_delay_seconds)
            if self.logger:
                self.logger.info(f"Using Crawl-delay {robots.crawl_delay_seconds}s from robots.txt")

        if cfg.max_depth > 0:
            self._crawl(crawler, robots, records, index, stats)

        forms = self._extract_forms(records, crawler.rate_limiter, stats)

        ranked = self.normalizer.process(records)
        duration = round(time.monotonic() - started, 1)

        if self.logger:
            self.logger.ok(f"Scan complete: {len(ranked)} URLs, {len(forms)} forms "
                           f"in {duration}s")

        return ScanResult(
            summary=ScanSummary(
                target=target_url,
                urls_discovered=len(ranked),
                forms_found=len(forms),
                depth=cfg.max_depth,
                duration_seconds=duration,
            ),
            urls=tuple(ranked),
            forms=tuple(forms),
            crawl_stats=replace(stats),
            robots_directives=replace(robots, disallow=list(robots.disallow),
                                      allow=list(robots.allow),
                                      sitemap_urls=list(robots.sitemap_urls)),
        )

    # ── Stages ─────────────────────────────────────────────────

    def _fetch_sitemaps(self, target_url: str, from_robots: List[str]) -> List[str]:
        """Page URLs from /sitemap.xml and robots.txt sitemaps, indexes expanded."""
        queue: Deque = deque((url, 0) for url in
                             [urljoin(target_url, "/sitemap.xml")] + list(from_robots))
        fetched = set()
        pages: List[str] = []
        seen_pages = set()

        while queue and len(fetched) < MAX_SITEMAP_FETCHES:
            url, level = queue.popleft()
            if url in fetched:
                continue
            fetched.add(url)

            doc = self.sitemap_parser.fetch_document(url, self.config.timeout_ms)
            if doc.is_index:
                if level < MAX_SITEMAP_INDEX_DEPTH:
                    queue.extend((child, level + 1) for child in doc.urls)
                elif self.logger:
                    self.logger.debug(f"Sitemap index nesting too deep, not following {url}")
                continue
            for page in doc.urls:
                if page not in seen_pages:
                    seen_pages.add(page)
                    pages.append(page)

        if self.logger and pages:
            self.logger.info(f"Sitemaps listed {len(pages)} URLs")
        return pages

    def _crawl(self, crawler: LinkCrawler, robots: RobotsDirective,
               records: List[URLRecord], index: Dict[str, URLRecord],
               stats: CrawlStats) -> None:
        cfg = self.config
        if self.logger:
            self.logger.info(f"Crawling links (depth={cfg.max_depth}, "
                             f"rate={cfg.rate_limit} req/s)")

        frontier: Deque[URLRecord] = deque(records)
        while frontier:
            if len(records) >= cfg.max_urls:
                if self.logger:
                    self.logger.warn(f"Reached max URL limit ({cfg.max_urls})")
                break

            current = frontier.popleft()
            if current.depth >= cfg.max_depth:
                continue

            discovered = crawler.crawl(current.url, current.depth, cfg.max_depth)
            stats.crawled_urls += len(discovered)

            for rec in discovered:
                if len(records) >= cfg.max_urls:
                    break
                if cfg.respect_robots and not self.robots_parser.is_url_allowed(rec.url, robots):
                    stats.skipped_urls += 1
                    if self.logger:
                        self.logger.debug(f"Disallowed by robots.txt: {rec.url}")
                    continue
                if self._add(rec, records, index):
                    frontier.append(rec)

        stats.errors += crawler.errors
        if self.logger:
            self.logger.info(f"Crawl finished: {crawler.visited_count} pages visited")

    def _extract_forms(self, records: List[URLRecord], limiter: RateLimiter,
                       stats: CrawlStats) -> List[FormRecord]:
        if self.logger:
            self.logger.info("Extracting forms")

        forms: List[FormRecord] = []
        for rec in records[:self.config.form_extraction_limit]:
            html = self._fetch_html(rec.url, limiter, stats)
            if html is None:
                continue
            try:
                found = self.form_extractor.extract(html, rec.url)
            except Exception as exc:
                stats.errors += 1
                if self.logger:
                    self.logger.warn(f"Form parse failed: {rec.url} "
                                     f"({type(exc).__name__}: {exc})")
                continue
            if not found:
                continue

            rec.has_forms = True
            rec.form_count = len(found)
            for form in found:
                potential = self.form_extractor.estimate_bounty_potential(
                    form.vulnerability_indicators)
                rec.bounty_potential = rec.bounty_potential.upgrade(potential)
                if self.logger:
                    self.logger.form_finding(potential.value, rec.url, form.method,
                                             form.action_url,
                                             form.vulnerability_indicators)
            forms.extend(found)
        return forms

    # ── Internal helpers ───────────────────────────────────────

    def _add(self, rec: URLRecord, records: List[URLRecord],
             index: Dict[str, URLRecord]) -> bool:
        """Append a new record; merge into the known one on duplicates."""
        key = self.normalizer.normalize(rec.url)
        known = index.get(key)
        if known is not None:
            known.bounty_potential = known.bounty_potential.upgrade(rec.bounty_potential)
            return False
        index[key] = rec
        records.append(rec)
        return True

    def _fetch_html(self, url: str, limiter: RateLimiter,
                    stats: CrawlStats) -> Optional[str]:
        limiter.wait()
        try:
            resp = self.client.get(url, timeout=self.config.timeout_ms / 1000.0)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            stats.errors += 1
            if self.logger:
                self.logger.warn(f"Form fetch failed: {url} — {exc}")
            return None
        if not resp.is_success:
            return None
        if "text/html" not in resp.headers.get("content-type", "").lower():
            return None
        return resp.text
