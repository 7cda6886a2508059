"""Shared data models for the path scanner."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class URLSource(str, Enum):
    """Where a URL was first discovered."""
    SITEMAP = "sitemap"
    ROBOTS = "robots"
    CRAWL = "crawl"
    INITIAL = "initial"


class BountyPotential(str, Enum):
    """Coarse priority of a URL for security follow-up."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]

    def upgrade(self, other: "BountyPotential") -> "BountyPotential":
        """Return the higher of the two levels (never downgrades)."""
        return other if other.rank > self.rank else self


@dataclass
class URLRecord:
    """A discovered URL. Mutated in place when forms are found on it."""
    url: str
    source: URLSource
    depth: int = 0
    has_forms: bool = False
    form_count: int = 0
    bounty_potential: BountyPotential = BountyPotential.MEDIUM

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "source": self.source.value,
            "depth": self.depth,
            "hasForms": self.has_forms,
            "formCount": self.form_count,
            "bountyPotential": self.bounty_potential.value,
        }


@dataclass(frozen=True)
class FormField:
    name: str
    type: str = "text"
    required: bool = False

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "required": self.required}


@dataclass(frozen=True)
class FormRecord:
    """A single <form> found on a page."""
    page_url: str
    action_url: str
    method: str                         # "GET" or "POST"
    fields: Tuple[FormField, ...] = ()
    has_csrf_token: bool = False
    vulnerability_indicators: Tuple[str, ...] = ()

    def __str__(self):
        tags = ", ".join(self.vulnerability_indicators) or "none"
        return f"{self.method} {self.action_url} ({len(self.fields)} fields) [{tags}]"

    def to_dict(self) -> dict:
        return {
            "pageUrl": self.page_url,
            "actionUrl": self.action_url,
            "method": self.method,
            "fields": [f.to_dict() for f in self.fields],
            "hasCsrfToken": self.has_csrf_token,
            "vulnerabilityIndicators": list(self.vulnerability_indicators),
        }


@dataclass
class RobotsDirective:
    """Rules from robots.txt that apply to one user agent."""
    user_agent: str = "*"
    disallow: List[str] = field(default_factory=list)
    allow: List[str] = field(default_factory=list)
    crawl_delay_seconds: Optional[float] = None
    sitemap_urls: List[str] = field(default_factory=list)

    @classmethod
    def permissive(cls) -> "RobotsDirective":
        """Allow-everything directive used when robots.txt is absent."""
        return cls(user_agent="*")

    def to_dict(self) -> dict:
        return {
            "userAgent": self.user_agent,
            "disallow": list(self.disallow),
            "allow": list(self.allow),
            "crawlDelaySeconds": self.crawl_delay_seconds,
            "sitemapUrls": list(self.sitemap_urls),
        }


@dataclass
class CrawlStats:
    sitemap_urls: int = 0
    crawled_urls: int = 0
    skipped_urls: int = 0
    errors: int = 0

    def to_dict(self) -> dict:
        return {
            "sitemapUrls": self.sitemap_urls,
            "crawledUrls": self.crawled_urls,
            "skippedUrls": self.skipped_urls,
            "errors": self.errors,
        }


@dataclass(frozen=True)
class ScanSummary:
    target: str
    urls_discovered: int
    forms_found: int
    depth: int
    duration_seconds: float

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "urlsDiscovered": self.urls_discovered,
            "formsFound": self.forms_found,
            "depth": self.depth,
            "durationSeconds": self.duration_seconds,
        }


@dataclass(frozen=True)
class ScanResult:
    """Final, immutable output of one scan."""
    summary: ScanSummary
    urls: Tuple[URLRecord, ...]
    forms: Tuple[FormRecord, ...]
    crawl_stats: CrawlStats
    robots_directives: RobotsDirective

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict(),
            "urls": [u.to_dict() for u in self.urls],
            "forms": [f.to_dict() for f in self.forms],
            "crawlStats": self.crawl_stats.to_dict(),
            "robotsDirectives": self.robots_directives.to_dict(),
        }


FORM_EXTRACTION_LIMIT = 20
USER_AGENT = "path-scanner/1.0"


@dataclass(frozen=True)
class ScannerConfig:
    """Scan settings. Range checks are the CLI's job."""
    max_depth: int = 2
    rate_limit: float = 2          # requests per second
    max_urls: int = 100
    respect_robots: bool = True
    timeout_ms: int = 10000
    form_extraction_limit: int = FORM_EXTRACTION_LIMIT
    user_agent: str = USER_AGENT
