"""sitemap.xml / sitemap index parsing."""

from dataclasses import dataclass, field
from typing import List, Optional
import xml.etree.ElementTree as ET

import httpx

from pathscanner.core.models import USER_AGENT

URLSET = "urlset"
SITEMAP_INDEX = "sitemapindex"
UNKNOWN = "unknown"


@dataclass
class SitemapDocument:
    """Parsed sitemap: page URLs for a urlset, child sitemaps for an index."""
    kind: str = UNKNOWN
    urls: List[str] = field(default_factory=list)

    @property
    def is_index(self) -> bool:
        return self.kind == SITEMAP_INDEX


def _localname(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[-1]
    return tag


def _child_text(node: ET.Element, name: str) -> Optional[str]:
    for child in node:
        if _localname(child.tag) == name and child.text:
            text = child.text.strip()
            if text:
                return text
    return None


class SitemapParser:
    """Extracts URLs from sitemaps. Does not follow index entries itself."""

    def __init__(self, client: Optional[httpx.Client] = None, logger=None):
        self.client = client or httpx.Client(
            follow_redirects=True, headers={"User-Agent": USER_AGENT})
        self.logger = logger

    def parse_document(self, xml_text: str) -> SitemapDocument:
        if not xml_text or not xml_text.strip():
            return SitemapDocument()
        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError as exc:
            if self.logger:
                self.logger.warn(f"Sitemap parse error: {exc}")
            return SitemapDocument()

        root_name = _localname(root.tag)
        if root_name == URLSET:
            urls = []
            for node in root:
                if _localname(node.tag) != "url":
                    continue
                loc = _child_text(node, "loc")
                if loc and loc.startswith(("http://", "https://")):
                    urls.append(loc)
            return SitemapDocument(URLSET, urls)

        if root_name == SITEMAP_INDEX:
            children = []
            for node in root:
                if _localname(node.tag) != "sitemap":
                    continue
                loc = _child_text(node, "loc")
                if loc:
                    children.append(loc)
            return SitemapDocument(SITEMAP_INDEX, children)

        if self.logger:
            self.logger.warn(f"Unrecognized sitemap root <{root_name}>")
        return SitemapDocument()

    def parse(self, xml_text: str) -> List[str]:
        return self.parse_document(xml_text).urls

    def fetch_document(self, url: str, timeout_ms: int = 10000) -> SitemapDocument:
        try:
            resp = self.client.get(url, timeout=timeout_ms / 1000.0)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            if self.logger:
                self.logger.warn(f"Sitemap fetch failed: {url} — {exc}")
            return SitemapDocument()

        if not resp.is_success:
            if self.logger:
                self.logger.debug(f"Sitemap {url} returned HTTP {resp.status_code}")
            return SitemapDocument()
        return self.parse_document(resp.text)

    def fetch_and_parse(self, url: str, timeout_ms: int = 10000) -> List[str]:
        return self.fetch_document(url, timeout_ms).urls
