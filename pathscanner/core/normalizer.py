"""URL canonicalization, deduplication and ranking."""

from dataclasses import replace
from typing import Dict, List
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pathscanner.core.models import URLRecord


class URLNormalizer:

    def normalize(self, url: str) -> str:
        """Drop the fragment and sort query parameters by key."""
        try:
            parts = urlsplit(url)
            hostname = parts.hostname
            port = parts.port
        except ValueError:
            return url
        if not parts.scheme or not hostname:
            return url

        netloc = hostname
        if ":" in hostname:  # IPv6 literal
            netloc = f"[{hostname}]"
        if port is not None:
            netloc = f"{netloc}:{port}"
        if "@" in parts.netloc:
            netloc = f"{parts.netloc.rsplit('@', 1)[0]}@{netloc}"

        pairs = parse_qsl(parts.query, keep_blank_values=True)
        query = urlencode(sorted(pairs, key=lambda kv: kv[0]))

        return urlunsplit((parts.scheme.lower(), netloc, parts.path or "/", query, ""))

    def deduplicate(self, records: List[URLRecord]) -> List[URLRecord]:
        """Keep one record per normalized URL, preferring higher bounty potential."""
        seen: Dict[str, URLRecord] = {}
        for rec in records:
            key = self.normalize(rec.url)
            existing = seen.get(key)
            if existing is None or rec.bounty_potential.rank > existing.bounty_potential.rank:
                seen[key] = replace(rec, url=key)
        return list(seen.values())

    def sort_by_bounty_potential(self, records: List[URLRecord]) -> List[URLRecord]:
        return sorted(records, key=lambda r: (
            -r.bounty_potential.rank,
            not r.has_forms,
            -r.form_count,
            r.url,
        ))

    def process(self, records: List[URLRecord]) -> List[URLRecord]:
        return self.sort_by_bounty_potential(self.deduplicate(records))
