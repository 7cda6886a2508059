"""JSON and plain-text rendering of a ScanResult."""

import json
from typing import List

from pathscanner.core.models import BountyPotential, ScanResult

MAX_LISTED = 10


def to_json(result: ScanResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def render_text(result: ScanResult) -> str:
    s = result.summary
    st = result.crawl_stats
    lines: List[str] = [
        f"Target:          {s.target}",
        f"URLs discovered: {s.urls_discovered}",
        f"Forms found:     {s.forms_found}",
        f"Max depth:       {s.depth}",
        f"Duration:        {s.duration_seconds}s",
        "",
        f"From sitemap: {st.sitemap_urls}",
        f"From crawl:   {st.crawled_urls}",
        f"Skipped:      {st.skipped_urls}",
        f"Errors:       {st.errors}",
    ]

    high = [u for u in result.urls if u.bounty_potential is BountyPotential.HIGH]
    if high:
        lines += ["", "High-value targets:"]
        for rec in high[:MAX_LISTED]:
            suffix = f" ({rec.form_count} form{'s' if rec.form_count != 1 else ''})" \
                if rec.has_forms else ""
            lines.append(f"  {rec.url}{suffix}")
        if len(high) > MAX_LISTED:
            lines.append(f"  ... and {len(high) - MAX_LISTED} more")

    flagged = [f for f in result.forms if f.vulnerability_indicators]
    if flagged:
        lines += ["", "Forms with potential issues:"]
        for form in flagged[:MAX_LISTED]:
            lines.append(f"  {form.page_url}")
            lines.append(f"    {form.method} {form.action_url}")
            lines.append(f"    issues: {', '.join(form.vulnerability_indicators)}")
        if len(flagged) > MAX_LISTED:
            lines.append(f"  ... and {len(flagged) - MAX_LISTED} more")

    return "\n".join(lines)
