"""Form extraction and security indicator detection.

For every <form> on a page we record its fields and flag common weak spots:
  1. POST forms without an anti-CSRF token
  2. actions submitted over plain HTTP
  3. credentials or tokens sent with GET
  4. password inputs left open to browser autocomplete
  5. hidden inputs exposing sequential numeric IDs
"""

import re
from html.parser import HTMLParser
from typing import Dict, Iterable, List, Optional
from urllib.parse import urljoin, urlsplit

from pathscanner.core.models import BountyPotential, FormField, FormRecord


# ── Token field name vocabulary ────────────────────────────────

CSRF_TOKEN_NAMES = (
    "csrf",
    "token",
    "xsrf",
    "_token",
    "authenticity_token",
    "anti_csrf",
)

MISSING_CSRF = "missing-csrf"
HTTP_ACTION = "http-action"
STATE_CHANGING_GET = "state-changing-get"
PASSWORD_AUTOCOMPLETE = "password-autocomplete"
PREDICTABLE_ID = "predictable-id"

HIGH_PRIORITY = (MISSING_CSRF, HTTP_ACTION, PREDICTABLE_ID)
MEDIUM_PRIORITY = (STATE_CHANGING_GET, PASSWORD_AUTOCOMPLETE)

_SENSITIVE_NAME_PARTS = ("password", "secret", "token")
_SAFE_AUTOCOMPLETE = ("off", "new-password")
_NUMERIC = re.compile(r"[0-9]+")


def is_csrf_field(field_name: str) -> bool:
    """Check if a field name looks like an anti-CSRF token."""
    name = field_name.lower()
    return any(part in name for part in CSRF_TOKEN_NAMES)


# ── HTML parser ────────────────────────────────────────────────

class _RawForm:
    def __init__(self, attrs: Dict[str, str]):
        self.action = (attrs.get("action") or "").strip()
        self.method = (attrs.get("method") or "GET").strip().upper()
        self.controls: List[Dict[str, Optional[str]]] = []  # attrs + "_tag"


class _FormParser(HTMLParser):
    """Collect <form> elements with the attributes of their controls."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.forms: List[_RawForm] = []
        self._current: Optional[_RawForm] = None

    def handle_starttag(self, tag, attrs):
        attr_dict = {name.lower(): value for name, value in attrs}
        if tag == "form":
            # Browsers ignore a <form> opened inside another one
            if self._current is None:
                self._current = _RawForm(attr_dict)
        elif self._current is not None and tag in ("input", "textarea", "select"):
            attr_dict["_tag"] = tag
            self._current.controls.append(attr_dict)

    def handle_endtag(self, tag):
        if tag == "form" and self._current is not None:
            self.forms.append(self._current)
            self._current = None

    def close(self):
        super().close()
        if self._current is not None:
            self.forms.append(self._current)
            self._current = None


# ── Extractor ──────────────────────────────────────────────────

class FormExtractor:

    def extract(self, html: str, page_url: str) -> List[FormRecord]:
        parser = _FormParser()
        parser.feed(html or "")
        parser.close()
        return [self._build(raw, page_url) for raw in parser.forms]

    def estimate_bounty_potential(self, indicators: Iterable[str]) -> BountyPotential:
        indicators = set(indicators)
        if indicators.intersection(HIGH_PRIORITY):
            return BountyPotential.HIGH
        if indicators.intersection(MEDIUM_PRIORITY):
            return BountyPotential.MEDIUM
        return BountyPotential.LOW

    # ── Internal helpers ───────────────────────────────────────

    def _build(self, raw: _RawForm, page_url: str) -> FormRecord:
        method = "POST" if raw.method == "POST" else "GET"
        action_url = _resolve_action(raw.action, page_url)

        fields = []
        for ctrl in raw.controls:
            name = ctrl.get("name") or ""
            if not name:
                continue
            if ctrl["_tag"] == "input":
                ftype = (ctrl.get("type") or "text").lower()
            else:
                ftype = ctrl["_tag"]
            fields.append(FormField(name=name, type=ftype, required="required" in ctrl))

        inputs = [c for c in raw.controls if c["_tag"] == "input"]
        hidden = [c for c in inputs if (c.get("type") or "").lower() == "hidden"]
        has_csrf = any(is_csrf_field(c.get("name") or "") for c in hidden)

        indicators = []
        if method == "POST" and not has_csrf:
            indicators.append(MISSING_CSRF)
        if urlsplit(action_url).scheme.lower() == "http":
            indicators.append(HTTP_ACTION)
        if method == "GET" and any(_is_sensitive_input(c) for c in inputs):
            indicators.append(STATE_CHANGING_GET)
        if any(_autocompletes_password(c) for c in inputs):
            indicators.append(PASSWORD_AUTOCOMPLETE)
        if any(_exposes_numeric_id(c) for c in hidden):
            indicators.append(PREDICTABLE_ID)

        return FormRecord(
            page_url=page_url,
            action_url=action_url,
            method=method,
            fields=tuple(fields),
            has_csrf_token=has_csrf,
            vulnerability_indicators=tuple(indicators),
        )


def _resolve_action(action: str, page_url: str) -> str:
    try:
        return urljoin(page_url, action) if action else page_url
    except ValueError:
        return page_url


def _is_sensitive_input(attrs) -> bool:
    if (attrs.get("type") or "").lower() == "password":
        return True
    name = (attrs.get("name") or "").lower()
    return any(part in name for part in _SENSITIVE_NAME_PARTS)


def _autocompletes_password(attrs) -> bool:
    if (attrs.get("type") or "").lower() != "password":
        return False
    return (attrs.get("autocomplete") or "").strip().lower() not in _SAFE_AUTOCOMPLETE


def _exposes_numeric_id(attrs) -> bool:
    # "userid" is covered by "id"
    name = (attrs.get("name") or "").lower()
    return "id" in name and bool(_NUMERIC.fullmatch(attrs.get("value") or ""))
