import pytest

from pathscanner.core.models import BountyPotential, URLRecord, URLSource
from pathscanner.core.normalizer import URLNormalizer

HIGH, MEDIUM, LOW = BountyPotential.HIGH, BountyPotential.MEDIUM, BountyPotential.LOW


def rec(url, potential=MEDIUM, has_forms=False, form_count=0, source=URLSource.CRAWL):
    return URLRecord(url=url, source=source, depth=1, has_forms=has_forms,
                     form_count=form_count, bounty_potential=potential)


@pytest.mark.parametrize("url,expected", [
    ("https://example.com/a?b=2&a=1#frag", "https://example.com/a?a=1&b=2"),
    ("HTTPS://Example.COM", "https://example.com/"),
    ("https://example.com/p?z=&a=1&z=2", "https://example.com/p?a=1&z=&z=2"),
    ("https://example.com/search?q=a+b&page=2", "https://example.com/search?page=2&q=a+b"),
    ("https://example.com:8443/x#", "https://example.com:8443/x"),
])
def test_normalize(url, expected):
    assert URLNormalizer().normalize(url) == expected


@pytest.mark.parametrize("url", [
    "https://example.com/a?b=2&a=1#frag",
    "https://example.com/search?q=a%20b&x=%2F",
    "http://user@example.com/p?c&b=1",
    "not a url",
])
def test_normalize_is_idempotent(url):
    n = URLNormalizer()
    assert n.normalize(n.normalize(url)) == n.normalize(url)


def test_unparseable_url_returned_unchanged():
    n = URLNormalizer()
    assert n.normalize("not a url") == "not a url"
    assert n.normalize("http://[::1") == "http://[::1"


def test_deduplicate_keeps_higher_potential():
    n = URLNormalizer()
    out = n.deduplicate([
        rec("https://example.com/a?y=1&x=2", LOW),
        rec("https://example.com/a?x=2&y=1#top", HIGH),
        rec("https://example.com/a?x=2&y=1", MEDIUM),
    ])
    assert len(out) == 1
    assert out[0].bounty_potential is HIGH
    assert out[0].url == "https://example.com/a?x=2&y=1"


def test_deduplicate_tie_keeps_first_seen():
    out = URLNormalizer().deduplicate([
        rec("https://example.com/a", source=URLSource.SITEMAP),
        rec("https://example.com/a#b", source=URLSource.CRAWL),
    ])
    assert [r.source for r in out] == [URLSource.SITEMAP]


def test_sort_by_potential():
    out = URLNormalizer().sort_by_bounty_potential([rec("b", LOW), rec("a", HIGH)])
    assert [r.url for r in out] == ["a", "b"]


def test_sort_tiebreaks():
    out = URLNormalizer().sort_by_bounty_potential([
        rec("https://e.com/z", MEDIUM),
        rec("https://e.com/y", MEDIUM, has_forms=True, form_count=1),
        rec("https://e.com/x", MEDIUM, has_forms=True, form_count=3),
        rec("https://e.com/b", MEDIUM),
        rec("https://e.com/q", HIGH),
    ])
    assert [r.url.rsplit("/", 1)[1] for r in out] == ["q", "x", "y", "b", "z"]


def test_process_dedups_then_sorts():
    out = URLNormalizer().process([
        rec("https://e.com/b", LOW),
        rec("https://e.com/a", LOW),
        rec("https://e.com/b#x", HIGH),
    ])
    assert [(r.url, r.bounty_potential) for r in out] == [
        ("https://e.com/b", HIGH), ("https://e.com/a", LOW)]
