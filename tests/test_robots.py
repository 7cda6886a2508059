import httpx

from pathscanner.core.models import RobotsDirective
from pathscanner.parsers.robots import RobotsParser

from conftest import FakeSite

ROBOTS = """# comment
User-agent: Googlebot
Disallow: /nogoogle

User-agent: *
Disallow: /admin
Allow: /admin/public
Crawl-delay: 1.5
Sitemap: https://example.com/sitemap-a.xml

user-agent: *
DISALLOW: /tmp
garbage line without colon
Disallow:
Sitemap: https://example.com/sitemap-b.xml
"""


def test_parse_empty_is_permissive():
    d = RobotsParser().parse("")
    assert d.user_agent == "*"
    assert d.disallow == [] and d.allow == [] and d.sitemap_urls == []
    assert d.crawl_delay_seconds is None


def test_parse_prefers_wildcard_block_and_accumulates():
    d = RobotsParser().parse(ROBOTS)
    assert d.user_agent == "*"
    assert d.disallow == ["/admin", "/tmp"]
    assert d.allow == ["/admin/public"]
    assert d.crawl_delay_seconds == 1.5


def test_sitemaps_are_global():
    parser = RobotsParser()
    d = parser.parse(ROBOTS)
    assert d.sitemap_urls == ["https://example.com/sitemap-a.xml",
                              "https://example.com/sitemap-b.xml"]
    only_named = parser.parse("Sitemap: https://x.test/s.xml\n"
                              "User-agent: Bingbot\nDisallow: /b\n")
    assert only_named.user_agent == "Bingbot"
    assert only_named.sitemap_urls == ["https://x.test/s.xml"]


def test_first_named_block_when_no_wildcard():
    d = RobotsParser().parse("User-agent: A\nDisallow: /a\nUser-agent: B\nDisallow: /b\n")
    assert d.user_agent == "A"
    assert d.disallow == ["/a"]


def test_invalid_crawl_delay_ignored():
    d = RobotsParser().parse("User-agent: *\nCrawl-delay: soon\nCrawl-delay: -3\n")
    assert d.crawl_delay_seconds is None


def test_is_allowed_rules():
    parser = RobotsParser()
    assert parser.is_allowed("/admin", RobotsDirective(disallow=["/admin"])) is False
    assert parser.is_allowed(
        "/admin/public", RobotsDirective(disallow=["/admin"], allow=["/admin/public"])) is True
    assert parser.is_allowed("/anything", RobotsDirective(disallow=["/"])) is False
    assert parser.is_allowed("/anything", RobotsDirective(disallow=[""])) is True
    assert parser.is_allowed("/other", RobotsDirective(disallow=["/admin"])) is True
    assert parser.is_allowed("/files/x.pdf", RobotsDirective(disallow=["/files*"])) is False
    # Allow "/" grants everything even with a Disallow
    assert parser.is_allowed("/admin", RobotsDirective(disallow=["/admin"], allow=["/"])) is True


def test_is_url_allowed_uses_path():
    parser = RobotsParser()
    d = RobotsDirective(disallow=["/private"])
    assert parser.is_url_allowed("https://example.com/private/x?y=1", d) is False
    assert parser.is_url_allowed("https://example.com", d) is True


def test_fetch_and_parse_ok():
    site = FakeSite({"https://example.com/robots.txt":
                     (200, "User-agent: *\nDisallow: /x\n", "text/plain")})
    d = RobotsParser(site.client()).fetch_and_parse("https://example.com/deep/page", 1000)
    assert d.disallow == ["/x"]
    assert site.requests == ["https://example.com/robots.txt"]


def test_fetch_and_parse_404_and_errors_are_permissive():
    for route in (None, (500, "boom", "text/plain"), httpx.ConnectError("refused"),
                  httpx.ReadTimeout("slow")):
        routes = {} if route is None else {"https://example.com/robots.txt": route}
        d = RobotsParser(FakeSite(routes).client()).fetch_and_parse("https://example.com", 50)
        assert d == RobotsDirective.permissive()


def test_unrequestable_robots_url_is_permissive():
    site = FakeSite()
    d = RobotsParser(site.client()).fetch_and_parse("https://exa\x01mple.com/", 50)
    assert d == RobotsDirective.permissive()
    assert site.requests == []
