import httpx
import pytest

HTML = "text/html; charset=utf-8"


class FakeSite:
    """
    In-memory origin served through httpx.MockTransport.

    routes: url → (status, body, content_type) or an exception instance.
    Unknown URLs answer 404. Every request URL is recorded in ``requests``.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        status, body, ctype = route
        return httpx.Response(status, text=body, headers={"content-type": ctype})

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler),
                            follow_redirects=True)

    def count(self, url):
        return self.requests.count(url)


def page(*links, forms=""):
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    return f"<html><body>{anchors}{forms}</body></html>"


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
def no_sleep(monkeypatch):
    slept = []
    monkeypatch.setattr("pathscanner.core.ratelimit.time.sleep", slept.append)
    return slept
