import json

import pytest

from pathscanner import main as cli
from pathscanner.core.models import ScannerConfig
from pathscanner.core.scanner import PathScanner

from conftest import HTML, FakeSite, page


@pytest.fixture
def fake_scanner(monkeypatch, no_sleep):
    """Route the CLI's scanner through an in-memory site."""
    site = FakeSite({"https://example.com/": (
        200, page("/a", forms='<form method="post"><input name="x"></form>'), HTML)})
    seen = {}

    def factory(config, logger=None):
        seen["config"] = config
        return PathScanner(config, client=site.client(), logger=logger)

    monkeypatch.setattr(cli, "PathScanner", factory)
    return seen


def test_json_output(fake_scanner, capsys):
    assert cli.main(["https://example.com/", "--json", "--depth=1"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["summary"]["target"] == "https://example.com/"
    assert data["summary"]["formsFound"] == 1
    assert data["forms"][0]["vulnerabilityIndicators"] == ["missing-csrf"]


def test_text_output(fake_scanner, capsys):
    assert cli.main(["https://example.com/", "--depth", "0"]) == 0
    out = capsys.readouterr().out
    assert "Target:          https://example.com/" in out
    assert "missing-csrf" in out


def test_flags_map_to_config(fake_scanner):
    cli.main(["https://example.com/", "--depth=3", "--rate-limit=5", "--max-urls=7",
              "--timeout=2500", "--no-respect-robots", "--json"])
    assert fake_scanner["config"] == ScannerConfig(
        max_depth=3, rate_limit=5, max_urls=7, respect_robots=False, timeout_ms=2500)


def test_invalid_target_exits_1(fake_scanner, capsys):
    assert cli.main(["not a url"]) == 1
    assert "Invalid target URL" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [
    [],
    ["https://example.com/", "--depth=4"],
    ["https://example.com/", "--rate-limit=0"],
    ["https://example.com/", "--max-urls=0"],
    ["https://example.com/", "--depth=two"],
])
def test_bad_arguments_exit_nonzero(argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    assert exc.value.code != 0
