import argparse

from pathscanner.core.models import ScannerConfig
from pathscanner.core.scanner import InvalidTargetError, PathScanner
from pathscanner.reporters.console import Log
from pathscanner.reporters.report import render_text, to_json


def _bounded_int(lo, hi=None):
    def parse(value):
        try:
            n = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
        if n < lo or (hi is not None and n > hi):
            bound = f"between {lo} and {hi}" if hi is not None else f">= {lo}"
            raise argparse.ArgumentTypeError(f"must be {bound}")
        return n
    return parse


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="path-scanner",
        description="Lightweight crawler for path discovery and form extraction")
    p.add_argument("target", help="Target URL (e.g. https://example.com)")
    p.add_argument("--depth", type=_bounded_int(0, 3), default=2,
                   help="Crawl depth, 0-3 (default: 2)")
    p.add_argument("--rate-limit", type=_bounded_int(1, 5), default=2,
                   help="Requests per second, 1-5 (default: 2)")
    p.add_argument("--max-urls", type=_bounded_int(1), default=100,
                   help="Maximum URLs to discover (default: 100)")
    p.add_argument("--timeout", type=_bounded_int(1), default=10000,
                   help="Per-request timeout in ms (default: 10000)")
    p.add_argument("--no-respect-robots", dest="respect_robots",
                   action="store_false", help="Ignore robots.txt directives")
    p.add_argument("--json", action="store_true", help="Output JSON")
    p.add_argument("-v", "--verbose", action="count", default=1,
                   help="-v, -vv")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    log = Log(verbose=args.verbose)

    config = ScannerConfig(
        max_depth=args.depth,
        rate_limit=args.rate_limit,
        max_urls=args.max_urls,
        respect_robots=args.respect_robots,
        timeout_ms=args.timeout,
    )

    try:
        with PathScanner(config, logger=log) as scanner:
            result = scanner.scan(args.target)
    except InvalidTargetError as exc:
        log.fail(str(exc))
        return 1

    print(to_json(result) if args.json else render_text(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
