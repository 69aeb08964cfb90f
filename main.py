#!/usr/bin/env python3
"""
Request Gate -- dry-run a security config against a request.

Shows whether a request would bypass the security checks and, if not, which
checks would run and in what order. Nothing is executed.

Usage:
  python main.py --config security.json /api/v1/widgets
  python main.py --config security.json --method POST https://example.com/health
  python main.py --config security.json --validate

Exit codes:
  0  success
  1  the URI could not be parsed (the gate would reject it with 400)
  2  the config file or one of its skip routes is invalid
"""

import argparse
from dataclasses import dataclass
from typing import Optional

from core.config import load_security_config
from core.exceptions import InvalidConfigurationError, InvalidURLError
from core.gate import SecurityGate
from core.models import SecurityConfig
from core.registry import CheckRegistry
from core.skip import compile_regex_route


@dataclass(frozen=True)
class CliRequest:
    uri: str
    method: str

    def get_uri(self) -> str:
        return self.uri

    def get_method(self) -> str:
        return self.method


def validate_config(config: Optional[SecurityConfig]) -> list[str]:
    """Return one message per invalid skip_regex_routes key."""
    if config is None:
        return []
    errors: list[str] = []
    for pattern in config.skip_regex_routes:
        try:
            compile_regex_route(pattern)
        except InvalidConfigurationError as e:
            errors.append(e.message)
    return errors


def _print_policy(config: Optional[SecurityConfig]) -> None:
    if config is None or not config.has_policy:
        print("  No security checks configured -- every request is let through.")
        return
    print(f"  Checks ({len(config.checks)}): {', '.join(str(c) for c in config.checks)}")
    print(f"  Skip routes: {len(config.skip_routes)}  Regex skip routes: {len(config.skip_regex_routes)}")


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="request-gate",
        description="Dry-run the security gate's skip rules against a request.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --config security.json /health
  python main.py --config security.json --method POST /api/v1/widgets
  python main.py --config security.json --validate
        """,
    )
    parser.add_argument("uri", nargs="?", metavar="URI", help="Request URI or path to evaluate")
    parser.add_argument("--config", required=True, metavar="PATH", help="JSON file with the security config")
    parser.add_argument("--method", default="GET", help="HTTP method of the request (default: GET)")
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check every skip_regex_routes key for anchors and regex syntax",
    )
    args = parser.parse_args()

    if not args.validate and args.uri is None:
        parser.error("a URI is required unless --validate is given")

    try:
        config = load_security_config(args.config)
    except ValueError as e:
        print(f"  [!] {e}")
        return 2

    if args.validate:
        _print_policy(config)
        errors = validate_config(config)
        for message in errors:
            print(f"  [!] {message}")
        if errors:
            return 2
        print("  Config OK.")
        if args.uri is None:
            return 0

    # The registry is never consulted: planned_checks() stops before resolving.
    gate = SecurityGate(CheckRegistry())
    request = CliRequest(uri=args.uri, method=args.method)
    try:
        planned = gate.planned_checks(config, request)
    except InvalidURLError:
        print(f"  [!] '{args.uri}' has no parseable path -- the request would be rejected.")
        return 1
    except InvalidConfigurationError as e:
        print(f"  [!] {e.message}")
        return 2

    if not planned:
        print(f"  SKIP  {args.method} {args.uri} -- no checks would run.")
        return 0

    print(f"  CHECK {args.method} {args.uri} -- checks run in this order:")
    for position, check_id in enumerate(planned, start=1):
        print(f"    {position}. {check_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
