#!/usr/bin/env python3
"""
Fetch a resource, following redirects

Usage:
  python scripts/fetch.py get <url> [--show-redirects]
  python scripts/fetch.py head <url>
  python scripts/fetch.py delete <url>
  python scripts/fetch.py post <url> --data <text>
  python scripts/fetch.py put <url> --data-file <path>

Examples:
  python scripts/fetch.py get http://example.com/redirect/301?http://example.com/get
  python scripts/fetch.py post /api/items --base-url http://localhost:8000 --data '{"a":1}'
  python scripts/fetch.py get http://example.com/loop --max-redirects 3
  python scripts/fetch.py get http://example.com/ --log-format json --log-level DEBUG

Settings default to RESOURCEFUL_* environment variables (or .env); command
line options override them.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional
from urllib.parse import urljoin

import requests
from dotenv import load_dotenv

from application.accessor import HttpAccessor
from application.ports.logger import LoggerPort
from application.ports.requests_client import RequestsSessionHttpClient
from application.request import Request
from application.services.accessor_settings import AccessorSettings
from domain.exceptions import ResourcefulError
from domain.response import Response
from infrastructure.config.env_settings import EnvSettingsLoader
from infrastructure.logging.console_logger import ConsoleLogger
from infrastructure.logging.log_setup import setup_console_logging
from infrastructure.logging.loguru_logger import LoguruLogger
from infrastructure.url.base_url_resolver import BaseUrlResolver

READ_METHODS = ("get", "head", "delete")
WRITE_METHODS = ("post", "put")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch a resource, following redirects")
    subparsers = parser.add_subparsers(dest="command")

    for method in READ_METHODS + WRITE_METHODS:
        sub = subparsers.add_parser(method, help=f"Send a {method.upper()} request")
        sub.add_argument("url", type=str)
        sub.add_argument("--base-url", type=str, default="")
        sub.add_argument("--max-redirects", type=int)
        sub.add_argument("--timeout-sec", type=float)
        sub.add_argument("--log-level", type=str, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
        sub.add_argument("--log-format", type=str, choices=["text", "json"], default="text")
        sub.add_argument("--follow-unsafe-redirects", action="store_true", default=None)
        sub.add_argument("--show-redirects", action="store_true")
        sub.add_argument("--show-body", action="store_true")
        if method in WRITE_METHODS:
            data_group = sub.add_mutually_exclusive_group()
            data_group.add_argument("--data", type=str)
            data_group.add_argument("--data-file", type=str)

    return parser


def _load_body(args: argparse.Namespace) -> Optional[bytes]:
    if getattr(args, "data", None) is not None:
        return args.data.encode("utf-8")
    if getattr(args, "data_file", None) is not None:
        try:
            return Path(args.data_file).read_bytes()
        except OSError as exc:
            raise ValueError(f"Unable to read data file: {exc}") from exc
    return None


def _build_logger(args: argparse.Namespace, settings: AccessorSettings) -> LoggerPort:
    if args.log_format == "json":
        return ConsoleLogger(level=settings.log_level).bind(command=args.command)
    setup_console_logging(level=settings.log_level)
    return LoguruLogger().bind(command=args.command)


def _build_accessor(args: argparse.Namespace) -> HttpAccessor:
    settings = EnvSettingsLoader().load().with_overrides(
        max_redirects=args.max_redirects,
        timeout_sec=args.timeout_sec,
        log_level=args.log_level,
        follow_unsafe_redirects=args.follow_unsafe_redirects,
    )
    return HttpAccessor(
        http_client=RequestsSessionHttpClient(timeout_sec=settings.timeout_sec),
        settings=settings,
        logger=_build_logger(args, settings),
        url_resolver=BaseUrlResolver(args.base_url),
    )


def _run(args: argparse.Namespace) -> int:
    with _build_accessor(args) as accessor:
        return _fetch(accessor, args)


def _fetch(accessor: HttpAccessor, args: argparse.Namespace) -> int:
    resource = accessor.resource(args.url)
    original_uri = resource.effective_uri

    hops: List[str] = []

    def record_hop(request: Request, response: Response) -> None:
        kind = "permanent" if response.is_permanent_redirect else "temporary"
        target = urljoin(request.uri, response.header["Location"][0])
        hops.append(f"{response.code} {kind}: {request.uri} -> {target}")

    resource.on_redirect(record_hop)

    if args.command in WRITE_METHODS:
        response = resource.do_write_request(args.command, _load_body(args))
    else:
        response = resource.do_read_request(args.command)

    print(f"Status: {response.code}")
    print(f"Effective URI: {resource.effective_uri}")
    if resource.effective_uri != original_uri:
        print(f"Moved permanently from: {original_uri}")
    if args.show_redirects:
        print(f"Redirects: {len(hops)}")
        for hop in hops:
            print(f"  {hop}")
    if args.show_body:
        print()
        print(response.text)

    return 0 if response.code < 400 else 1


def main() -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:])

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = _run(args)
    except (ValueError, ResourcefulError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)
    except requests.RequestException as exc:
        print(f"ERROR: Request failed: {exc}")
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
