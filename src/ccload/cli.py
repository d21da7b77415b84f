from __future__ import annotations

import argparse
import asyncio
import logging
import os
import shlex
import sys
from typing import Sequence

from ccload.config import RunConfig
from ccload.errors import CcloadError
from ccload.loadgen.runner import run_load_test, run_single
from ccload.report import render_outcome, render_summary

logger = logging.getLogger(__name__)

PROMPT = "ccload> "


def _header(value: str) -> tuple[str, str]:
    name, sep, content = value.partition(":")
    if not sep or not name.strip():
        msg = f"expected 'Name: value', got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    return name.strip(), content.strip()


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        msg = f"must be positive, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ccload", description="Concurrent HTTP load tester")
    parser.add_argument("target", nargs="?", help="Target URL (alternative to -u)")
    parser.add_argument("-u", "--url", help="Target URL")
    parser.add_argument("-n", "--requests", type=int, default=1, help="Total number of requests")
    parser.add_argument("-c", "--concurrency", type=int, default=1, help="Concurrent workers")
    parser.add_argument("-m", "--method", default="GET", help="HTTP method")
    parser.add_argument("-d", "--data", help="Request body")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        type=_header,
        default=[],
        help="Extra header as 'Name: value' (repeatable)",
    )
    parser.add_argument("--timeout", type=_positive_float, default=30.0, help="Per-request timeout (sec)")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("CCLOAD_LOG_LEVEL", "WARNING"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("-i", "--interactive", action="store_true", help="Start an interactive shell")
    return parser


def config_from_args(args: argparse.Namespace, default_url: str | None = None) -> RunConfig | None:
    url = args.url or args.target or default_url
    if not url:
        return None
    return RunConfig(
        url=url,
        method=args.method,
        body=args.data.encode("utf-8") if args.data is not None else None,
        requests=args.requests,
        concurrency=args.concurrency,
        timeout_sec=args.timeout,
        headers=dict(args.header),
    )


def execute(config: RunConfig) -> str:
    if config.is_single:
        return render_outcome(asyncio.run(run_single(config)))
    return render_summary(asyncio.run(run_load_test(config)))


def shell(parser: argparse.ArgumentParser, initial: RunConfig | None = None) -> None:
    last = initial
    while True:
        try:
            line = input(PROMPT).strip()
        except EOFError:
            print()
            return
        if line in ("quit", "exit"):
            return
        if line == "help":
            parser.print_help()
            continue
        if not line:
            config = last
        else:
            try:
                args = parser.parse_args(shlex.split(line))
            except SystemExit:
                # argparse has already printed the usage error
                continue
            except ValueError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                continue
            config = config_from_args(args, last.url if last is not None else None)
        if config is None:
            print("Error: no URL given", file=sys.stderr)
            continue
        try:
            print(execute(config))
        except CcloadError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            continue
        last = config


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = config_from_args(args)
    if args.interactive:
        shell(parser, config)
        return 0
    if config is None:
        print("Error: no URL given", file=sys.stderr)
        return 1
    try:
        print(execute(config))
    except CcloadError as exc:
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
