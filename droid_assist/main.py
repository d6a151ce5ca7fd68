"""
Command-line entry point.

Subcommands:
- run: drive the purchase funnel until it completes, exhausts or is stopped
- classify: report the current page state
- dump: print the current UI tree
- find: query the current tree with a selector
- tap: click a point through the channel chain
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from .config import AssistConfig
from .errors import AssistError
from .runtime import Runtime, build_runtime
from .tree import describe, render_tree

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger("droid_assist")


def _print_json(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False, indent=2) + "\n")
    sys.stdout.flush()


def _cmd_run(rt: Runtime, args: argparse.Namespace) -> int:
    controller = rt.controller
    if not controller.start(retry_budget=args.retry_budget):
        return 1
    try:
        result = controller.wait()
    except KeyboardInterrupt:
        logger.info("interrupt received, stopping")
        controller.stop()
        result = controller.wait()
    if result is None:
        return 1
    _print_json(result.to_dict())
    return 0 if result.ok else 1


def _cmd_classify(rt: Runtime, args: argparse.Namespace) -> int:  # noqa: ARG001
    _print_json(rt.classifier.classify().to_dict())
    return 0


def _cmd_dump(rt: Runtime, args: argparse.Namespace) -> int:  # noqa: ARG001
    sys.stdout.write(render_tree(rt.query.snapshot()) + "\n")
    return 0


def _cmd_find(rt: Runtime, args: argparse.Namespace) -> int:
    nodes = rt.query.select(args.selector)
    if args.first:
        nodes = nodes[:1]
    _print_json({"selector": args.selector, "count": len(nodes), "nodes": [describe(n) for n in nodes]})
    return 0 if nodes else 1


def _cmd_tap(rt: Runtime, args: argparse.Namespace) -> int:
    from .channels import ActionKind

    result = rt.chain.dispatch(ActionKind.CLICK, args.x, args.y)
    _print_json(result.to_dict())
    return 0 if result.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="droid-assist", description="Drive an Android purchase funnel.")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_run = sub.add_parser("run", help="run the purchase funnel")
    p_run.add_argument("--retry-budget", type=int, default=None)
    p_run.set_defaults(handler=_cmd_run)

    p_classify = sub.add_parser("classify", help="classify the current page")
    p_classify.set_defaults(handler=_cmd_classify)

    p_dump = sub.add_parser("dump", help="print the current UI tree")
    p_dump.set_defaults(handler=_cmd_dump)

    p_find = sub.add_parser("find", help="query the current tree")
    p_find.add_argument("selector", help="//Class, A/B path, or Class[attr='value']")
    p_find.add_argument("--first", action="store_true")
    p_find.set_defaults(handler=_cmd_find)

    p_tap = sub.add_parser("tap", help="click a point through the channel chain")
    p_tap.add_argument("x", type=float)
    p_tap.add_argument("y", type=float)
    p_tap.set_defaults(handler=_cmd_tap)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        config = AssistConfig.from_env()
    except AssistError as exc:
        logger.error("%s", exc)
        _print_json(exc.to_dict())
        return 2
    rt = build_runtime(config)
    try:
        return int(args.handler(rt, args))
    finally:
        rt.close()


if __name__ == "__main__":
    sys.exit(main())
