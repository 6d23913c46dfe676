from __future__ import annotations

import argparse
import json
import sys

from .catalog import build_invoker
from .config import configure_logging, load_settings
from .gate import InvocationRequest, TerminalConfirmation, approve_all


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="toolgate", description="Agent retrieval and execution tools")
    parser.add_argument("--log-level", default=None, help="Override TOOLGATE_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List registered tools.")
    list_parser.add_argument("--category", default=None)
    list_parser.add_argument("--json", action="store_true", help="Print tool-calling definitions as JSON.")

    invoke_parser = sub.add_parser("invoke", help="Invoke one tool.")
    invoke_parser.add_argument("name")
    invoke_parser.add_argument(
        "--arg",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Tool argument; repeat for several.",
    )
    invoke_parser.add_argument("--yes", action="store_true", help="Approve tools that require confirmation.")
    return parser


def parse_tool_args(pairs: list[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got '{pair}'")
        out[key.strip()] = value
    return out


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "list":
        invoker = build_invoker(settings)
        if args.json:
            print(json.dumps(invoker.registry.definitions(category=args.category), indent=2))
            return 0
        for descriptor in invoker.registry.list(category=args.category, include_hidden=False):
            flags = " [confirm]" if descriptor.requires_confirmation else ""
            arg_names = ", ".join(a.name for a in descriptor.argument_schema)
            print(f"{descriptor.name}({arg_names}) <{descriptor.category}>{flags}")
            print(f"    {descriptor.description}")
        return 0

    try:
        tool_args = parse_tool_args(args.arg)
    except ValueError as exc:
        parser.error(str(exc))

    channel = approve_all if args.yes else TerminalConfirmation()
    invoker = build_invoker(settings, channel=channel)
    result = invoker.invoke(InvocationRequest(name=args.name, args=tool_args))
    print(result.content)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
