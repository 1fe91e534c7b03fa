"""
Module: botguard.__main__

Command line front end for the validation layer.

The `repl` subcommand is a local stand-in for the chat front end: every line is
tokenized and checked exactly as a wizard would before spawning anything.
"""

import argparse
import json
import sys
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.history import FileHistory

from botguard.config import DEFAULT_PATH_HIST, config
from botguard.executable import (
    PathResolver,
    ValidationVerdict,
    get_resolver,
    validate_executable,
)
from botguard.paths.allowlist import get_allowed_paths, is_path_allowed, set_allowed_paths
from botguard.paths.setup import add_allowed_path, parse_paths, update_env_file
from botguard.text.tokenize import parse_command_args, split_command, tokenize

ESCAPE = "\x1b"
RESET = ESCAPE + "[0m"
BOLD = ESCAPE + "[1m"


def print_verdict(command: str, verdict: ValidationVerdict) -> None:
    if verdict.ok:
        print(f"{BOLD}allowed{RESET} {command}")
    else:
        print(f"{BOLD}denied{RESET} ({verdict.error.value}) {verdict.message}")
    for warning in verdict.warnings:
        print(f"warning: {warning}")
    if verdict.flags:
        print(f"confirm: {verdict.flags.explain()}")
        print(f"command: {verdict.flags.command}")


def check_command(line: str, resolver: PathResolver) -> ValidationVerdict:
    spec = split_command(line)
    if spec is None:
        return validate_executable("", resolver=resolver)
    return validate_executable(spec.executable, spec.argv, resolver=resolver)


def check_paths(paths: List[str]) -> bool:
    ok = True
    for path in paths:
        allowed = is_path_allowed(path)
        ok = ok and allowed
        print(f"{'allowed' if allowed else 'denied'} {path}")
    return ok


def allow(args: argparse.Namespace) -> int:
    if args.action == "list":
        paths = get_allowed_paths()
        if not paths:
            print("No allowed paths. Every path is denied.")
        for path in paths:
            print(path)
        return 0

    if args.action == "set":
        valid, invalid = parse_paths(args.value)
        for check in invalid:
            print(f"skipped: {check.error}")
        if not valid:
            print("No valid paths given.")
            return 1
        if args.persist:
            update_env_file(valid)
        set_allowed_paths(valid)
        for path in valid:
            print(path)
        return 0

    # add
    check = add_allowed_path(args.value, persist=args.persist)
    if check.warning:
        print(f"warning: {check.warning}")
    if not check.valid:
        print(f"error: {check.error}")
        return 1
    print(check.path)
    return 0


def repl(resolver: PathResolver) -> int:
    session = PromptSession(
        history=FileHistory(config.get_value("history.path", DEFAULT_PATH_HIST))
    )
    print("Type a command line to validate, /cd PATH to check a path, /allowed to list.")

    while True:
        try:
            line = session.prompt("> ", auto_suggest=AutoSuggestFromHistory()).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nQuit.")
            return 0

        if not line:
            continue
        if line.lower() in ("exit", "quit"):
            print("Exiting.")
            return 0
        if line == "/allowed":
            for path in get_allowed_paths():
                print(path)
        elif line == "/cd" or line.startswith("/cd "):
            check_paths(parse_command_args(line) or ["."])
        else:
            print_verdict(line, check_command(line, resolver))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="botguard",
        description="Validate paths and executables before a chat bot touches the host",
    )
    parser.add_argument(
        "--resolver",
        choices=["subprocess", "shutil"],
        default=None,
        help="PATH lookup strategy (default: lookup.resolver in the settings)",
    )
    subparsers = parser.add_subparsers(dest="command")

    path = subparsers.add_parser("path", help="Check paths against the allowlist")
    path.add_argument("paths", nargs="+", help="Paths to check")

    exec_ = subparsers.add_parser("exec", help="Validate a command line")
    exec_.add_argument("line", help="Full command line, e.g. 'node server.js --port 3000'")

    tokenize_ = subparsers.add_parser("tokenize", help="Show how a line is tokenized")
    tokenize_.add_argument("text", help="Text to tokenize")

    allow_ = subparsers.add_parser("allow", help="Inspect or change the allowlist")
    allow_.add_argument("action", choices=["list", "set", "add"])
    allow_.add_argument("value", nargs="?", default="", help="Comma separated paths or a path")
    allow_.add_argument(
        "--no-persist",
        dest="persist",
        action="store_false",
        help="Only change the running process, leave the dotenv file alone",
    )

    subparsers.add_parser("repl", help="Interactive validation prompt")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "path":
        return 0 if check_paths(args.paths) else 1
    elif args.command == "exec":
        verdict = check_command(args.line, get_resolver(args.resolver))
        print_verdict(args.line, verdict)
        return 0 if verdict.ok else 1
    elif args.command == "tokenize":
        print(json.dumps(tokenize(args.text), ensure_ascii=False))
        return 0
    elif args.command == "allow":
        if args.action != "list" and not args.value:
            parser.error(f"allow {args.action} requires a value")
        return allow(args)
    elif args.command == "repl":
        return repl(get_resolver(args.resolver))

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
