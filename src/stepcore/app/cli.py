from __future__ import annotations

import argparse
import importlib
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TextIO

from stepcore.adapters.log_sinks import build_log_sink
from stepcore.config.loader import apply_env_overrides, load_plan, load_run_config
from stepcore.config.models import RunConfig
from stepcore.kernel.backtrace import BacktraceOptions, filter_backtrace
from stepcore.kernel.composition_root import build_suite, exit_code, run_suite

# The CLI is a thin wrapper around the composition root; step logic lives in the kernel.


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stepcore", description="Behavior-driven step runner")
    commands = parser.add_subparsers(dest="command", required=True)

    run_cmd = commands.add_parser("run", help="Run a YAML plan against step definitions")
    run_cmd.add_argument("--plan", required=True, help="Path to YAML plan")
    run_cmd.add_argument(
        "--steps",
        action="append",
        required=True,
        help="Importable module with @step_definition functions (repeatable)",
    )
    _add_common_flags(run_cmd)
    run_cmd.add_argument("--strict", action="store_true", default=None, help="Report undefined steps as failures")
    run_cmd.add_argument("--dry-run", action="store_true", default=None, help="Resolve bindings without running them")

    filter_cmd = commands.add_parser("filter-backtrace", help="Filter a trace read from a file or stdin")
    filter_cmd.add_argument("file", nargs="?", help="Trace file, one frame per line (default: stdin)")
    filter_cmd.add_argument("--cwd", help="Directory rewritten to './' (default: current directory)")
    _add_common_flags(filter_cmd)
    return parser


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to YAML run config")
    parser.add_argument("--full-backtrace", action="store_true", default=None, help="Disable trace filtering")
    parser.add_argument("--truncate", action="store_true", default=None, help="Keep only file:line of each frame")


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    # Parse CLI arguments; caller passes argv for testability.
    return build_parser().parse_args(argv)


def resolve_config(args: argparse.Namespace, environ: Mapping[str, str] | None = None) -> RunConfig:
    # Precedence: CLI flags over environment over config file over defaults.
    config = load_run_config(Path(args.config)) if args.config else RunConfig()
    config = apply_env_overrides(config, os.environ if environ is None else environ)
    updates: dict[str, bool] = {}
    if args.full_backtrace is not None:
        updates["full_backtrace"] = args.full_backtrace
    if args.truncate is not None:
        updates["truncate_output"] = args.truncate
    if getattr(args, "strict", None) is not None:
        updates["strict"] = args.strict
    if getattr(args, "dry_run", None) is not None:
        updates["dry_run"] = args.dry_run
    return config.model_copy(update=updates) if updates else config


def run_plan(args: argparse.Namespace, config: RunConfig, *, out: TextIO) -> int:
    plan_path = Path(args.plan)
    plan = load_plan(plan_path)
    modules = [importlib.import_module(name) for name in args.steps]
    suite = build_suite(config=config, plan=plan, modules=modules, plan_file=str(plan_path))
    log_sink = build_log_sink(config.log)
    try:
        visitor = run_suite(suite, log_sink=log_sink)
    finally:
        close = getattr(log_sink, "close", None)
        if close is not None:
            close()
    print(visitor.summary(), file=out)
    return exit_code(visitor.status, strict=config.strict)


def filter_trace(args: argparse.Namespace, config: RunConfig, *, stdin: TextIO, out: TextIO) -> int:
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = stdin.read()
    frames = [line for line in text.splitlines() if line.strip()]
    options = BacktraceOptions.from_config(config, cwd=args.cwd)
    for frame in filter_backtrace(frames, options):
        print(frame, file=out)
    return 0


def run(argv: Sequence[str] | None = None, *, stdin: TextIO | None = None, out: TextIO | None = None) -> int:
    args = parse_args(argv)
    config = resolve_config(args)
    stream_in = sys.stdin if stdin is None else stdin
    stream_out = sys.stdout if out is None else out
    if args.command == "run":
        return run_plan(args, config, out=stream_out)
    return filter_trace(args, config, stdin=stream_in, out=stream_out)
