from .cli import build_parser, parse_args, resolve_config, run

# app package exports CLI helpers for reuse in tests and entrypoints.
__all__ = ["build_parser", "parse_args", "resolve_config", "run"]
