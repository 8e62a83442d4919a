from __future__ import annotations

import os
import platform
import re
import traceback
from dataclasses import dataclass
from typing import Protocol

from stepcore.domain.errors import StepError

# Frames pointing into these locations never help a user diagnose a failing step:
# vendored code, this package and its entry point, test/assertion libraries,
# and anything installed by a package manager.
INTERNAL_PATTERNS: tuple[str, ...] = (
    r"vendor/",
    r"/stepcore/",
    r"bin/stepcore",
    r"_pytest/",
    r"pluggy/",
    r"unittest/",
    r"hamcrest/",
    r"site-packages/",
    r"dist-packages/",
    r"gems/",
    r"/\.gem/",
)

# PyPy surfaces its RPython bridge as frames of their own.
PYPY_PATTERNS: tuple[str, ...] = (r"lib_pypy/", r"<builtin>/")

_CONTEXT_SUFFIX = re.compile(r"^(.*): in ", re.DOTALL)


class BacktraceSettings(Protocol):
    full_backtrace: bool
    truncate_output: bool


def default_patterns() -> tuple[str, ...]:
    if platform.python_implementation() == "PyPy":
        return INTERNAL_PATTERNS + PYPY_PATTERNS
    return INTERNAL_PATTERNS


@dataclass(frozen=True, slots=True)
class BacktraceOptions:
    # Everything the filter needs; built per call so the filter never reads process state.
    cwd: str
    full_backtrace: bool = False
    truncate: bool = False
    patterns: tuple[str, ...] = INTERNAL_PATTERNS

    @classmethod
    def from_config(cls, config: BacktraceSettings, *, cwd: str | None = None) -> BacktraceOptions:
        return cls(
            cwd=os.getcwd() if cwd is None else cwd,
            full_backtrace=config.full_backtrace,
            truncate=config.truncate_output,
            patterns=default_patterns(),
        )


def filter_backtrace(frames: list[str], options: BacktraceOptions) -> list[str]:
    # Rewrites cwd prefixes in place, then returns the frames that survive filtering.
    if options.full_backtrace:
        return frames

    prefix = options.cwd.rstrip("/") + "/"
    for index, frame in enumerate(frames):
        if frame.startswith(prefix):
            frames[index] = "./" + frame[len(prefix):]

    internal = re.compile("|".join(options.patterns)) if options.patterns else None
    filtered = [frame for frame in frames if internal is None or internal.search(frame) is None]

    if options.truncate:
        filtered = [_strip_context(frame) for frame in filtered]
    return filtered


def _strip_context(frame: str) -> str:
    found = _CONTEXT_SUFFIX.match(frame)
    return found.group(1) if found else frame


def frames_from_exception(error: BaseException) -> list[str] | None:
    # Report frames are ordered innermost first; None when the error carries no trace at all.
    # Interpreter frames serve embedders filtering foreign errors; step errors bring their own.
    if isinstance(error, StepError) and error.backtrace is not None:
        return list(error.backtrace)
    if error.__traceback__ is None:
        return None
    summary = traceback.extract_tb(error.__traceback__)
    return [f"{frame.filename}:{frame.lineno}: in `{frame.name}`" for frame in reversed(summary)]
