from __future__ import annotations

from dataclasses import dataclass
from functools import cache
from importlib import resources

import yaml

BULLET = "* "
KEYWORD_KINDS = ("given", "when", "then", "and", "but")


class UnknownDialectError(KeyError):
    pass


@dataclass(frozen=True, slots=True)
class Dialect:
    # Keyword table of one natural language, as loaded from dialects.yaml.
    code: str
    name: str
    given: tuple[str, ...]
    when: tuple[str, ...]
    then: tuple[str, ...]
    and_: tuple[str, ...]
    but: tuple[str, ...]

    def keywords(self, kind: str) -> tuple[str, ...]:
        if kind not in KEYWORD_KINDS:
            raise ValueError(f"Unknown keyword kind: {kind}")
        return getattr(self, "and_" if kind == "and" else kind)

    @property
    def step_keywords(self) -> tuple[str, ...]:
        # All concrete keywords in given/when/then/and/but order, bullet excluded.
        ordered: list[str] = []
        for kind in KEYWORD_KINDS:
            for keyword in self.keywords(kind):
                if keyword != BULLET and keyword not in ordered:
                    ordered.append(keyword)
        return tuple(ordered)


@cache
def _dialect_table() -> dict[str, dict[str, object]]:
    text = resources.files("stepcore.domain").joinpath("dialects.yaml").read_text(encoding="utf-8")
    raw = yaml.safe_load(text)
    if not isinstance(raw, dict):
        raise ValueError("dialects.yaml root must be a mapping")
    return raw


def available_dialects() -> list[str]:
    return sorted(_dialect_table())


@cache
def load_dialect(code: str) -> Dialect:
    table = _dialect_table()
    if code not in table:
        raise UnknownDialectError(code)
    entry = table[code]
    return Dialect(
        code=code,
        name=str(entry["name"]),
        given=tuple(entry["given"]),
        when=tuple(entry["when"]),
        then=tuple(entry["then"]),
        and_=tuple(entry["and"]),
        but=tuple(entry["but"]),
    )
