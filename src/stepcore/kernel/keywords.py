from __future__ import annotations

from typing import Protocol

from stepcore.domain.dialects import BULLET, Dialect


class KeywordedStep(Protocol):
    @property
    def keyword(self) -> str: ...

    @property
    def previous(self) -> KeywordedStep | None: ...


class Keywords:
    # Repeat-keyword knowledge for one dialect.
    def __init__(self, dialect: Dialect) -> None:
        self._dialect = dialect

    def repeat_keywords(self) -> tuple[str, ...]:
        seen: list[str] = []
        for keyword in (*self._dialect.keywords("but"), *self._dialect.keywords("and")):
            if keyword != BULLET and keyword not in seen:
                seen.append(keyword)
        return tuple(seen)

    def is_repeat(self, keyword: str) -> bool:
        return keyword in self.repeat_keywords()

    def star_code_keyword(self) -> str:
        # First concrete keyword that is not itself a repeater ("Given " in English).
        repeats = {keyword.strip() for keyword in self.repeat_keywords()}
        for keyword in self._dialect.step_keywords:
            if keyword.strip() not in repeats:
                return keyword
        raise ValueError(f"Dialect {self._dialect.code} has no non-repeat step keyword")


def resolve_keyword(step: KeywordedStep, dialect: Dialect) -> str:
    # Walk back over "And"/"But" steps to the nearest concrete keyword. The step
    # sequence is append-only and ordered, so the walk always terminates.
    keywords = Keywords(dialect)
    current = step
    while keywords.is_repeat(current.keyword):
        previous = current.previous
        if previous is None:
            break
        current = previous
    if current.keyword == BULLET:
        return keywords.star_code_keyword()
    return current.keyword
