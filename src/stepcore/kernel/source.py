from __future__ import annotations

import re
from dataclasses import dataclass

from stepcore.domain.dialects import Dialect
from stepcore.domain.tables import MultilineArg


@dataclass(frozen=True, slots=True)
class StepSource:
    # The literal step as written in a plan or feature file.
    keyword: str
    text: str
    file: str = ""
    line: int | None = None
    language: Dialect | None = None
    multiline_arg: MultilineArg | None = None

    @property
    def file_colon_line(self) -> str | None:
        if not self.file or self.line is None:
            return None
        return f"{self.file}:{self.line}"

    @property
    def backtrace_line(self) -> str | None:
        # Same frame shape as interpreter frames so the filter treats both alike.
        location = self.file_colon_line
        if location is None:
            return None
        return f"{location}: in `{self.keyword}{self.text}`"

    @property
    def dom_id(self) -> str:
        # Stable HTML-safe identifier; falls back to the step text without a location.
        slug = re.sub(r"[^A-Za-z0-9]+", "_", self.file_colon_line or self.text).strip("_")
        return f"step_{slug}"

    def text_length(self, name: str | None = None) -> int:
        return len(self.keyword) + len(self.text if name is None else name)
