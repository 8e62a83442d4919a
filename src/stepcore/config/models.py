from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Config models map YAML files to typed structures.


class LogConfig(BaseModel):
    # Where step log messages go and how verbose they are.
    model_config = ConfigDict(extra="forbid")
    sink: Literal["stdout", "jsonl", "none"] = "stdout"
    path: str | None = None
    level: Literal["debug", "info", "warning", "error"] = "info"

    @model_validator(mode="after")
    def _require_path_for_jsonl(self) -> LogConfig:
        if self.sink == "jsonl" and not self.path:
            raise ValueError("log.path is required when log.sink is 'jsonl'")
        return self


class RunConfig(BaseModel):
    # Read-only run settings consulted by every step invocation.
    model_config = ConfigDict(extra="forbid")
    dry_run: bool = False
    strict: bool = False
    full_backtrace: bool = False
    truncate_output: bool = False
    # Skip the rest of a collection once any of its steps captured an error.
    fail_fast: bool = True
    language: str = "en"
    log: LogConfig = Field(default_factory=LogConfig)


class PlanStep(BaseModel):
    # One literal step of a plan; table and doc_string are mutually exclusive.
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)
    keyword: str
    text: str
    line: int | None = None
    table: list[list[str]] | None = None
    doc_string: str | None = None

    @model_validator(mode="after")
    def _single_multiline_arg(self) -> PlanStep:
        if self.table is not None and self.doc_string is not None:
            raise ValueError("A step takes either a table or a doc_string, not both")
        return self


class PlanScenario(BaseModel):
    # Scenario or outline; examples[0] is the header row.
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)
    name: str
    steps: list[PlanStep]
    examples: list[list[str]] | None = None

    @model_validator(mode="after")
    def _examples_have_header_and_rows(self) -> PlanScenario:
        if self.examples is not None and len(self.examples) < 2:
            raise ValueError(f"Scenario '{self.name}' examples need a header row and at least one row")
        return self


class PlanConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    language: str | None = None
    background: list[PlanStep] = Field(default_factory=list)
    scenarios: list[PlanScenario]
