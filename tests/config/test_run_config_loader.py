from __future__ import annotations

from pathlib import Path

import pytest

from stepcore.config.loader import ConfigError, apply_env_overrides, load_plan, load_run_config
from stepcore.config.models import RunConfig


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_run_config_loads_yaml(tmp_path: Path) -> None:
    # Nested log settings are parsed into LogConfig.
    path = _write(
        tmp_path,
        "run.yml",
        "strict: true\ntruncate_output: true\nlog:\n  sink: jsonl\n  path: out/run.jsonl\n  level: debug\n",
    )
    config = load_run_config(path)
    assert config.strict is True
    assert config.truncate_output is True
    assert config.full_backtrace is False
    assert config.log.sink == "jsonl"
    assert config.log.level == "debug"


def test_empty_run_config_uses_defaults(tmp_path: Path) -> None:
    # An empty YAML file is an empty mapping.
    assert load_run_config(_write(tmp_path, "run.yml", "")) == RunConfig()


def test_run_config_root_must_be_a_mapping(tmp_path: Path) -> None:
    # A list root is rejected before validation.
    with pytest.raises(ConfigError):
        load_run_config(_write(tmp_path, "run.yml", "- strict\n"))


def test_run_config_rejects_unknown_keys(tmp_path: Path) -> None:
    # Unknown keys fail fast.
    with pytest.raises(ConfigError):
        load_run_config(_write(tmp_path, "run.yml", "colour: true\n"))


def test_jsonl_log_sink_requires_a_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_run_config(_write(tmp_path, "run.yml", "log:\n  sink: jsonl\n"))


def test_env_overrides_flip_booleans() -> None:
    # Present variables win; unrelated variables are ignored.
    config = apply_env_overrides(
        RunConfig(strict=True),
        {"STEPCORE_FULL_BACKTRACE": "yes", "STEPCORE_STRICT": "0", "UNRELATED": "1"},
    )
    assert config.full_backtrace is True
    assert config.strict is False
    assert config.dry_run is False


def test_env_overrides_without_variables_return_same_config() -> None:
    config = RunConfig()
    assert apply_env_overrides(config, {}) is config


def test_plan_requires_scenarios(tmp_path: Path) -> None:
    # A plan without scenarios is rejected.
    with pytest.raises(ConfigError):
        load_plan(_write(tmp_path, "plan.yml", "background: []\n"))


def test_plan_step_takes_one_multiline_argument(tmp_path: Path) -> None:
    # Table and doc_string are mutually exclusive.
    text = (
        "scenarios:\n"
        "  - name: both\n"
        "    steps:\n"
        "      - keyword: 'Given '\n"
        "        text: a step\n"
        "        table: [[a]]\n"
        "        doc_string: body\n"
    )
    with pytest.raises(ConfigError):
        load_plan(_write(tmp_path, "plan.yml", text))


def test_plan_coerces_numbers_in_tables_and_examples(tmp_path: Path) -> None:
    # YAML numbers in tables and examples become strings.
    text = (
        "language: fr\n"
        "scenarios:\n"
        "  - name: eating\n"
        "    steps:\n"
        "      - keyword: 'Soit '\n"
        "        text: j'ai <n> concombres\n"
        "        table: [[count], [3]]\n"
        "    examples: [[n], [5], [12]]\n"
    )
    plan = load_plan(_write(tmp_path, "plan.yml", text))
    assert plan.language == "fr"
    scenario = plan.scenarios[0]
    assert scenario.examples == [["n"], ["5"], ["12"]]
    assert scenario.steps[0].table == [["count"], ["3"]]


def test_examples_need_at_least_one_row(tmp_path: Path) -> None:
    # A header row alone is not a valid examples table.
    text = "scenarios:\n  - name: empty\n    steps: []\n    examples: [[n]]\n"
    with pytest.raises(ConfigError):
        load_plan(_write(tmp_path, "plan.yml", text))
