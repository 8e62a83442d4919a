from .loader import ConfigError, apply_env_overrides, load_plan, load_run_config
from .models import LogConfig, PlanConfig, PlanScenario, PlanStep, RunConfig

# Config exports are intentionally small.
__all__ = [
    "ConfigError",
    "LogConfig",
    "PlanConfig",
    "PlanScenario",
    "PlanStep",
    "RunConfig",
    "apply_env_overrides",
    "load_plan",
    "load_run_config",
]
