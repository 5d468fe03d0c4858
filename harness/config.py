"""Harness configuration with YAML support."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import Field

from evaluator.schemas import BaseSchema
from sandbox import policy

DEFAULT_TIME_LIMIT_MS = 5000
DEFAULT_MEMORY_LIMIT_MB = 256
DEFAULT_MAX_CODE_SIZE = 50_000


class HarnessConfig(BaseSchema):
    """Execution budget and sandbox policy for a test run."""

    # Wall-clock budget for one invocation of the entry point
    time_limit_ms: int = Field(default=DEFAULT_TIME_LIMIT_MS, gt=0)

    # Address-space limit for the child interpreter (Unix only)
    memory_limit_mb: int = Field(default=DEFAULT_MEMORY_LIMIT_MB, gt=0)

    # Fragments larger than this many UTF-8 bytes are rejected before running
    max_code_size: int = Field(default=DEFAULT_MAX_CODE_SIZE, gt=0)

    allowed_modules: list[str] = Field(default_factory=lambda: list(policy.ALLOWED_MODULES))


def load_config(yaml_path: str | Path) -> HarnessConfig:
    """Load harness configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        HarnessConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or contains invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if data is None:
        return HarnessConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {yaml_path}")

    try:
        return HarnessConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: HarnessConfig, yaml_path: str | Path) -> None:
    """Save harness configuration to YAML file.

    Args:
        config: HarnessConfig to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()

    with open(yaml_path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
