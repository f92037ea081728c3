"""
Configuration loader for the Behavior Probe system.

Handles parsing and validation of YAML configuration files.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

from .config import EXECUTION_TIMEOUT_SECONDS


class ProbeConfig(BaseModel):
    """
    Settings of the reflective probe.
    """
    denied_packages: list[str] = Field(
        default_factory=list, description="Module prefixes whose classes the probe must not access"
    )
    submission_path: Optional[Path] = Field(None, description="Directory prepended to sys.path for submission imports")


class GraderConfig(BaseModel):
    """
    Configuration model for the grading runner.
    """
    submissions_dir: Path = Field(..., description="Path to directory containing student submissions")
    tests_dir: Path = Field(..., description="Path to the grading test suite")
    grades_dir: Optional[Path] = Field(None, description="Path to save aggregated grades")
    probe_config: Optional[Path] = Field(None, description="Path to the probe YAML configuration")
    timeout_seconds: int = Field(EXECUTION_TIMEOUT_SECONDS, gt=0, description="Per-submission time limit")
    python_executable: Optional[str] = Field(None, description="Interpreter used to run the grading suite")
    verbose: bool = Field(False, description="Enable verbose output")


def _read_yaml(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f)

    return config_data or {}


def _resolve_paths(config_data: Dict[str, Any], config_dir: Path, fields: list[str]) -> None:
    for path_field in fields:
        if path_field in config_data and config_data[path_field]:
            path = Path(config_data[path_field])
            if not path.is_absolute():
                config_data[path_field] = config_dir / path


def load_config(config_path: Path) -> GraderConfig:
    """
    Load the grading configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        GraderConfig object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    config_data = _read_yaml(config_path)

    # Resolve relative paths relative to the config file location
    _resolve_paths(
        config_data,
        config_path.parent,
        ["submissions_dir", "tests_dir", "grades_dir", "probe_config"],
    )

    return GraderConfig(**config_data)


def load_probe_config(config_path: Path) -> ProbeConfig:
    """
    Load probe settings from a YAML file.

    An empty file yields the defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    config_data = _read_yaml(config_path)
    _resolve_paths(config_data, config_path.parent, ["submission_path"])
    return ProbeConfig(**config_data)
