"""Configuration loading with YAML parsing and validation."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import HomologyConfig


def load_config(config_path: Path | str) -> HomologyConfig:
    """
    Load and validate homology configuration from a YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated HomologyConfig instance

    Raises:
        FileNotFoundError: If the YAML file is missing
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        yaml_content = f.read()

    # An empty file means "all defaults"
    if not yaml_content.strip():
        return HomologyConfig()

    return pydantic_yaml.parse_yaml_raw_as(HomologyConfig, yaml_content)


def load_config_with_overrides(
    config_path: Path | str | None,
    overrides: dict[str, Any],
) -> HomologyConfig:
    """
    Load config from YAML and apply dotted-key overrides.

    Backs the CLI's repeatable ``--set KEY=VALUE`` option. Values may be
    strings; pydantic coerces them to the field types.

    Args:
        config_path: Path to YAML configuration file, or None for defaults
        overrides: Values keyed by dotted path, e.g. "api.max_retries"

    Returns:
        Validated HomologyConfig with overrides applied

    Raises:
        FileNotFoundError: If the YAML file is missing
        KeyError: If an override names an unknown config section
        pydantic.ValidationError: If final config is invalid
    """
    config_dict = load_config_or_defaults(config_path).model_dump()

    for key, value in overrides.items():
        *sections, field = key.split(".")
        target = config_dict
        for section in sections:
            if not isinstance(target.get(section), dict):
                raise KeyError(f"unknown config section in override {key!r}")
            target = target[section]
        target[field] = value

    return HomologyConfig.model_validate(config_dict)


def load_config_or_defaults(config_path: Path | str | None) -> HomologyConfig:
    """Load config from YAML, or return the built-in defaults for None."""
    if config_path is None:
        return HomologyConfig()
    return load_config(config_path)
