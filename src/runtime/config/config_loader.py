"""Configuration loading with environment variable substitution."""

from pathlib import Path
from typing import Any, Literal, overload

import yaml
from loguru import logger
from pydantic import ValidationError

from src.runtime.config.config_data import ConfigData
from src.runtime.config.config_utils import substitute_env_vars

CONFIG_PATH = Path("config.yaml")


@overload
def load_config(
    file_path: Path = ..., *, processed: Literal[False]
) -> dict[str, Any]: ...


@overload
def load_config(
    file_path: Path = ..., processed: Literal[True] = ...
) -> ConfigData: ...


def load_config(
    file_path: Path = CONFIG_PATH, processed: bool = True
) -> ConfigData | dict[str, Any]:
    """Read config.yaml into ConfigData.

    The file must hold a top-level `config:` mapping. With `processed=False`
    the raw YAML dict comes back untouched (no substitution, no validation),
    which is how tooling inspects the file without CI variables set.

    Raises:
        ValueError: Missing variable, invalid YAML, missing `config:` key or
                    a field that fails validation
        FileNotFoundError: If the file does not exist
    """
    content = Path(file_path).read_text()

    if processed:
        logger.info(f"Loading configuration from {file_path}")
        content = substitute_env_vars(content)

    try:
        loaded: dict[str, Any] = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not processed:
        return loaded

    if "config" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'config' key")

    try:
        config = ConfigData(**(loaded["config"] or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    logger.debug(
        f"Registry {config.registry.host}/{config.registry.project_id}, "
        f"cluster backend {config.cluster.backend}"
    )
    return config


def load_config_or_default(file_path: Path | None) -> ConfigData:
    """Load config from a file, falling back to defaults when it is absent."""
    path = file_path or CONFIG_PATH
    if not path.exists():
        if file_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        logger.info(f"No {path} found, using default configuration")
        return ConfigData()
    return load_config(path)
