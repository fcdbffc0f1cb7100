from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from src.orchestration._models import EngineConfig
from src.utils._exceptions import ConfigurationError
from src.utils._logging import get_logger

_DEFAULT_CONFIG_PATH = Path("configs/engine.yaml")

_log = get_logger(__name__)


def load_engine_config(config_path: Path | None = None) -> EngineConfig:
    """Load and validate the engine config from a YAML file.

    An empty file yields the default settings.

    Args:
        config_path: Path to the YAML config. Defaults to configs/engine.yaml.

    Returns:
        Validated EngineConfig model.

    Raises:
        ConfigurationError: If the file is missing, unreadable, or invalid.
    """
    path = config_path or _DEFAULT_CONFIG_PATH

    if not path.exists():
        msg = f"Config file not found: {path}"
        raise ConfigurationError(msg)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {path}, got {type(data).__name__}"
        raise ConfigurationError(msg)

    try:
        config = EngineConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Config validation failed for {path}: {exc}"
        raise ConfigurationError(msg) from exc

    _log.info("engine_config_loaded", path=str(path))
    return config
