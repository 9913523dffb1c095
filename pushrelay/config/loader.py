from pathlib import Path
from typing import Optional

import structlog
import yaml
from pydantic import BaseModel

from pushrelay.config.schema import PushRelayConfig
from pushrelay.constants import DEFAULT_CONFIG_PATH
from pushrelay.utils import expand_env_vars

logger = structlog.get_logger(__name__)


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))

    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)


def load_config(path: Optional[Path] = None) -> PushRelayConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to the pushrelay.yml file. Defaults to ~/.pushrelay/pushrelay.yml.

    Returns:
        The validated configuration. Defaults when the file does not exist or
        cannot be read.
    """
    if path is None:
        path = Path(DEFAULT_CONFIG_PATH).expanduser()

    if not path.exists():
        return PushRelayConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except Exception as e:
        logger.warning("Failed to read config file %s: %s", path, e)
        return PushRelayConfig()

    expanded = expand_env_vars(raw)
    model = PushRelayConfig.model_validate(expanded)
    _warn_unknown_keys(model, "root", path)
    return model
