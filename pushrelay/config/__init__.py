"""Configuration loading.

Settings come from a YAML file whose values may reference environment
variables as ``${VAR}``. A ``.env`` file is loaded first so those variables
can live next to the deployment:

    from pushrelay.config import load_settings
    config = load_settings()
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from pushrelay.config.loader import load_config
from pushrelay.config.schema import ExpoConfig, FeedConfig, FirebaseConfig, ProbeConfig, PushRelayConfig
from pushrelay.constants import DEFAULT_CONFIG_PATH, ENV_CONFIG_PATH, ENV_DOTENV_PATH


def load_settings(config_path: Optional[Path] = None) -> PushRelayConfig:
    """Load ``.env`` then the YAML config.

    ``PUSHRELAY_ENV_PATH`` overrides the ``.env`` location (default: ``./.env``)
    and ``PUSHRELAY_CONFIG_PATH`` overrides the config file location.
    """
    env_path = os.getenv(ENV_DOTENV_PATH)
    dotenv_path = Path(env_path).expanduser() if env_path else Path.cwd() / ".env"
    load_dotenv(dotenv_path)

    if config_path is None:
        config_path = Path(os.getenv(ENV_CONFIG_PATH, DEFAULT_CONFIG_PATH)).expanduser()
    return load_config(config_path)


__all__ = [
    "ExpoConfig",
    "FeedConfig",
    "FirebaseConfig",
    "ProbeConfig",
    "PushRelayConfig",
    "load_config",
    "load_settings",
]
