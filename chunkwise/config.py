# file: chunkwise/chunkwise/config.py
import os
import logging
from typing import Any, Dict, Optional

import toml
from dotenv import load_dotenv

from chunkwise.utils.singleton import SingletonMeta

logger = logging.getLogger(__name__)

load_dotenv()

_NONE_VALUES = {"", "none", "null", "infinity", "inf"}


def _parse_optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in _NONE_VALUES:
        return None
    parsed = float(value)
    if parsed < 0:
        raise ValueError(f"Timeout must be a non-negative number of seconds. Got {value!r}.")
    return parsed


def _parse_optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in _NONE_VALUES:
        return None
    parsed = int(value)
    if parsed < 1:
        raise ValueError(f"max_workers must be a positive integer. Got {value!r}.")
    return parsed


class ChunkwiseConfig(metaclass=SingletonMeta):
    """
    Process-wide settings for chunkwise sessions.

    Values come from the environment (``.env`` files are loaded through
    python-dotenv) and may be overlaid by the ``[session]`` table of a TOML
    file named by ``CHUNKWISE_CONFIG_FILE``.

    ``max_workers`` sizes the session thread pool, which is created when the
    first session starts. Changing it afterwards only logs a warning.
    """

    DEFAULTS: Dict[str, Any] = {
        "default_timeout": 5.0,
        "text_encoding": "utf-8",
        "max_workers": 64,
        "log_level": None,
    }

    ENV_KEYS: Dict[str, str] = {
        "default_timeout": "CHUNKWISE_DEFAULT_TIMEOUT",
        "text_encoding": "CHUNKWISE_TEXT_ENCODING",
        "max_workers": "CHUNKWISE_MAX_WORKERS",
        "log_level": "CHUNKWISE_LOG_LEVEL",
    }

    def __init__(self, config_file: Optional[str] = None):
        self._config_file = config_file
        self._config: Dict[str, Any] = {}
        self.reload()

    def reload(self) -> None:
        """Re-reads defaults, the TOML overlay and the environment, in that order of precedence (lowest first)."""
        config = dict(self.DEFAULTS)

        config_file = self._config_file or os.getenv("CHUNKWISE_CONFIG_FILE")
        if config_file:
            config.update(self._load_toml(config_file))

        for key, env_name in self.ENV_KEYS.items():
            env_value = os.getenv(env_name)
            if env_value is not None:
                config[key] = env_value

        config["default_timeout"] = _parse_optional_float(config["default_timeout"])
        config["max_workers"] = _parse_optional_int(config["max_workers"])
        self._config = config
        self._apply_log_level()
        logger.debug(f"ChunkwiseConfig loaded: {self._config}")

    def _load_toml(self, path: str) -> Dict[str, Any]:
        try:
            with open(path, "r") as f:
                data = toml.load(f)
        except Exception as e:
            logger.error(f"Failed to load chunkwise config file '{path}': {e}")
            raise FileNotFoundError(f"Failed to load chunkwise config from PATH: {path}") from e
        section = data.get("session", {})
        unknown = set(section) - set(self.DEFAULTS)
        if unknown:
            logger.warning(f"Ignoring unknown keys in '{path}' [session]: {sorted(unknown)}")
        return {key: value for key, value in section.items() if key in self.DEFAULTS}

    def _apply_log_level(self) -> None:
        level = self._config.get("log_level")
        if level:
            logging.getLogger("chunkwise").setLevel(str(level).upper())

    @property
    def default_timeout(self) -> Optional[float]:
        return self._config["default_timeout"]

    @property
    def text_encoding(self) -> str:
        return self._config["text_encoding"]

    @property
    def max_workers(self) -> Optional[int]:
        return self._config["max_workers"]

    def get_all(self) -> Dict[str, Any]:
        return dict(self._config)

    def get(self, key: str) -> Any:
        return self._config.get(key)

    def set(self, key: str, value: Any) -> None:
        if key not in self.DEFAULTS:
            raise KeyError(f"Unknown chunkwise config key '{key}'. Known keys: {sorted(self.DEFAULTS)}")
        if key == "default_timeout":
            value = _parse_optional_float(value)
        elif key == "max_workers":
            value = _parse_optional_int(value)
        self._config[key] = value
        if key == "log_level":
            self._apply_log_level()


def get_config() -> ChunkwiseConfig:
    return ChunkwiseConfig()
