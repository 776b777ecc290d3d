"""Layered settings: defaults < env < config file."""
import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

logger = logging.getLogger(__name__)

_PARSERS: dict[str, tuple[Callable[[str], Any], type]] = {
    ".yaml": (yaml.safe_load, yaml.YAMLError),
    ".yml": (yaml.safe_load, yaml.YAMLError),
    ".json": (json.loads, json.JSONDecodeError),
}


def read_config_file(path: Path) -> dict[str, Any]:
    """Parse a YAML/JSON mapping of setting names to values.

    The file is optional: a missing, unreadable or malformed file yields {}
    (with a warning) so the service still starts from env and defaults.
    """
    if not path.exists():
        logger.debug("No config file at %s; using env/defaults", path)
        return {}

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        logger.warning("Ignoring config file %s: expected .yaml, .yml or .json", path)
        return {}
    load, parse_error = parser

    try:
        data = load(path.read_text())
    except OSError as e:
        logger.warning("Could not read config file %s: %s", path, e)
        return {}
    except parse_error as e:
        logger.warning("Ignoring malformed config file %s: %s", path, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is %s, not a mapping", path, type(data).__name__)
        return {}
    return data


class ConfigStore:
    """Builds the Settings value once from env and the optional config file."""

    def __init__(self, settings_cls: type, config_file_path: Optional[str] = None):
        self._settings_cls = settings_cls
        self._path = Path(config_file_path).expanduser().resolve() if config_file_path else None
        self._current = None

    def _layers(self) -> dict[str, Any]:
        values = self._settings_cls().model_dump()
        if self._path is not None:
            from_file = read_config_file(self._path)
            if from_file:
                logger.info("Config file %s applied over env (%d keys)", self._path, len(from_file))
            values.update(from_file)
        return values

    def load_initial(self) -> None:
        self._current = self._settings_cls(**self._layers())

    def get_settings(self):
        if self._current is None:
            self.load_initial()
        return self._current
