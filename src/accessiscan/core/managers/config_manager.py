# src/accessiscan/core/managers/config_manager.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from accessiscan.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("1", "true", "yes", "on")


class ConfigManager:
    """
    Process-wide scanner configuration, read from the packaged settings.json.

    Values are addressed with dotted key paths ('session.time_out'). Changes
    made with `set_nested` live in memory only; `reset` goes back to the file.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._config = {}
            instance.reset()
            cls._instance = instance
            logger.debug("ConfigManager initialized.")
        return cls._instance

    # --- Loading ---

    @staticmethod
    def load_file(config_path: Path) -> Dict[str, Any]:
        """Reads a settings file. A missing or broken file yields an empty config."""
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            return {}
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", config_path, e, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring %s: top level is not an object.", config_path)
            return {}
        return data

    def reset(self) -> None:
        """Discards in-memory changes and reloads settings.json."""
        self._config = self.load_file(PathUtils.get_settings_file())
        logger.debug("Configuration has been (re)loaded from settings.json.")

    # --- Access ---

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def _parent_of(self, key_path: str, create: bool) -> Tuple[Optional[dict], str]:
        """The dict holding the last key of a dotted path, plus that key."""
        *parents, leaf = key_path.split('.')
        node: Any = self._config
        for key in parents:
            if not isinstance(node, dict):
                return None, leaf
            node = node.setdefault(key, {}) if create else node.get(key)
        return (node if isinstance(node, dict) else None), leaf

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Value at a dotted path, or `default` when any part of it is missing."""
        parent, leaf = self._parent_of(key_path, create=False)
        value = parent.get(leaf) if parent is not None else None
        return default if value is None else value

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Stores a value at a dotted path, creating intermediate sections.
        A value replacing an existing one is cast to the existing type
        (so 'false' stays a bool and '20' becomes an int).
        """
        parent, leaf = self._parent_of(key_path, create=True)
        if parent is None:
            logger.error("Cannot set '%s': a parent key is not a section.", key_path)
            return False

        current = parent.get(leaf)
        if current is not None:
            value = self._cast_like(current, value, key_path)

        parent[leaf] = value
        logger.info("Configuration updated: %s = %s", key_path, value)
        return True

    @staticmethod
    def _cast_like(current: Any, value: Any, key_path: str) -> Any:
        if isinstance(current, bool) and isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        try:
            return type(current)(value)
        except (ValueError, TypeError):
            logger.warning(
                "Could not cast new value for '%s' to type %s. Storing as given.",
                key_path, type(current).__name__
            )
            return value


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
