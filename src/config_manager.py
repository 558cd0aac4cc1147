import dataclasses
import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

from errors import ConfigError, DefaultsFrozenError
from logger import log


@dataclass(frozen=True)
class BrowserDefaults:
    file_actions: tuple = ()
    on_file_action: Optional[Callable[[Any], Any]] = None
    double_click_delay: int = 300  # ms
    disable_selection: bool = False
    # True drops every default action; an iterable of ids drops only those
    disable_default_file_actions: Any = False
    disable_drag_and_drop: bool = False
    disable_drag_and_drop_provider: bool = False
    default_sort_action_id: Optional[str] = "sort_files_by_name"
    default_file_view_action_id: Optional[str] = "enable_list_view"
    clear_selection_on_outside_click: bool = True
    icon_component: Any = None
    allow_action_override: bool = False
    default_show_hidden: bool = False
    default_folders_first: bool = True

    @classmethod
    def option_names(cls):
        return tuple(f.name for f in dataclasses.fields(cls))

    def merged(self, **options) -> "BrowserDefaults":
        unknown = set(options) - set(self.option_names())
        if unknown:
            raise ConfigError(f"Unknown browser option(s): {', '.join(sorted(unknown))}")
        if "file_actions" in options:
            options["file_actions"] = tuple(options["file_actions"] or ())
        if isinstance(options.get("disable_default_file_actions"), (list, set)):
            options["disable_default_file_actions"] = frozenset(options["disable_default_file_actions"])
        if "double_click_delay" in options and int(options["double_click_delay"]) < 0:
            raise ConfigError("double_click_delay must not be negative")
        return dataclasses.replace(self, **options)


class ConfigManager:
    """
    Process-wide browser defaults. Set once before the first browser is
    constructed; frozen from then on.
    """

    def __init__(self):
        self._defaults = BrowserDefaults()
        self._frozen = False

    @property
    def defaults(self) -> BrowserDefaults:
        return self._defaults

    @property
    def frozen(self):
        return self._frozen

    def set_defaults(self, **options):
        if self._frozen:
            raise DefaultsFrozenError(
                "Global defaults cannot change after a file browser has been created")
        self._defaults = self._defaults.merged(**options)
        log.info(f"Global browser defaults updated: {', '.join(sorted(options))}")
        return self._defaults

    def load_defaults(self, path):
        """Read defaults from a JSON object file. Unreadable files are logged and ignored."""
        if not os.path.exists(path):
            log.warning(f"Defaults file {path} not found.")
            return self._defaults
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.error(f"Error loading defaults from {path}: {e}")
            return self._defaults
        if not isinstance(data, dict):
            log.error(f"Defaults file {path} must contain a JSON object")
            return self._defaults
        return self.set_defaults(**data)

    def freeze(self):
        self._frozen = True

    def resolve(self, **overrides) -> BrowserDefaults:
        """Per-instance configuration: global defaults plus explicit overrides. Freezes the defaults."""
        self.freeze()
        return self._defaults.merged(**overrides)


# Global instance
config = ConfigManager()


def set_global_defaults(**options):
    return config.set_defaults(**options)


def get_global_defaults() -> BrowserDefaults:
    return config.defaults


def load_global_defaults(path):
    return config.load_defaults(path)
