from typing import Iterable, Optional

from browser_store import selected_files
from errors import DuplicateActionIdError, UnknownActionError
from file_action import FileAction
from logger import log


class ActionRegistry:
    """
    Closed, read-only set of file actions for one browser instance.
    Built once at construction; re-registering means building a new registry.
    """

    def __init__(self, actions: Iterable[FileAction] = ()):
        self._actions = {}
        for action in actions:
            if not isinstance(action, FileAction):
                raise TypeError(f"Expected FileAction, got {action!r}")
            if action.id in self._actions:
                raise DuplicateActionIdError(action.id)
            self._actions[action.id] = action

    @classmethod
    def register(cls, actions: Iterable[FileAction]) -> "ActionRegistry":
        return cls(actions)

    @classmethod
    def build(cls, builtin, host=(), allow_override=False) -> "ActionRegistry":
        """
        Merge built-in actions with host actions. A host action may replace a
        built-in with the same id only when allow_override is set.
        """
        host = list(host or ())
        host_ids = set()
        for action in host:
            if action.id in host_ids:
                raise DuplicateActionIdError(action.id)
            host_ids.add(action.id)

        merged = []
        for action in builtin:
            if action.id in host_ids:
                if not allow_override:
                    raise DuplicateActionIdError(action.id)
                log.info(f"Host action overrides built-in '{action.id}'")
                continue
            merged.append(action)
        merged.extend(host)
        return cls(merged)

    # ------------------------------------------------------------------ lookup
    def resolve(self, action_id) -> FileAction:
        try:
            return self._actions[action_id]
        except KeyError:
            raise UnknownActionError(action_id) from None

    def get(self, action_id) -> Optional[FileAction]:
        return self._actions.get(action_id)

    def ids(self):
        return tuple(self._actions)

    def __contains__(self, action_id):
        return action_id in self._actions

    def __iter__(self):
        return iter(self._actions.values())

    def __len__(self):
        return len(self._actions)

    # ------------------------------------------------------------------ enablement
    def is_enabled(self, action_id, snapshot) -> bool:
        """True when the action's selection requirement holds for the snapshot."""
        action = self.resolve(action_id)
        try:
            narrowed = action.filter_files(selected_files(snapshot))
        except Exception as e:
            log.error(f"File filter of '{action_id}' failed: {e}", exc_info=True)
            return False
        return action.requires_selection.is_satisfied(len(narrowed))

    def enabled_actions(self, snapshot):
        return tuple(a for a in self if self.is_enabled(a.id, snapshot))

    def toolbar_actions(self):
        return tuple(a for a in self if a.button is not None and a.button.toolbar)

    def context_menu_actions(self):
        return tuple(a for a in self if a.button is not None and a.button.context_menu)
