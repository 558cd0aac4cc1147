import uuid
from types import MappingProxyType

from PySide6.QtCore import QObject

import config_manager
from action_registry import ActionRegistry
from browser_store import (BrowserSnapshot, BrowserStore, SortOrder, selectable_ids,
                           selected_files, sorted_files)
from builtin_actions import builtin_actions
from dispatcher import Dispatcher
from dnd_coordinator import DragDropCoordinator
from errors import InvalidStateTransitionError
from event_bus import EventBus
from file_record import normalize_files
from interaction_handler import InteractionHandler
from logger import log


class FileBrowser(QObject):
    """
    One independent browser instance: its own registry, store, dispatch
    queue, drag-and-drop coordinator and event bus.
    """

    def __init__(self, files=None, folder_chain=None, file_actions=None,
                 on_file_action=None, instance_id=None, parent=None, **options):
        super().__init__(parent)
        self.instance_id = instance_id or str(uuid.uuid4())

        overrides = dict(options)
        if file_actions is not None:
            overrides["file_actions"] = file_actions
        if on_file_action is not None:
            overrides["on_file_action"] = on_file_action
        self.config = config_manager.config.resolve(**overrides)
        self.bus = EventBus(self)

        self.registry = ActionRegistry.build(
            builtin_actions(self.config.disable_default_file_actions),
            self.config.file_actions,
            allow_override=self.config.allow_action_override,
        )

        self.store = BrowserStore(self._initial_snapshot(files, folder_chain), self)
        self.dispatcher = Dispatcher(
            self.registry, self.store, self.instance_id,
            handler=self.config.on_file_action,
            bus=self.bus,
            disable_selection=self.config.disable_selection,
        )
        self.dnd = DragDropCoordinator(
            self.store, self.dispatcher,
            enabled=not self.config.disable_drag_and_drop,
            parent=self,
        )
        self.dnd.state_changed.connect(self.bus.gesture_changed)
        self.interaction = InteractionHandler(self)
        log.info(f"File browser {self.instance_id} created with {len(self.registry)} actions")

    # ------------------------------------------------------------------ construction
    def _initial_snapshot(self, files, folder_chain):
        normalized = self._normalize(files)
        snapshot = BrowserSnapshot(
            files=normalized.files,
            file_map=normalized.file_map,
            folder_chain=self._normalize(folder_chain).files,
            show_hidden=self.config.default_show_hidden,
            folders_first=self.config.default_folders_first,
        )

        action = self._default_action(self.config.default_sort_action_id)
        if action is not None and action.sort_key is not None:
            snapshot = snapshot.replace(sort_key=action.sort_key,
                                        sort_order=action.sort_order or snapshot.sort_order)
        action = self._default_action(self.config.default_file_view_action_id)
        if action is not None and action.view_mode is not None:
            snapshot = snapshot.replace(view_mode=action.view_mode)

        options = {a.option_id: a.option_default for a in self.registry if a.option_id}
        options["show_hidden"] = snapshot.show_hidden
        options["folders_first"] = snapshot.folders_first
        return snapshot.replace(options=MappingProxyType(options))

    def _default_action(self, action_id):
        if not action_id:
            return None
        action = self.registry.get(action_id)
        if action is None:
            # e.g. the default sort actions were disabled
            log.warning(f"Default action '{action_id}' is not registered, ignoring it")
        return action

    def _normalize(self, files):
        normalized = normalize_files(files)
        if normalized.duplicate_ids:
            self.bus.duplicate_file_ids.emit(list(normalized.duplicate_ids))
        return normalized

    # ------------------------------------------------------------------ inputs
    def set_files(self, files):
        """Replace the file array. Selection keeps only ids that are still selectable."""
        normalized = self._normalize(files)

        def job(snapshot):
            file_map = normalized.file_map
            nxt = snapshot.replace(files=normalized.files, file_map=file_map)
            nxt = nxt.with_selection(selectable_ids(nxt, snapshot.selected_ids))
            if nxt.focused_file_id not in file_map:
                nxt = nxt.replace(focused_file_id=None, last_click_index=None)
            menu = nxt.context_menu
            if menu is not None and menu.trigger_file_id is not None \
                    and menu.trigger_file_id not in file_map:
                nxt = nxt.replace(context_menu=None)
            try:
                BrowserStore.validate(nxt)
            except InvalidStateTransitionError:
                # Host-defined sort key vanished with the old files
                log.info(f"Sort key '{nxt.sort_key}' not present on new files, sorting by name")
                nxt = nxt.replace(sort_key="name", sort_order=SortOrder.ASC)
            return nxt

        return self.dispatcher.submit(job, "set_files", after=self.bus.files_changed.emit)

    def set_folder_chain(self, folder_chain):
        chain = self._normalize(folder_chain).files
        return self.dispatcher.submit(lambda s: s.replace(folder_chain=chain), "set_folder_chain")

    def dispatch(self, action_id, payload=None, context=None):
        return self.dispatcher.dispatch(action_id, payload, context)

    # ------------------------------------------------------------------ outputs
    @property
    def snapshot(self) -> BrowserSnapshot:
        return self.store.get_snapshot()

    def selected_files(self):
        return selected_files(self.snapshot)

    def display_files(self):
        return sorted_files(self.snapshot)

    def display_ids(self):
        return [f.id for f in self.display_files() if f is not None]

    def display_index(self, file_id):
        ids = self.display_ids()
        return ids.index(file_id) if file_id in ids else -1

    def enabled_action_ids(self):
        return tuple(a.id for a in self.registry.enabled_actions(self.snapshot))
