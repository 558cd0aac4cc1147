"""
Selection & view store.

BrowserSnapshot is an immutable picture of one browser instance: the current
file array, selection, folder chain, sort/view settings and context menu.
BrowserStore holds exactly one snapshot and replaces it only through commit().
"""
import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from PySide6.QtCore import QObject, Signal

from errors import InvalidStateTransitionError
from file_record import FileRecord, is_selectable

EMPTY_MAP = MappingProxyType({})
_RECORD_FIELDS = frozenset(f.name for f in dataclasses.fields(FileRecord)) - {"extra"}


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self):
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


class ViewMode(Enum):
    LIST = "list"
    COMPACT = "compact"
    GRID = "grid"


@dataclass(frozen=True)
class ContextMenuState:
    trigger_file_id: Optional[str]
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class BrowserSnapshot:
    files: tuple = ()
    file_map: Mapping[str, FileRecord] = field(default_factory=lambda: EMPTY_MAP, compare=False)
    selected_ids: frozenset = frozenset()
    folder_chain: tuple = ()
    focused_file_id: Optional[str] = None
    sort_key: str = "name"
    sort_order: SortOrder = SortOrder.ASC
    view_mode: ViewMode = ViewMode.LIST
    show_hidden: bool = False
    folders_first: bool = True
    options: Mapping[str, Any] = field(default_factory=lambda: EMPTY_MAP)
    context_menu: Optional[ContextMenuState] = None
    last_click_index: Optional[int] = None

    def replace(self, **changes) -> "BrowserSnapshot":
        return dataclasses.replace(self, **changes)

    def with_selection(self, ids) -> "BrowserSnapshot":
        return self.replace(selected_ids=frozenset(ids))

    def with_option(self, option_id, value) -> "BrowserSnapshot":
        options = dict(self.options)
        options[option_id] = value
        return self.replace(options=MappingProxyType(options))

    @property
    def current_folder(self):
        for f in reversed(self.folder_chain):
            if f is not None:
                return f
        return None


# ------------------------------------------------------------------ selectors

def selected_files(snapshot):
    """Selected records in file-array order (first occurrence of each id)."""
    return tuple(
        f for f in snapshot.files
        if f is not None and f.id in snapshot.selected_ids
        and snapshot.file_map.get(f.id) is f
    )


def visible_files(snapshot):
    """Files the listing shows: hidden ones dropped unless enabled, placeholders kept."""
    if snapshot.show_hidden:
        return tuple(snapshot.files)
    return tuple(f for f in snapshot.files if f is None or not f.is_hidden)


def hidden_file_ids(snapshot):
    if snapshot.show_hidden:
        return frozenset()
    return frozenset(f.id for f in snapshot.files if f is not None and f.is_hidden)


def _sort_value(f, key):
    if key in _RECORD_FIELDS:
        value = getattr(f, key)
    else:
        value = f.extra.get(key)
    if isinstance(value, str):
        value = value.lower()
    return value


def sorted_files(snapshot, files=None):
    """
    Order files for display. Folders come first when enabled, records with
    no value for the sort key and loading placeholders always go last.
    """
    if files is None:
        files = visible_files(snapshot)
    loaded = [f for f in files if f is not None]
    pending = [f for f in files if f is None]
    key = snapshot.sort_key
    reverse = snapshot.sort_order is SortOrder.DESC

    with_value = [f for f in loaded if _sort_value(f, key) is not None]
    without_value = [f for f in loaded if _sort_value(f, key) is None]
    try:
        with_value.sort(key=lambda f: _sort_value(f, key), reverse=reverse)
    except TypeError:
        # Mixed value types under a host-defined key
        with_value.sort(key=lambda f: str(_sort_value(f, key)), reverse=reverse)
    ordered = with_value + without_value

    if snapshot.folders_first:
        ordered = ([f for f in ordered if f.is_directory] +
                   [f for f in ordered if not f.is_directory])
    return tuple(ordered + pending)


def selectable_ids(snapshot, ids):
    return frozenset(i for i in ids if is_selectable(snapshot.file_map.get(i)))


# ------------------------------------------------------------------ store

class BrowserStore(QObject):
    """Owns the snapshot of one browser instance. commit() is the only writer."""

    snapshot_changed = Signal(object)

    def __init__(self, initial=None, parent=None):
        super().__init__(parent)
        initial = initial or BrowserSnapshot()
        self.validate(initial)
        self._snapshot = initial

    def get_snapshot(self) -> BrowserSnapshot:
        return self._snapshot

    def commit(self, next_snapshot: BrowserSnapshot) -> bool:
        """
        Replace the snapshot atomically. Raises InvalidStateTransitionError and
        keeps the previous snapshot if the new one is inconsistent.
        Returns False when nothing changed.
        """
        if not isinstance(next_snapshot, BrowserSnapshot):
            raise InvalidStateTransitionError(
                f"Expected a BrowserSnapshot, got {type(next_snapshot).__name__}")
        self.validate(next_snapshot)
        # file_map is not compared; a new map means a new file array
        if next_snapshot == self._snapshot and next_snapshot.file_map is self._snapshot.file_map:
            return False
        self._snapshot = next_snapshot
        self.snapshot_changed.emit(next_snapshot)
        return True

    @staticmethod
    def validate(snapshot: BrowserSnapshot):
        if not isinstance(snapshot.sort_order, SortOrder):
            raise InvalidStateTransitionError(f"Invalid sort order: {snapshot.sort_order!r}")
        if not isinstance(snapshot.view_mode, ViewMode):
            raise InvalidStateTransitionError(f"Invalid view mode: {snapshot.view_mode!r}")

        key = snapshot.sort_key
        if key not in _RECORD_FIELDS and not any(
                f is not None and key in f.extra for f in snapshot.files):
            raise InvalidStateTransitionError(f"Sort key {key!r} is not present on any file")

        bad = [i for i in snapshot.selected_ids if not is_selectable(snapshot.file_map.get(i))]
        if bad:
            raise InvalidStateTransitionError(
                f"Cannot select missing or unselectable files: {sorted(bad)}")

        if snapshot.focused_file_id is not None and snapshot.focused_file_id not in snapshot.file_map:
            raise InvalidStateTransitionError(f"Unknown focused file: {snapshot.focused_file_id!r}")

        menu = snapshot.context_menu
        if menu is not None and menu.trigger_file_id is not None \
                and menu.trigger_file_id not in snapshot.file_map:
            raise InvalidStateTransitionError(
                f"Unknown context menu trigger file: {menu.trigger_file_id!r}")
