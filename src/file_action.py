"""
Declarative file actions.

A FileAction bundles an id with optional selection constraints, a per-action
file filter, a pure selection transform and a pure internal effect. Payloads
are small frozen dataclasses; an action names the payload class it accepts
through `payload_type` and the dispatcher checks it before anything runs.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

EMPTY_MAP = MappingProxyType({})


class SelectionRequirement(Enum):
    NONE = "any"
    EXACTLY_ONE = "exactly one"
    ONE_OR_MORE = "one or more"
    EXACTLY_ZERO = "empty"

    def is_satisfied(self, count: int) -> bool:
        if self is SelectionRequirement.EXACTLY_ONE:
            return count == 1
        if self is SelectionRequirement.ONE_OR_MORE:
            return count >= 1
        if self is SelectionRequirement.EXACTLY_ZERO:
            return count == 0
        return True


# ------------------------------------------------------------------ payloads

@dataclass(frozen=True)
class MouseClickFilePayload:
    file_id: str
    file_display_index: int
    click_type: str = "single"  # "single" | "double"
    ctrl_key: bool = False
    shift_key: bool = False
    alt_key: bool = False


@dataclass(frozen=True)
class KeyboardClickFilePayload:
    file_id: str
    file_display_index: int
    enter_key: bool = False
    ctrl_key: bool = False
    shift_key: bool = False


@dataclass(frozen=True)
class ChangeSelectionPayload:
    selection: frozenset
    reset: bool = True


@dataclass(frozen=True)
class OpenFilesPayload:
    files: tuple
    target_file: Any = None


@dataclass(frozen=True)
class MoveFilesPayload:
    files: tuple
    destination: Any
    source: Any = None


@dataclass(frozen=True)
class DragNDropPayload:
    drag_source: Any
    selected_files: tuple = ()
    drop_target: Any = None


@dataclass(frozen=True)
class OpenFileContextMenuPayload:
    client_x: int = 0
    client_y: int = 0
    trigger_file_id: Optional[str] = None


# ------------------------------------------------------------------ actions

@dataclass(frozen=True)
class ActionButton:
    """Presentation hints for toolbars and context menus."""
    name: str
    toolbar: bool = False
    context_menu: bool = False
    group: Optional[str] = None
    icon: Optional[str] = None
    icon_only: bool = False


@dataclass(frozen=True)
class SelectionTransformContext:
    prev_selection: frozenset
    file_ids: tuple
    file_map: Mapping[str, Any]
    hidden_file_ids: frozenset
    display_ids: tuple = ()  # visible ids in listing order
    last_click_index: Optional[int] = None
    payload: Any = None
    action_id: str = ""


@dataclass(frozen=True)
class FileAction:
    id: str
    requires_selection: SelectionRequirement = SelectionRequirement.NONE
    file_filter: Optional[Callable[[Any], bool]] = None
    selection_transform: Optional[Callable[[SelectionTransformContext], Optional[frozenset]]] = None
    effect: Optional[Callable[..., Any]] = None
    payload_type: Optional[type] = None
    extra_state: Optional[Callable[[Any], Mapping[str, Any]]] = None
    button: Optional[ActionButton] = None
    hotkeys: tuple = ()
    # Sort / view / option actions
    sort_key: Optional[str] = None
    sort_order: Any = None
    view_mode: Any = None
    option_id: Optional[str] = None
    option_default: Any = None

    def filter_files(self, files):
        if self.file_filter is None:
            return tuple(files)
        return tuple(f for f in files if self.file_filter(f))


@dataclass(frozen=True)
class ActionDispatchState:
    """Built once per dispatch; the effect and the host handler see this same object."""
    action_id: str
    instance_id: str
    selected_files: tuple
    selected_files_for_action: tuple
    context_menu_trigger_file: Any = None
    payload: Any = None
    extra: Mapping[str, Any] = field(default_factory=lambda: EMPTY_MAP, compare=False)


@dataclass(frozen=True)
class EffectResult:
    """Effect return value when the effect also wants to queue further dispatches."""
    snapshot: Any = None
    follow_ups: tuple = ()  # ((action_id, payload), ...)
