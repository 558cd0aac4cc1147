"""
Built-in file actions.

ESSENTIAL_ACTIONS are always registered: the listing cannot work without them.
DEFAULT_ACTIONS can be dropped with `disable_default_file_actions`.
OPTIONAL_ACTIONS carry no internal effect; hosts add them to file_actions and
do the actual work in their handler.
"""
from file_action import (ActionButton, ChangeSelectionPayload, EffectResult,
                         FileAction, KeyboardClickFilePayload, MouseClickFilePayload,
                         MoveFilesPayload, OpenFileContextMenuPayload, OpenFilesPayload,
                         SelectionRequirement)
from browser_store import ContextMenuState, SortOrder, ViewMode
from file_record import is_openable, is_selectable

GROUP_ACTIONS = "Actions"
GROUP_OPTIONS = "Options"
GROUP_SORT = "Sort"
GROUP_VIEW = "View"


# ------------------------------------------------------------------ selection helpers

def _click_selection(ctx, file_id, index, ctrl, shift):
    """Selection after a click: Ctrl toggles, Shift selects a range, plain click selects one."""
    if not is_selectable(ctx.file_map.get(file_id)):
        return None
    prev = ctx.prev_selection
    if shift and ctx.last_click_index is not None and ctx.display_ids:
        lo, hi = sorted((ctx.last_click_index, index))
        lo = max(lo, 0)
        hi = min(hi, len(ctx.display_ids) - 1)
        span = frozenset(ctx.display_ids[lo:hi + 1])
        return prev | span if ctrl else span
    if ctrl:
        return prev - {file_id} if file_id in prev else prev | {file_id}
    return frozenset([file_id])


def _open_follow_up(files, target=None):
    files = tuple(f for f in files if is_openable(f))
    if not files:
        return ()
    return ((OPEN_FILES.id, OpenFilesPayload(files=files, target_file=target or files[0])),)


def _focus(snapshot, file_id):
    return snapshot.replace(focused_file_id=file_id, context_menu=None)


# ------------------------------------------------------------------ essential

def _mouse_click_transform(ctx):
    p = ctx.payload
    if p.click_type == "double":
        return None
    return _click_selection(ctx, p.file_id, p.file_display_index, p.ctrl_key, p.shift_key)


def _mouse_click_effect(snapshot, data):
    p = data.payload
    f = snapshot.file_map.get(p.file_id)
    if f is None:
        return None
    nxt = _focus(snapshot, f.id)
    if p.click_type == "double":
        return EffectResult(nxt, _open_follow_up((f,)))
    if not p.shift_key or snapshot.last_click_index is None:
        # Shift-click keeps the range anchor where it was
        nxt = nxt.replace(last_click_index=p.file_display_index)
    return nxt


MOUSE_CLICK_FILE = FileAction(
    id="mouse_click_file",
    payload_type=MouseClickFilePayload,
    selection_transform=_mouse_click_transform,
    effect=_mouse_click_effect,
)


def _keyboard_click_transform(ctx):
    p = ctx.payload
    if p.enter_key:
        return None
    return _click_selection(ctx, p.file_id, p.file_display_index, p.ctrl_key, p.shift_key)


def _keyboard_click_effect(snapshot, data):
    p = data.payload
    f = snapshot.file_map.get(p.file_id)
    if f is None:
        return None
    nxt = _focus(snapshot, f.id)
    if p.enter_key:
        return EffectResult(nxt, _open_follow_up((f,)))
    if not p.shift_key or snapshot.last_click_index is None:
        nxt = nxt.replace(last_click_index=p.file_display_index)
    return nxt


KEYBOARD_CLICK_FILE = FileAction(
    id="keyboard_click_file",
    payload_type=KeyboardClickFilePayload,
    selection_transform=_keyboard_click_transform,
    effect=_keyboard_click_effect,
)


def _change_selection_transform(ctx):
    p = ctx.payload
    if p.reset:
        return frozenset(p.selection)
    return ctx.prev_selection | frozenset(p.selection)


CHANGE_SELECTION = FileAction(
    id="change_selection",
    payload_type=ChangeSelectionPayload,
    selection_transform=_change_selection_transform,
)

# Navigation is the host's job; the engine only reports the request
OPEN_FILES = FileAction(
    id="open_files",
    payload_type=OpenFilesPayload,
)


def _open_parent_effect(snapshot, data):
    chain = snapshot.folder_chain
    if len(chain) < 2 or chain[-2] is None:
        return None
    parent = chain[-2]
    return EffectResult(snapshot, _open_follow_up((parent,), parent))


OPEN_PARENT_FOLDER = FileAction(
    id="open_parent_folder",
    effect=_open_parent_effect,
    button=ActionButton("Go up a directory", toolbar=True, icon="fa5s.level-up-alt", icon_only=True),
    hotkeys=("Backspace",),
)


def _context_menu_transform(ctx):
    trigger = ctx.payload.trigger_file_id
    if trigger is None or trigger in ctx.prev_selection:
        return None
    if not is_selectable(ctx.file_map.get(trigger)):
        return None
    return frozenset([trigger])


def _context_menu_effect(snapshot, data):
    p = data.payload
    return snapshot.replace(
        context_menu=ContextMenuState(p.trigger_file_id, p.client_x, p.client_y))


OPEN_FILE_CONTEXT_MENU = FileAction(
    id="open_file_context_menu",
    payload_type=OpenFileContextMenuPayload,
    selection_transform=_context_menu_transform,
    effect=_context_menu_effect,
)

CLOSE_FILE_CONTEXT_MENU = FileAction(
    id="close_file_context_menu",
    effect=lambda snapshot, data: snapshot.replace(context_menu=None),
)

# Fired by the drag-and-drop coordinator; the host performs the move
MOVE_FILES = FileAction(
    id="move_files",
    payload_type=MoveFilesPayload,
)


# ------------------------------------------------------------------ defaults

def _open_selection_effect(snapshot, data):
    return EffectResult(snapshot, _open_follow_up(data.selected_files_for_action))


OPEN_SELECTION = FileAction(
    id="open_selection",
    requires_selection=SelectionRequirement.ONE_OR_MORE,
    file_filter=is_openable,
    effect=_open_selection_effect,
    button=ActionButton("Open selection", toolbar=True, context_menu=True,
                        group=GROUP_ACTIONS, icon="fa5s.box-open"),
    hotkeys=("Enter",),
)

SELECT_ALL_FILES = FileAction(
    id="select_all_files",
    selection_transform=lambda ctx: frozenset(
        i for i in ctx.display_ids if is_selectable(ctx.file_map.get(i))),
    button=ActionButton("Select all files", toolbar=True, group=GROUP_ACTIONS,
                        icon="fa5s.object-group"),
    hotkeys=("Ctrl+A",),
)

CLEAR_SELECTION = FileAction(
    id="clear_selection",
    selection_transform=lambda ctx: frozenset() if ctx.prev_selection else None,
    button=ActionButton("Clear selection", toolbar=True, group=GROUP_ACTIONS,
                        icon="fa5s.eraser"),
    hotkeys=("Esc",),
)


def _view_action(action_id, mode, name, icon):
    return FileAction(
        id=action_id,
        view_mode=mode,
        effect=lambda snapshot, data: snapshot.replace(view_mode=mode),
        button=ActionButton(name, toolbar=True, group=GROUP_VIEW, icon=icon, icon_only=True),
    )


ENABLE_LIST_VIEW = _view_action("enable_list_view", ViewMode.LIST, "Switch to List view", "fa5s.list")
ENABLE_COMPACT_VIEW = _view_action("enable_compact_view", ViewMode.COMPACT,
                                   "Switch to Compact view", "fa5s.th-list")
ENABLE_GRID_VIEW = _view_action("enable_grid_view", ViewMode.GRID, "Switch to Grid view", "fa5s.th-large")


def make_sort_action(action_id, sort_key, name, sort_order=SortOrder.ASC, icon=None):
    """Sort action: firing it again while it is active flips the order."""
    def effect(snapshot, data):
        if snapshot.sort_key == sort_key:
            return snapshot.replace(sort_order=snapshot.sort_order.flipped())
        return snapshot.replace(sort_key=sort_key, sort_order=sort_order)

    return FileAction(
        id=action_id,
        sort_key=sort_key,
        sort_order=sort_order,
        effect=effect,
        extra_state=lambda snapshot: {"sort_key": snapshot.sort_key,
                                      "sort_order": snapshot.sort_order},
        button=ActionButton(name, toolbar=True, group=GROUP_SORT, icon=icon),
    )


SORT_FILES_BY_NAME = make_sort_action("sort_files_by_name", "name", "Sort by name",
                                      icon="fa5s.sort-alpha-down")
SORT_FILES_BY_SIZE = make_sort_action("sort_files_by_size", "size", "Sort by size",
                                      icon="fa5s.sort-amount-down")
SORT_FILES_BY_DATE = make_sort_action("sort_files_by_date", "modified", "Sort by date",
                                      icon="fa5s.clock")


def _toggle_hidden_effect(snapshot, data):
    show = not snapshot.show_hidden
    nxt = snapshot.replace(show_hidden=show).with_option("show_hidden", show)
    if not show:
        keep = frozenset(i for i in snapshot.selected_ids if not snapshot.file_map[i].is_hidden)
        nxt = nxt.with_selection(keep)
    return nxt


TOGGLE_HIDDEN_FILES = FileAction(
    id="toggle_hidden_files",
    option_id="show_hidden",
    option_default=False,
    effect=_toggle_hidden_effect,
    button=ActionButton("Show hidden files", toolbar=True, group=GROUP_OPTIONS),
)


def _toggle_folders_first_effect(snapshot, data):
    first = not snapshot.folders_first
    return snapshot.replace(folders_first=first).with_option("folders_first", first)


TOGGLE_SHOW_FOLDERS_FIRST = FileAction(
    id="toggle_show_folders_first",
    option_id="folders_first",
    option_default=True,
    effect=_toggle_folders_first_effect,
    button=ActionButton("Show folders first", toolbar=True, group=GROUP_OPTIONS),
)


def make_option_action(action_id, option_id, name, default=False):
    """Host-defined on/off option stored in snapshot.options."""
    def effect(snapshot, data):
        return snapshot.with_option(option_id, not snapshot.options.get(option_id, default))

    return FileAction(
        id=action_id,
        option_id=option_id,
        option_default=default,
        effect=effect,
        extra_state=lambda snapshot: {"value": snapshot.options.get(option_id, default)},
        button=ActionButton(name, toolbar=True, group=GROUP_OPTIONS),
    )


# ------------------------------------------------------------------ optional (host handled)

CREATE_FOLDER = FileAction(
    id="create_folder",
    button=ActionButton("Create folder", toolbar=True, icon="fa5s.folder-plus"),
)

DELETE_FILES = FileAction(
    id="delete_files",
    requires_selection=SelectionRequirement.ONE_OR_MORE,
    button=ActionButton("Delete files", toolbar=True, context_menu=True,
                        group=GROUP_ACTIONS, icon="fa5s.trash-alt"),
    hotkeys=("Del",),
)

COPY_FILES = FileAction(
    id="copy_files",
    requires_selection=SelectionRequirement.ONE_OR_MORE,
    button=ActionButton("Copy selection", context_menu=True, group=GROUP_ACTIONS, icon="fa5s.copy"),
    hotkeys=("Ctrl+C",),
)

UPLOAD_FILES = FileAction(
    id="upload_files",
    button=ActionButton("Upload files", toolbar=True, icon="fa5s.upload"),
)

DOWNLOAD_FILES = FileAction(
    id="download_files",
    requires_selection=SelectionRequirement.ONE_OR_MORE,
    file_filter=lambda f: not f.is_directory,
    button=ActionButton("Download files", toolbar=True, context_menu=True,
                        group=GROUP_ACTIONS, icon="fa5s.download"),
)


ESSENTIAL_ACTIONS = (
    MOUSE_CLICK_FILE,
    KEYBOARD_CLICK_FILE,
    CHANGE_SELECTION,
    OPEN_FILES,
    OPEN_PARENT_FOLDER,
    OPEN_FILE_CONTEXT_MENU,
    CLOSE_FILE_CONTEXT_MENU,
    MOVE_FILES,
)

DEFAULT_ACTIONS = (
    OPEN_SELECTION,
    SELECT_ALL_FILES,
    CLEAR_SELECTION,
    ENABLE_LIST_VIEW,
    ENABLE_COMPACT_VIEW,
    ENABLE_GRID_VIEW,
    SORT_FILES_BY_NAME,
    SORT_FILES_BY_SIZE,
    SORT_FILES_BY_DATE,
    TOGGLE_HIDDEN_FILES,
    TOGGLE_SHOW_FOLDERS_FIRST,
)

OPTIONAL_ACTIONS = (
    CREATE_FOLDER,
    DELETE_FILES,
    COPY_FILES,
    UPLOAD_FILES,
    DOWNLOAD_FILES,
)


def builtin_actions(disable_defaults=False):
    """Essential actions plus the default set, minus whatever was disabled."""
    if disable_defaults is True:
        return ESSENTIAL_ACTIONS
    if not disable_defaults:
        return ESSENTIAL_ACTIONS + DEFAULT_ACTIONS
    dropped = frozenset(disable_defaults)
    return ESSENTIAL_ACTIONS + tuple(a for a in DEFAULT_ACTIONS if a.id not in dropped)
