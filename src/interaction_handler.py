import time

from PySide6.QtCore import Qt

from file_action import (KeyboardClickFilePayload, MouseClickFilePayload,
                         OpenFileContextMenuPayload)

_KEY_NAMES = {
    int(Qt.Key_Return): "Enter",
    int(Qt.Key_Enter): "Enter",
    int(Qt.Key_Escape): "Esc",
    int(Qt.Key_Delete): "Del",
    int(Qt.Key_Backspace): "Backspace",
    int(Qt.Key_Space): "Space",
    int(Qt.Key_Up): "Up",
    int(Qt.Key_Down): "Down",
    int(Qt.Key_Home): "Home",
    int(Qt.Key_End): "End",
}


def key_combo(key, modifiers=Qt.NoModifier):
    """Qt key + modifiers -> hotkey string as used in FileAction.hotkeys, e.g. 'Ctrl+A'."""
    code = int(key)
    if code in _KEY_NAMES:
        name = _KEY_NAMES[code]
    elif int(Qt.Key_F1) <= code <= int(Qt.Key_F12):
        name = f"F{code - int(Qt.Key_F1) + 1}"
    elif 0x20 < code < 0x7f:
        name = chr(code).upper()
    else:
        return None
    parts = []
    if modifiers & Qt.ControlModifier: parts.append("Ctrl")
    if modifiers & Qt.AltModifier: parts.append("Alt")
    if modifiers & Qt.ShiftModifier: parts.append("Shift")
    parts.append(name)
    return "+".join(parts)


class InteractionHandler:
    """
    Turns raw input from the widget layer (clicks, keys, outside clicks,
    right clicks) into dispatches. Holds no selection logic of its own.
    """

    def __init__(self, browser):
        self.b = browser  # FileBrowser instance
        self._last_click = None  # (file_id, timestamp_ms)

    # ------------------------------------------------------------------ mouse
    def click_file(self, file_id, ctrl=False, shift=False, timestamp_ms=None):
        """Single or double click on a file, told apart by double_click_delay."""
        if file_id is None or file_id not in self.b.snapshot.file_map:
            return None
        now = timestamp_ms if timestamp_ms is not None else time.monotonic() * 1000
        click_type = "single"
        if self._last_click is not None:
            last_id, last_time = self._last_click
            if last_id == file_id and now - last_time <= self.b.config.double_click_delay:
                click_type = "double"
        # A double click ends the sequence; a third click starts a new one
        self._last_click = None if click_type == "double" else (file_id, now)

        payload = MouseClickFilePayload(
            file_id=file_id,
            file_display_index=self.b.display_index(file_id),
            click_type=click_type,
            ctrl_key=ctrl,
            shift_key=shift,
        )
        return self.b.dispatch("mouse_click_file", payload)

    def context_menu(self, file_id, x=0, y=0):
        payload = OpenFileContextMenuPayload(client_x=x, client_y=y, trigger_file_id=file_id)
        return self.b.dispatch("open_file_context_menu", payload,
                               {"context_menu_trigger_file": file_id})

    def outside_click(self):
        snapshot = self.b.snapshot
        if snapshot.context_menu is not None:
            return self.b.dispatch("close_file_context_menu")
        if self.b.config.clear_selection_on_outside_click and "clear_selection" in self.b.registry:
            return self.b.dispatch("clear_selection")
        return None

    # ------------------------------------------------------------------ keyboard
    def handle_key(self, key, modifiers=Qt.NoModifier):
        """Returns the DispatchAck of the action the key fired, or None if unhandled."""
        combo = key_combo(key, modifiers)
        if combo is None:
            return None
        snapshot = self.b.snapshot

        if combo == "Esc":
            # Escape aborts a drag, then closes an open context menu
            if self.b.dnd.state.active:
                self.b.dnd.cancel()
                return None
            if snapshot.context_menu is not None:
                return self.b.dispatch("close_file_context_menu")

        for action in self.b.registry:
            # A key press carries no payload to give an action that needs one
            if action.payload_type is not None:
                continue
            if combo in action.hotkeys and self.b.registry.is_enabled(action.id, snapshot):
                return self.b.dispatch(action.id)

        focused = snapshot.focused_file_id
        code = int(key)
        if code in (int(Qt.Key_Up), int(Qt.Key_Down)):
            return self._move_focus(-1 if code == int(Qt.Key_Up) else 1,
                                    bool(modifiers & Qt.ShiftModifier))
        if focused is None:
            return None
        if combo == "Space" or combo == "Ctrl+Space":
            # Space toggles the focused file
            return self._keyboard_click(focused, ctrl_key=True)
        if combo == "Enter":
            return self._keyboard_click(focused, enter_key=True)
        return None

    def _keyboard_click(self, file_id, **flags):
        payload = KeyboardClickFilePayload(
            file_id=file_id,
            file_display_index=self.b.display_index(file_id),
            **flags,
        )
        return self.b.dispatch("keyboard_click_file", payload)

    def _move_focus(self, step, shift):
        ids = self.b.display_ids()
        if not ids:
            return None
        focused = self.b.snapshot.focused_file_id
        if focused in ids:
            index = min(max(ids.index(focused) + step, 0), len(ids) - 1)
        else:
            index = 0
        return self._keyboard_click(ids[index], shift_key=shift)
