"""
Drag-and-drop coordinator.

One gesture at a time per browser instance:

    IDLE -> DRAGGING(sources) -> HOVERING(sources, target) -> DROPPED | CANCELLED -> IDLE

Pointer capture lives in the widget layer; it only reports drag start,
target enter/leave, drop and cancel here. A successful drop becomes a
single move_files dispatch.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from PySide6.QtCore import QObject, Signal

from browser_store import selected_files
from errors import GestureConflictError
from file_action import MoveFilesPayload
from file_record import is_draggable, is_droppable
from logger import log


class GesturePhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"
    DROPPED = "dropped"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class GestureState:
    phase: GesturePhase = GesturePhase.IDLE
    sources: tuple = ()
    target: Optional[Any] = None

    @property
    def active(self):
        return self.phase in (GesturePhase.DRAGGING, GesturePhase.HOVERING)


IDLE = GestureState()


class DragDropCoordinator(QObject):
    state_changed = Signal(object)  # GestureState

    def __init__(self, store, dispatcher, enabled=True, move_action_id="move_files", parent=None):
        super().__init__(parent)
        self.store = store
        self.dispatcher = dispatcher
        self.enabled = enabled
        self.move_action_id = move_action_id
        self._state = IDLE

    @property
    def state(self) -> GestureState:
        return self._state

    def _set_state(self, state):
        self._state = state
        self.state_changed.emit(state)

    # ------------------------------------------------------------------ transitions
    def start_drag(self, file_id) -> bool:
        """
        Begin a gesture on file_id. Dragging a selected file drags the whole
        selection. Returns False (and stays idle) if any source is not draggable.
        """
        if self._state.active:
            raise GestureConflictError(
                f"Cannot start dragging {file_id!r}: a drag gesture is already active")
        if not self.enabled:
            return False

        snapshot = self.store.get_snapshot()
        grabbed = snapshot.file_map.get(file_id)
        if grabbed is None:
            return False
        if grabbed.id in snapshot.selected_ids:
            sources = selected_files(snapshot)
        else:
            sources = (grabbed,)

        blocked = [f.id for f in sources if not is_draggable(f)]
        if blocked:
            log.debug(f"Drag rejected, not draggable: {blocked}")
            return False

        self._set_state(GestureState(GesturePhase.DRAGGING, tuple(sources)))
        return True

    def hover(self, target_id) -> bool:
        """Pointer entered a potential drop target. Rejected targets leave the gesture in DRAGGING."""
        if not self._state.active:
            return False
        target = self.store.get_snapshot().file_map.get(target_id)
        source_ids = {f.id for f in self._state.sources}
        if not is_droppable(target) or target.id in source_ids:
            if self._state.phase is GesturePhase.HOVERING:
                self._set_state(GestureState(GesturePhase.DRAGGING, self._state.sources))
            return False
        self._set_state(GestureState(GesturePhase.HOVERING, self._state.sources, target))
        return True

    def leave_target(self):
        if self._state.phase is GesturePhase.HOVERING:
            self._set_state(GestureState(GesturePhase.DRAGGING, self._state.sources))

    def drop(self):
        """
        Release over the hovered target: one move_files dispatch, then back to
        IDLE whatever the dispatch outcome. Returns the DispatchAck, or None
        when there was no valid target (treated as a cancel).
        """
        if self._state.phase is not GesturePhase.HOVERING:
            self.cancel()
            return None

        state = self._state
        self._set_state(GestureState(GesturePhase.DROPPED, state.sources, state.target))
        try:
            payload = MoveFilesPayload(
                files=state.sources,
                destination=state.target,
                source=self.store.get_snapshot().current_folder,
            )
            ack = self.dispatcher.dispatch(self.move_action_id, payload)
        finally:
            self._set_state(IDLE)
        if not ack.ok and ack.status != "Waiting":
            log.warning(f"Drop of {len(state.sources)} file(s) onto '{state.target.id}' failed: {ack.error}")
        return ack

    def cancel(self):
        if not self._state.active:
            return
        self._set_state(GestureState(GesturePhase.CANCELLED, self._state.sources))
        self._set_state(IDLE)
