import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from dnd_coordinator import IDLE, GesturePhase
from errors import GestureConflictError
from file_action import ChangeSelectionPayload
from file_browser import FileBrowser


@pytest.fixture
def handled():
    return []


@pytest.fixture
def browser(sample_files, handled):
    files = sample_files + [{"id": "locked", "name": "locked.bin", "draggable": False}]
    return FileBrowser(files=files,
                       folder_chain=[{"id": "root", "name": "/", "isDir": True}],
                       on_file_action=handled.append)


@pytest.fixture
def dnd(browser):
    return browser.dnd


def test_starts_idle(dnd):
    assert dnd.state is IDLE
    assert not dnd.state.active


def test_drag_unselected_file_moves_only_that_file(dnd, browser):
    browser.dispatch("change_selection", ChangeSelectionPayload(frozenset({"readme"})))
    assert dnd.start_drag("main")
    assert [f.id for f in dnd.state.sources] == ["main"]
    assert dnd.state.phase is GesturePhase.DRAGGING


def test_drag_selected_file_moves_selection(dnd, browser):
    browser.dispatch("change_selection", ChangeSelectionPayload(frozenset({"readme", "main"})))
    dnd.start_drag("main")
    assert [f.id for f in dnd.state.sources] == ["readme", "main"]


def test_undraggable_file_rejected(dnd):
    assert dnd.start_drag("locked") is False
    assert dnd.state is IDLE


def test_undraggable_file_in_selection_rejects_whole_drag(dnd, browser):
    browser.dispatch("change_selection", ChangeSelectionPayload(frozenset({"main", "locked"})))
    assert dnd.start_drag("main") is False
    assert dnd.state is IDLE


def test_second_gesture_conflicts(dnd):
    dnd.start_drag("main")
    with pytest.raises(GestureConflictError):
        dnd.start_drag("readme")


def test_disabled_coordinator(sample_files):
    browser = FileBrowser(files=sample_files, disable_drag_and_drop=True)
    assert browser.dnd.start_drag("main") is False


class TestHover:
    def test_folder_is_valid_target(self, dnd):
        dnd.start_drag("main")
        assert dnd.hover("docs")
        assert dnd.state.phase is GesturePhase.HOVERING
        assert dnd.state.target.id == "docs"

    def test_file_is_not_droppable(self, dnd):
        dnd.start_drag("main")
        assert not dnd.hover("readme")
        assert dnd.state.phase is GesturePhase.DRAGGING

    def test_source_cannot_be_target(self, dnd):
        dnd.start_drag("docs")
        assert not dnd.hover("docs")

    def test_leave_target(self, dnd):
        dnd.start_drag("main")
        dnd.hover("docs")
        dnd.leave_target()
        assert dnd.state.phase is GesturePhase.DRAGGING
        assert dnd.state.target is None

    def test_hover_without_gesture(self, dnd):
        assert not dnd.hover("docs")


class TestDrop:
    def test_drop_dispatches_move_once(self, dnd, handled):
        dnd.start_drag("main")
        dnd.hover("src")
        ack = dnd.drop()
        assert ack.ok
        moves = [d for d in handled if d.action_id == "move_files"]
        assert len(moves) == 1
        payload = moves[0].payload
        assert [f.id for f in payload.files] == ["main"]
        assert payload.destination.id == "src"
        assert payload.source.id == "root"
        assert dnd.state is IDLE

    def test_drop_without_target_cancels(self, dnd, handled):
        dnd.start_drag("main")
        assert dnd.drop() is None
        assert handled == []
        assert dnd.state is IDLE

    def test_idle_after_failed_dispatch(self, sample_files):
        def handler(data):
            raise OSError("permission denied")

        browser = FileBrowser(files=sample_files, on_file_action=handler)
        browser.dnd.start_drag("main")
        browser.dnd.hover("docs")
        ack = browser.dnd.drop()
        assert ack.status == "Error"
        assert browser.dnd.state is IDLE

    def test_phases_reported(self, dnd, browser):
        phases = []
        browser.bus.gesture_changed.connect(lambda s: phases.append(s.phase))
        dnd.start_drag("main")
        dnd.hover("docs")
        dnd.drop()
        assert phases == [GesturePhase.DRAGGING, GesturePhase.HOVERING,
                          GesturePhase.DROPPED, GesturePhase.IDLE]


def test_cancel(dnd, browser):
    phases = []
    browser.bus.gesture_changed.connect(lambda s: phases.append(s.phase))
    dnd.start_drag("main")
    dnd.cancel()
    assert phases == [GesturePhase.DRAGGING, GesturePhase.CANCELLED, GesturePhase.IDLE]
    # a new gesture may start once idle
    assert dnd.start_drag("readme")
