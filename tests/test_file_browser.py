"""End-to-end tests through the FileBrowser facade."""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from browser_store import SortOrder, ViewMode
from builtin_actions import DELETE_FILES
from errors import (DuplicateActionIdError, DuplicateFileIdWarning, GestureConflictError,
                    UnknownActionError)
from file_action import ChangeSelectionPayload, FileAction, MouseClickFilePayload
from file_browser import FileBrowser


@pytest.fixture
def handled():
    return []


@pytest.fixture
def browser(sample_files, handled):
    return FileBrowser(files=sample_files, file_actions=[DELETE_FILES],
                       on_file_action=handled.append, instance_id="left")


class TestConstruction:
    def test_initial_state(self, browser):
        snap = browser.snapshot
        assert snap.selected_ids == frozenset()
        assert snap.sort_key == "name"
        assert snap.sort_order is SortOrder.ASC
        assert snap.view_mode is ViewMode.LIST
        assert snap.options == {"show_hidden": False, "folders_first": True}

    def test_default_sort_and_view(self, sample_files):
        browser = FileBrowser(files=sample_files, default_sort_action_id="sort_files_by_size",
                              default_file_view_action_id="enable_grid_view")
        assert browser.snapshot.sort_key == "size"
        assert browser.snapshot.view_mode is ViewMode.GRID

    def test_missing_default_action_ignored(self, sample_files):
        browser = FileBrowser(files=sample_files, disable_default_file_actions=True)
        assert browser.snapshot.sort_key == "name"
        assert "enable_list_view" not in browser.registry

    def test_duplicate_action_ids_fail_construction(self):
        with pytest.raises(DuplicateActionIdError):
            FileBrowser(file_actions=[FileAction("x"), FileAction("x")])

    def test_generated_instance_id(self):
        assert FileBrowser().instance_id != FileBrowser().instance_id

    def test_enabled_actions(self, browser):
        enabled = browser.enabled_action_ids()
        assert "select_all_files" in enabled
        assert "delete_files" not in enabled


class TestDuplicateIds:
    def test_first_record_wins(self, handled):
        with pytest.warns(DuplicateFileIdWarning):
            browser = FileBrowser(files=[{"id": "a", "name": "x.txt"}, {"id": "a", "name": "y.txt"}],
                                  on_file_action=handled.append)
        browser.dispatch("change_selection", ChangeSelectionPayload(frozenset({"a"})))
        files = browser.selected_files()
        assert len(files) == 1
        assert files[0].name == "x.txt"

    def test_reported_on_bus(self, browser):
        reported = []
        browser.bus.duplicate_file_ids.connect(reported.append)
        with pytest.warns(DuplicateFileIdWarning):
            browser.set_files([{"id": "a", "name": "x"}, {"id": "a", "name": "y"}])
        assert reported == [["a"]]


class TestDispatch:
    def test_unknown_action_leaves_snapshot(self, browser, handled):
        before = browser.snapshot
        ack = browser.dispatch("nope")
        assert isinstance(ack.error, UnknownActionError)
        assert browser.snapshot is before
        assert handled == []

    def test_handler_gets_instance_id(self, browser, handled):
        browser.dispatch("select_all_files")
        assert handled[-1].instance_id == "left"

    def test_instances_are_independent(self, sample_files):
        left = FileBrowser(files=sample_files)
        right = FileBrowser(files=sample_files)
        left.dispatch("select_all_files")
        left.dnd.start_drag("main")
        assert right.snapshot.selected_ids == frozenset()
        assert right.dnd.start_drag("main")
        with pytest.raises(GestureConflictError):
            left.dnd.start_drag("readme")

    def test_disable_selection(self, sample_files):
        browser = FileBrowser(files=sample_files, disable_selection=True)
        browser.dispatch("select_all_files")
        browser.dispatch("mouse_click_file", MouseClickFilePayload("main", 3))
        assert browser.snapshot.selected_ids == frozenset()

    def test_dispatch_from_handler_is_serialized(self, sample_files):
        order = []
        holder = {}

        def handler(data):
            order.append(data.action_id)
            if data.action_id == "select_all_files":
                holder["b"].dispatch("clear_selection")
                # the queued dispatch has not run yet
                order.append(len(holder["b"].snapshot.selected_ids))

        browser = holder["b"] = FileBrowser(files=sample_files, on_file_action=handler)
        browser.dispatch("select_all_files")
        assert order == ["select_all_files", 5, "clear_selection"]
        assert browser.snapshot.selected_ids == frozenset()


class TestSetFiles:
    def test_selection_pruned(self, browser):
        browser.dispatch("change_selection", ChangeSelectionPayload(frozenset({"main", "readme"})))
        browser.set_files([{"id": "main", "name": "main.py"}, {"id": "new", "name": "new.txt"}])
        assert browser.snapshot.selected_ids == {"main"}

    def test_unselectable_now(self, browser):
        browser.dispatch("change_selection", ChangeSelectionPayload(frozenset({"main"})))
        browser.set_files([{"id": "main", "name": "main.py", "selectable": False}])
        assert browser.snapshot.selected_ids == frozenset()

    def test_focus_and_menu_dropped(self, browser):
        browser.interaction.context_menu("main")
        browser.set_files([{"id": "readme", "name": "readme.md"}])
        snap = browser.snapshot
        assert snap.context_menu is None
        assert snap.focused_file_id is None

    def test_files_changed_emitted(self, browser):
        received = []
        browser.bus.files_changed.connect(received.append)
        browser.set_files([None, None])
        assert len(received) == 1
        assert received[0].files == (None, None)

    def test_vanished_sort_key_falls_back(self):
        browser = FileBrowser(files=[{"id": "a", "name": "a", "rating": 1}],
                              file_actions=[FileAction("by_rating", effect=lambda s, d: s.replace(sort_key="rating"))])
        browser.dispatch("by_rating")
        assert browser.snapshot.sort_key == "rating"
        browser.set_files([{"id": "b", "name": "b"}])
        assert browser.snapshot.sort_key == "name"

    def test_set_folder_chain(self, browser):
        browser.set_folder_chain([{"id": "root", "name": "/", "isDir": True}])
        assert browser.snapshot.current_folder.id == "root"


class TestDisplay:
    def test_display_order(self, browser):
        assert browser.display_ids() == ["docs", "src", "data", "main", "readme"]

    def test_display_index(self, browser):
        assert browser.display_index("main") == 3
        assert browser.display_index("env") == -1
