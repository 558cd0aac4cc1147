import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from action_registry import ActionRegistry
from browser_store import BrowserSnapshot
from builtin_actions import (DEFAULT_ACTIONS, DELETE_FILES, ESSENTIAL_ACTIONS,
                             builtin_actions)
from errors import DuplicateActionIdError, UnknownActionError
from file_action import ActionButton, FileAction, SelectionRequirement
from file_record import normalize_files


def test_register_unique_ids():
    registry = ActionRegistry.register([FileAction("a"), FileAction("b")])
    assert len(registry) == 2
    assert registry.ids() == ("a", "b")


def test_register_duplicate_ids():
    with pytest.raises(DuplicateActionIdError) as exc:
        ActionRegistry.register([FileAction("a"), FileAction("b"), FileAction("a")])
    assert exc.value.action_id == "a"


def test_register_rejects_non_actions():
    with pytest.raises(TypeError):
        ActionRegistry.register(["open"])


def test_resolve_known():
    action = FileAction("a")
    assert ActionRegistry.register([action]).resolve("a") is action


def test_resolve_unknown():
    registry = ActionRegistry.register([FileAction("a")])
    with pytest.raises(UnknownActionError):
        registry.resolve("nope")
    assert registry.get("nope") is None
    assert "nope" not in registry


class TestBuild:
    def test_merges_builtin_and_host(self):
        registry = ActionRegistry.build(ESSENTIAL_ACTIONS, [DELETE_FILES])
        assert "delete_files" in registry
        assert "mouse_click_file" in registry

    def test_host_collision_rejected_by_default(self):
        with pytest.raises(DuplicateActionIdError):
            ActionRegistry.build(ESSENTIAL_ACTIONS, [FileAction("open_files")])

    def test_host_collision_allowed_when_configured(self):
        custom = FileAction("open_files")
        registry = ActionRegistry.build(ESSENTIAL_ACTIONS, [custom], allow_override=True)
        assert registry.resolve("open_files") is custom
        assert len(registry) == len(ESSENTIAL_ACTIONS)

    def test_duplicates_within_host_always_rejected(self):
        with pytest.raises(DuplicateActionIdError):
            ActionRegistry.build((), [FileAction("x"), FileAction("x")], allow_override=True)


class TestBuiltinSelection:
    def test_all_defaults(self):
        assert builtin_actions() == ESSENTIAL_ACTIONS + DEFAULT_ACTIONS

    def test_defaults_disabled(self):
        assert builtin_actions(True) == ESSENTIAL_ACTIONS

    def test_some_defaults_disabled(self):
        ids = [a.id for a in builtin_actions({"enable_grid_view", "select_all_files"})]
        assert "enable_grid_view" not in ids
        assert "select_all_files" not in ids
        assert "enable_list_view" in ids


class TestEnablement:
    @pytest.fixture
    def snapshot(self):
        normalized = normalize_files([
            {"id": "a", "name": "a.txt"},
            {"id": "d", "name": "dir", "isDir": True},
        ])
        return BrowserSnapshot(files=normalized.files, file_map=normalized.file_map)

    @pytest.fixture
    def registry(self):
        return ActionRegistry.register([
            FileAction("any"),
            FileAction("one", requires_selection=SelectionRequirement.EXACTLY_ONE),
            FileAction("files_only", requires_selection=SelectionRequirement.ONE_OR_MORE,
                       file_filter=lambda f: not f.is_directory),
            FileAction("none_selected", requires_selection=SelectionRequirement.EXACTLY_ZERO,
                       button=ActionButton("Upload", toolbar=True)),
        ])

    def test_empty_selection(self, registry, snapshot):
        enabled = {a.id for a in registry.enabled_actions(snapshot)}
        assert enabled == {"any", "none_selected"}

    def test_file_filter_narrows(self, registry, snapshot):
        snap = snapshot.with_selection({"d"})
        assert registry.is_enabled("one", snap)
        assert not registry.is_enabled("files_only", snap)

    def test_failing_file_filter_disables(self, snapshot):
        def bad_filter(f):
            raise RuntimeError("bad filter")
        registry = ActionRegistry.register([
            FileAction("flaky", file_filter=bad_filter)])
        assert not registry.is_enabled("flaky", snapshot.with_selection({"a"}))

    def test_toolbar_actions(self, registry):
        assert [a.id for a in registry.toolbar_actions()] == ["none_selected"]
