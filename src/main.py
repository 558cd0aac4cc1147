"""
Small desktop host around a FileBrowser: lists a local folder, opens folders
on double click / Enter, and shows the registry's toolbar and context menu.
"""
import os
import sys

from PySide6.QtWidgets import (QApplication, QMainWindow, QTableView, QHeaderView,
                               QToolBar, QMenu, QLabel)
from PySide6.QtCore import Qt, QEvent, QItemSelection, QItemSelectionModel
from PySide6.QtGui import QAction
import qtawesome as qta

from builtin_actions import CREATE_FOLDER, DELETE_FILES
from file_browser import FileBrowser
from file_model import FileModel
from logger import log, setup_logger


def scan_folder(path):
    """Directory listing as file descriptors. Unreadable entries are skipped."""
    items = []
    try:
        entries = list(os.scandir(path))
    except OSError as e:
        log.error(f"Cannot list {path}: {e}")
        return items
    for entry in entries:
        try:
            st = entry.stat(follow_symlinks=False)
        except OSError:
            continue
        is_dir = entry.is_dir()
        items.append({
            "id": entry.path,
            "name": entry.name,
            "isDir": is_dir,
            "isSymlink": entry.is_symlink(),
            "size": None if is_dir else st.st_size,
            "modDate": st.st_mtime,
        })
    return items


def folder_chain(path):
    chain = []
    path = os.path.abspath(path)
    while True:
        chain.append({"id": path, "name": os.path.basename(path) or path, "isDir": True})
        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent
    return list(reversed(chain))


class BrowserWindow(QMainWindow):
    def __init__(self, start_path):
        super().__init__()
        self.setWindowTitle("FileDeck")
        self.resize(900, 600)

        self.browser = FileBrowser(
            files=scan_folder(start_path),
            folder_chain=folder_chain(start_path),
            file_actions=[CREATE_FOLDER, DELETE_FILES],
            on_file_action=self.on_file_action,
            parent=self,
        )
        self.model = FileModel(self.browser, self)

        self.table = QTableView()
        self.table.setModel(self.model)
        self.table.setSelectionBehavior(QTableView.SelectRows)
        self.table.setSelectionMode(QTableView.ExtendedSelection)
        self.table.setShowGrid(False)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Interactive)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.horizontalHeader().setSectionsClickable(True)
        self.table.horizontalHeader().sectionClicked.connect(self._on_header_clicked)
        self.table.installEventFilter(self)
        self.table.viewport().installEventFilter(self)
        self.setCentralWidget(self.table)

        self.path_label = QLabel(start_path)
        self.statusBar().addWidget(self.path_label)

        self.toolbar = QToolBar("Actions")
        self.addToolBar(self.toolbar)
        self._toolbar_actions = {}
        for action in self.browser.registry.toolbar_actions():
            btn = action.button
            qaction = QAction(btn.name, self)
            if btn.icon:
                qaction.setIcon(qta.icon(btn.icon, color="#cdd6f4"))
            qaction.triggered.connect(lambda checked=False, a=action.id: self.browser.dispatch(a))
            self.toolbar.addAction(qaction)
            self._toolbar_actions[action.id] = qaction

        self.browser.store.snapshot_changed.connect(self._on_snapshot_changed)
        self.browser.bus.dispatch_failed.connect(
            lambda ack: self.statusBar().showMessage(str(ack.error), 3000))
        self._on_snapshot_changed(self.browser.snapshot)

    # ------------------------------------------------------------------ host handler
    def on_file_action(self, data):
        if data.action_id == "open_files":
            target = data.payload.target_file
            if target.is_directory:
                self.open_folder(target.id)
        elif data.action_id == "delete_files":
            names = ", ".join(f.name for f in data.selected_files_for_action)
            self.statusBar().showMessage(f"Delete requested: {names}", 3000)

    def open_folder(self, path):
        log.info(f"Opening {path}")
        self.path_label.setText(path)
        self.browser.set_files(scan_folder(path))
        self.browser.set_folder_chain(folder_chain(path))

    # ------------------------------------------------------------------ view sync
    def _on_snapshot_changed(self, snapshot):
        for action_id, qaction in self._toolbar_actions.items():
            qaction.setEnabled(self.browser.registry.is_enabled(action_id, snapshot))

        selection = QItemSelection()
        last_col = self.model.columnCount() - 1
        for file_id in snapshot.selected_ids:
            row = self.model.row_for_id(file_id)
            if row >= 0:
                selection.select(self.model.index(row, 0), self.model.index(row, last_col))
        self.table.selectionModel().select(selection, QItemSelectionModel.ClearAndSelect)

        focused = self.model.row_for_id(snapshot.focused_file_id)
        if focused >= 0:
            self.table.selectionModel().setCurrentIndex(
                self.model.index(focused, 0), QItemSelectionModel.NoUpdate)

    def _on_header_clicked(self, section):
        order = Qt.AscendingOrder
        if self.model.headerData(section, Qt.Horizontal).endswith("▲"):
            order = Qt.DescendingOrder
        self.model.sort(section, order)

    # ------------------------------------------------------------------ input
    def eventFilter(self, source, event):
        ui = self.browser.interaction
        if event.type() == QEvent.KeyPress and source is self.table:
            return ui.handle_key(event.key(), event.modifiers()) is not None

        # Qt delivers the second press of a double click as MouseButtonDblClick
        if event.type() in (QEvent.MouseButtonPress, QEvent.MouseButtonDblClick) \
                and source is self.table.viewport():
            pos = event.position().toPoint()
            index = self.table.indexAt(pos)
            file = self.model.get_file(index.row()) if index.isValid() else None
            if file is None:
                ui.outside_click()
                return True
            mods = event.modifiers()
            if event.button() == Qt.RightButton:
                ui.context_menu(file.id, pos.x(), pos.y())
                self.show_context_menu(pos)
            elif event.button() == Qt.LeftButton:
                ui.click_file(file.id,
                              ctrl=bool(mods & Qt.ControlModifier),
                              shift=bool(mods & Qt.ShiftModifier),
                              timestamp_ms=event.timestamp())
            return True
        return super().eventFilter(source, event)

    def show_context_menu(self, pos):
        snapshot = self.browser.snapshot
        menu = QMenu(self)
        for action in self.browser.registry.context_menu_actions():
            btn = action.button
            icon = qta.icon(btn.icon, color="#cdd6f4") if btn.icon else qta.icon("fa5s.circle")
            qaction = menu.addAction(icon, btn.name)
            qaction.setData(action.id)
            qaction.setEnabled(self.browser.registry.is_enabled(action.id, snapshot))
        chosen = menu.exec(self.table.viewport().mapToGlobal(pos))
        # The action still sees the trigger file; close the menu state afterwards
        if chosen is not None:
            self.browser.dispatch(chosen.data())
        self.browser.dispatch("close_file_context_menu")


def main():
    listener = setup_logger()
    app = QApplication(sys.argv)
    start = sys.argv[1] if len(sys.argv) > 1 else os.getcwd()
    window = BrowserWindow(os.path.abspath(start))
    window.show()
    code = app.exec()
    listener.stop()
    return code


if __name__ == "__main__":
    sys.exit(main())
