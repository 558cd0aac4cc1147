from PySide6.QtCore import Qt, QAbstractTableModel, QModelIndex
from PySide6.QtGui import QColor, QBrush, QFont, QIcon
import qtawesome as qta

from browser_store import SortOrder
from file_record import format_size

# column -> (header, sort key, sort action)
COLUMNS = (
    ("Name", "name", "sort_files_by_name"),
    ("Ext", "extension", None),
    ("Size", "size", "sort_files_by_size"),
    ("Modified", "modified", "sort_files_by_date"),
)

LOADING_TEXT = "Loading..."


class FileModel(QAbstractTableModel):
    """
    Table view adapter over a FileBrowser. Rows follow the store's display
    order; the model never sorts or filters on its own.
    """

    def __init__(self, browser, parent=None):
        super().__init__(parent)
        self.browser = browser
        self.headers = [c[0] for c in COLUMNS]
        self.files = list(browser.display_files())
        self._icon_component = browser.config.icon_component

        # Pre-cache icons
        self.icon_folder  = qta.icon("fa5s.folder", color="#f9e2af")
        self.icon_file    = qta.icon("fa5s.file-alt", color="#bac2de")
        self.icon_zip     = qta.icon("fa5s.file-archive", color="#a6e3a1")
        self.icon_exe     = qta.icon("fa5s.terminal", color="#f38ba8")
        self.icon_img     = qta.icon("fa5s.file-image", color="#cba6f7")
        self.icon_lock    = qta.icon("fa5s.lock", color="#fab387")
        self.icon_loading = qta.icon("fa5s.circle-notch", color="#585b70")

        browser.store.snapshot_changed.connect(self._on_snapshot_changed)

    def _on_snapshot_changed(self, snapshot):
        self.beginResetModel()
        self.files = list(self.browser.display_files())
        self.endResetModel()

    # ------------------------------------------------------------------ sorting
    def sort(self, column: int, order: Qt.SortOrder = Qt.SortOrder.AscendingOrder):
        """Header click: routed through the column's sort action."""
        action_id = COLUMNS[column][2] if 0 <= column < len(COLUMNS) else None
        if action_id is None or action_id not in self.browser.registry:
            return
        wanted = SortOrder.ASC if order == Qt.SortOrder.AscendingOrder else SortOrder.DESC
        # Sort actions flip the order when fired twice, so at most two dispatches
        for _ in range(2):
            snapshot = self.browser.snapshot
            if snapshot.sort_key == COLUMNS[column][1] and snapshot.sort_order is wanted:
                break
            if not self.browser.dispatch(action_id).ok:
                break

    # ------------------------------------------------------------------ Qt API
    def rowCount(self, parent=QModelIndex()):
        if parent.isValid(): return 0
        return len(self.files)

    def columnCount(self, parent=QModelIndex()):
        return len(self.headers)

    def _icon_for(self, file):
        if file is None:
            return self.icon_loading
        if self._icon_component is not None:
            icon = self._icon_component(file)
            if isinstance(icon, str):
                return qta.icon(icon)
            if isinstance(icon, QIcon):
                return icon
        if isinstance(file.icon, str):
            return qta.icon(file.icon, color=file.color or "#bac2de")
        if file.is_encrypted: return self.icon_lock
        if file.is_directory: return self.icon_folder
        ext = file.extension.lower()
        if ext in ["zip", "7z", "rar", "tar", "gz"]: return self.icon_zip
        if ext in ["exe", "bat", "cmd", "sh", "py"]:  return self.icon_exe
        if ext in ["jpg", "jpeg", "png", "gif", "bmp", "svg"]: return self.icon_img
        return self.icon_file

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None

        file = self.files[index.row()]
        col  = index.column()

        if role == Qt.DecorationRole and col == 0:
            return self._icon_for(file)

        if file is None:
            if role == Qt.DisplayRole and col == 0:
                return LOADING_TEXT
            if role == Qt.ForegroundRole:
                return QBrush(QColor("#585b70"))
            return None

        if role == Qt.ForegroundRole:
            if file.color: return QBrush(QColor(file.color))
            if file.is_directory: return QBrush(QColor("#f9e2af"))
            if file.is_hidden: return QBrush(QColor("#6c7086"))

        if role == Qt.TextAlignmentRole:
            if col in [1, 2]:
                return Qt.AlignRight | Qt.AlignVCenter
            return Qt.AlignLeft | Qt.AlignVCenter

        if role == Qt.UserRole:
            return file.id

        if role != Qt.DisplayRole:
            return None

        if col == 0: return file.name
        if col == 1: return file.extension
        if col == 2:
            if file.is_directory:
                return "<DIR>" if file.child_count is None else f"{file.child_count} items"
            return format_size(file.size)
        if col == 3:
            return file.modified.strftime('%d.%m.%Y %H:%M') if file.modified else ""
        return None

    def flags(self, index):
        if not index.isValid():
            return Qt.NoItemFlags
        file = self.files[index.row()]
        if file is None:
            # Placeholders are shown but cannot be interacted with
            return Qt.ItemIsEnabled
        flags = Qt.ItemIsEnabled
        if file.selectable: flags |= Qt.ItemIsSelectable
        if file.draggable: flags |= Qt.ItemIsDragEnabled
        if file.droppable: flags |= Qt.ItemIsDropEnabled
        return flags

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal:
            snapshot = self.browser.snapshot
            active = COLUMNS[section][1] == snapshot.sort_key
            if role == Qt.DisplayRole:
                label = self.headers[section]
                if active:
                    label += "  ▲" if snapshot.sort_order is SortOrder.ASC else "  ▼"
                return label
            if role == Qt.FontRole and active:
                f = QFont()
                f.setBold(True)
                return f
        return None

    def get_file(self, row):
        if 0 <= row < len(self.files):
            return self.files[row]
        return None

    def row_for_id(self, file_id):
        for row, f in enumerate(self.files):
            if f is not None and f.id == file_id:
                return row
        return -1
