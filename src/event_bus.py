from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Per-instance event hub between the engine and the presentation layer.
    Each FileBrowser owns its own bus; nothing here is process-wide.
    """

    # --- Dispatch ---
    # Emitted after the host handler has seen a successful dispatch
    action_dispatched = Signal(object)  # DispatchAck

    # Emitted when a dispatch is rejected or its effect fails
    dispatch_failed = Signal(object)  # DispatchAck

    # --- Files ---
    # Emitted when a new file array has been committed
    files_changed = Signal(object)  # BrowserSnapshot

    # Emitted when the file array contains repeated ids
    duplicate_file_ids = Signal(list)

    # --- Drag and Drop ---
    gesture_changed = Signal(object)  # GestureState
