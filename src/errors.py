"""
Error taxonomy for the file browser engine.

Construction errors (duplicate actions, bad configuration) are raised to the
caller. Dispatch errors are captured on the DispatchAck and never leave the
store half-written.
"""


class FileBrowserError(Exception):
    """Base class for everything the engine raises."""


class ConfigError(FileBrowserError):
    pass


class DefaultsFrozenError(ConfigError):
    """Global defaults changed after a browser instance was created."""


class DuplicateActionIdError(FileBrowserError):
    def __init__(self, action_id):
        super().__init__(f"Duplicate file action id: {action_id!r}")
        self.action_id = action_id


class GestureConflictError(FileBrowserError):
    """A drag gesture was started while another one is still active."""


# --- Dispatch-time errors ---

class DispatchError(FileBrowserError):
    pass


class UnknownActionError(DispatchError):
    def __init__(self, action_id):
        super().__init__(f"Unknown file action: {action_id!r}")
        self.action_id = action_id


class SelectionSizeViolationError(DispatchError):
    def __init__(self, action_id, requirement, count):
        super().__init__(
            f"Action {action_id!r} requires {requirement.value} selection, got {count} file(s)"
        )
        self.action_id = action_id
        self.requirement = requirement
        self.count = count


class InvalidPayloadError(DispatchError):
    pass


class InvalidStateTransitionError(DispatchError):
    pass


class EffectExecutionError(DispatchError):
    """A host or built-in callback (effect, selection transform, file filter, extra state) raised."""

    def __init__(self, action_id, cause, stage="effect"):
        super().__init__(f"{stage.capitalize()} of {action_id!r} failed: {cause}")
        self.action_id = action_id
        self.cause = cause
        self.stage = stage


class HandlerExecutionError(DispatchError):
    def __init__(self, action_id, cause):
        super().__init__(f"Handler for {action_id!r} failed: {cause}")
        self.action_id = action_id
        self.cause = cause


class DuplicateFileIdWarning(UserWarning):
    """Two records in one file array share an id. Selection picks the first."""
