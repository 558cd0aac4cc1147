import uuid
from collections import deque
from types import MappingProxyType

from browser_store import (BrowserSnapshot, hidden_file_ids, selectable_ids,
                           selected_files, sorted_files)
from errors import (DispatchError, EffectExecutionError, FileBrowserError,
                    HandlerExecutionError, InvalidPayloadError, SelectionSizeViolationError)
from file_action import ActionDispatchState, EffectResult, SelectionTransformContext
from logger import log


class DispatchAck:
    """Outcome of one dispatch. Queued dispatches are resolved before the outermost dispatch() returns."""

    def __init__(self, action_id, payload=None, context=None):
        self.id = str(uuid.uuid4())
        self.action_id = action_id
        self.payload = payload
        self.context = dict(context or {})
        self.status = "Waiting"  # Waiting, Running, Completed, Error
        self.queued = False
        self.committed = False
        self.state = None
        self.error = None

    @property
    def ok(self):
        return self.status == "Completed"

    def raise_for_error(self):
        if self.error is not None:
            raise self.error
        return self

    def __repr__(self):
        return f"<DispatchAck {self.action_id} {self.status}>"


class Dispatcher:
    """
    Serialized dispatch pipeline of one browser instance.

    Every dispatch runs resolve -> filter -> validate -> transform -> build
    state -> effect -> commit -> handler without interleaving. Dispatches made
    while one is running (from a handler, a follow-up or a signal slot) wait in
    a FIFO queue.
    """

    def __init__(self, registry, store, instance_id, handler=None, bus=None,
                 disable_selection=False):
        self.registry = registry
        self.store = store
        self.instance_id = instance_id
        self.bus = bus
        self._handler = handler
        self._disable_selection = disable_selection
        self._queue = deque()
        self._running = False

    @property
    def busy(self):
        return self._running

    def dispatch(self, action_id, payload=None, context=None) -> DispatchAck:
        ack = DispatchAck(action_id, payload, context)
        self._enqueue(ack, lambda: self._execute(ack))
        return ack

    def submit(self, job, label="store_job", after=None) -> DispatchAck:
        """
        Run `job(snapshot) -> snapshot` through the same queue and commit its
        result. `after(snapshot)` is called once the commit succeeded.
        """
        ack = DispatchAck(label)
        self._enqueue(ack, lambda: self._execute_job(ack, job, after))
        return ack

    # ------------------------------------------------------------------ queue
    def _enqueue(self, ack, run):
        self._queue.append((ack, run))
        if self._running:
            ack.queued = True
            log.debug(f"[{self.instance_id}] Queued '{ack.action_id}' behind running dispatch")
            return
        self._drain()

    def _drain(self):
        self._running = True
        try:
            while self._queue:
                ack, run = self._queue.popleft()
                try:
                    run()
                except Exception as e:
                    # Keep draining: queued dispatches belong to this turn
                    log.error(f"[{self.instance_id}] Unexpected error in '{ack.action_id}': {e}", exc_info=True)
                    self._fail(ack, DispatchError(f"Dispatch of '{ack.action_id}' crashed: {e}"))
        finally:
            self._running = False

    # ------------------------------------------------------------------ pipeline
    def _execute(self, ack):
        ack.status = "Running"
        follow_ups = ()
        try:
            action = self.registry.resolve(ack.action_id)
            self._check_payload(action, ack.payload)

            snapshot = self.store.get_snapshot()
            selection = selected_files(snapshot)
            for_action = self._filter_files(action, selection)
            if not action.requires_selection.is_satisfied(len(for_action)):
                raise SelectionSizeViolationError(action.id, action.requires_selection, len(for_action))

            working = snapshot
            new_selection = self._transform_selection(action, snapshot, ack.payload)
            if new_selection is not None:
                working = snapshot.with_selection(new_selection)

            state = self._build_state(action, snapshot, selection, for_action, ack)
            ack.state = state

            if action.effect is not None:
                working, follow_ups = self._run_effect(action, working, state)

            ack.committed = self.store.commit(working)
        except DispatchError as e:
            self._fail(ack, e)
            return

        log.debug(f"[{self.instance_id}] Dispatched '{ack.action_id}' "
                  f"(selected={len(state.selected_files)}, committed={ack.committed})")
        self._call_handler(ack, state)

        for action_id, payload in follow_ups:
            self.dispatch(action_id, payload)

    def _execute_job(self, ack, job, after):
        ack.status = "Running"
        try:
            ack.committed = self.store.commit(job(self.store.get_snapshot()))
        except FileBrowserError as e:
            self._fail(ack, e)
            return
        except Exception as e:
            log.error(f"Store job '{ack.action_id}' failed: {e}", exc_info=True)
            self._fail(ack, EffectExecutionError(ack.action_id, e, stage="store job"))
            return
        if after is not None:
            try:
                after(self.store.get_snapshot())
            except Exception as e:
                log.error(f"Callback after '{ack.action_id}' failed: {e}", exc_info=True)
                self._fail(ack, HandlerExecutionError(ack.action_id, e))
                return
        ack.status = "Completed"

    def _filter_files(self, action, selection):
        try:
            return action.filter_files(selection)
        except Exception as e:
            log.error(f"File filter of '{action.id}' failed: {e}", exc_info=True)
            raise EffectExecutionError(action.id, e, stage="file filter") from e

    def _check_payload(self, action, payload):
        if action.payload_type is not None and not isinstance(payload, action.payload_type):
            raise InvalidPayloadError(
                f"Action '{action.id}' expects {action.payload_type.__name__}, "
                f"got {type(payload).__name__}")

    def _transform_selection(self, action, snapshot, payload):
        if action.selection_transform is None or self._disable_selection:
            return None
        ctx = SelectionTransformContext(
            prev_selection=snapshot.selected_ids,
            file_ids=tuple(f.id for f in snapshot.files if f is not None),
            file_map=snapshot.file_map,
            hidden_file_ids=hidden_file_ids(snapshot),
            display_ids=tuple(f.id for f in sorted_files(snapshot) if f is not None),
            last_click_index=snapshot.last_click_index,
            payload=payload,
            action_id=action.id,
        )
        try:
            result = action.selection_transform(ctx)
            if result is None:
                return None
            return selectable_ids(snapshot, frozenset(result))
        except Exception as e:
            log.error(f"Selection transform of '{action.id}' failed: {e}", exc_info=True)
            raise EffectExecutionError(action.id, e, stage="selection transform") from e

    def _build_state(self, action, snapshot, selection, for_action, ack):
        trigger = ack.context.get("context_menu_trigger_file")
        if isinstance(trigger, str):
            trigger = snapshot.file_map.get(trigger)
        if trigger is None and snapshot.context_menu is not None:
            trigger = snapshot.file_map.get(snapshot.context_menu.trigger_file_id)

        extra = {}
        if action.extra_state is not None:
            try:
                extra = dict(action.extra_state(snapshot) or {})
            except Exception as e:
                log.error(f"Extra state of '{action.id}' failed: {e}", exc_info=True)
                raise EffectExecutionError(action.id, e, stage="extra state") from e

        return ActionDispatchState(
            action_id=action.id,
            instance_id=self.instance_id,
            selected_files=selection,
            selected_files_for_action=for_action,
            context_menu_trigger_file=trigger,
            payload=ack.payload,
            extra=MappingProxyType(extra),
        )

    def _run_effect(self, action, working, state):
        try:
            result = action.effect(working, state)
        except Exception as e:
            log.error(f"Effect of '{action.id}' failed: {e}", exc_info=True)
            raise EffectExecutionError(action.id, e) from e

        if result is None:
            return working, ()
        if isinstance(result, EffectResult):
            snapshot = result.snapshot if result.snapshot is not None else working
            return snapshot, tuple(result.follow_ups)
        if isinstance(result, BrowserSnapshot):
            return result, ()
        raise EffectExecutionError(
            action.id, TypeError(f"effect returned {type(result).__name__}"))

    def _call_handler(self, ack, state):
        if self._handler is not None:
            try:
                self._handler(state)
            except Exception as e:
                log.error(f"File action handler failed for '{ack.action_id}': {e}", exc_info=True)
                self._fail(ack, HandlerExecutionError(ack.action_id, e))
                return
        ack.status = "Completed"
        if self.bus is not None:
            self.bus.action_dispatched.emit(ack)

    def _fail(self, ack, error):
        ack.status = "Error"
        ack.error = error
        log.warning(f"[{self.instance_id}] Dispatch of '{ack.action_id}' failed: {error}")
        if self.bus is not None:
            self.bus.dispatch_failed.emit(ack)
