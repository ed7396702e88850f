"""Event gates: run a host action and wait for the event it triggers.

A gate registers a one-shot listener for its event, executes the supplied
action and then polls a received flag while yielding to the host loop.  The
wait is bounded by five times the configured timeout.  Whatever happens, the
listener is removed and the flag cleared before :meth:`EventGate.wait_for`
returns.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Optional

from .api import GateBusyError, Host, HostEvent, ImageLoadError

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from initial_workflow.core.i18n import Translator
    from initial_workflow.core.workflow_log import WorkflowLog
    from initial_workflow.workflow.context import WorkflowOptions


LOGGER = logging.getLogger(__name__)

TIMEOUT_FACTOR = 5
POLL_DIVISOR = 10
PROGRESS_DOT_INTERVAL_MS = 500
RELOAD_DELAY_FACTOR = 2


class GateOutcome(Enum):
    """Result of a gated host call."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


class EventGate:
    """Base class for gates waiting on one host event type."""

    event_type: ClassVar[HostEvent]

    def __init__(
        self,
        host: Host,
        options: "WorkflowOptions",
        log: "WorkflowLog",
        translator: "Translator",
        *,
        owner: str = "InitialWorkflowModule",
    ) -> None:
        self._host = host
        self._options = options
        self._log = log
        self._translator = translator
        self._owner = owner
        self._received = False
        self._waiting = False

    @property
    def received(self) -> bool:
        return self._received

    @property
    def waiting(self) -> bool:
        return self._waiting

    def _set_received(self) -> None:
        self._received = True

    def _reset_received(self) -> None:
        self._received = False

    def on_event(self, event: str, *args: Any) -> None:
        """Host callback; marks the awaited event as received."""

        self._set_received()

    def wait_for(self, action: Callable[[], Any]) -> GateOutcome:
        """Execute ``action`` and block until the event fires or time runs out."""

        if self._waiting:
            raise GateBusyError(f"gate for {self.event_type.value} is already waiting")

        self._waiting = True
        self._reset_received()
        self._host.register_event(self._owner, self.event_type.value, self.on_event)
        try:
            self._before_action()
            action()
            return self._poll()
        finally:
            self._host.destroy_event(self._owner, self.event_type.value)
            self._reset_received()
            self._waiting = False

    def _before_action(self) -> None:
        """Hook for subclasses that keep per-wait state."""

    def _poll(self) -> GateOutcome:
        timeout = float(self._options.timeout_ms)
        duration_max = timeout * TIMEOUT_FACTOR
        period = timeout / POLL_DIVISOR
        duration = 0.0
        dots = ".."

        # at least one period elapses even if the event arrived during the action
        while (not self._received) or duration < period:
            if duration > 0 and duration % PROGRESS_DOT_INTERVAL_MS == 0:
                self._log.info(dots)
                dots += "."

            self._host.sleep(period)
            duration += period

            if duration >= duration_max:
                if self._received:
                    break
                message = self._translator.t(
                    "timeout after %d ms waiting for event %s - increase timeout setting and try again"
                ) % (duration_max, self.event_type.value)
                self._log.info(message)
                self._log.summary_message(message)
                LOGGER.warning(
                    "Timed out waiting for %s", self.event_type.value,
                    extra={"component": type(self).__name__},
                )
                return GateOutcome.TIMED_OUT

        return GateOutcome.COMPLETED


class PixelPipeGate(EventGate):
    """Waits until the host finished recomputing the processing pipeline."""

    event_type = HostEvent.PIXELPIPE_COMPLETE


class ImageLoadedGate(EventGate):
    """Waits for an image load that acquired the pipeline locks.

    An unclean load is retried after ``2 x timeout`` by displaying the same
    image again.  After ``max_reload_attempts`` unclean loads the wait is
    aborted and :class:`ImageLoadError` is raised once the listener is gone.
    """

    event_type = HostEvent.IMAGE_LOADED

    def __init__(self, *args: Any, max_reload_attempts: int = 5, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.max_reload_attempts = max_reload_attempts
        self.reload_attempts = 0
        self._gave_up = False
        self._failed_image: Optional[Any] = None

    def _before_action(self) -> None:
        self.reload_attempts = 0
        self._gave_up = False
        self._failed_image = None

    def on_event(self, event: str, *args: Any) -> None:
        clean = bool(args[0]) if args else True
        image = args[1] if len(args) > 1 else None
        if clean:
            self._set_received()
            return

        if self.reload_attempts >= self.max_reload_attempts:
            message = self._translator.t("loading image failed, giving up after %d reloads") % (
                self.reload_attempts
            )
            self._log.info(message)
            self._log.summary_message(message)
            LOGGER.error(
                "Image %r not loaded after %d reloads", image, self.reload_attempts,
                extra={"component": "ImageLoadedGate"},
            )
            # stop polling; wait_for raises after tearing down the listener
            self._gave_up = True
            self._failed_image = image
            self._set_received()
            return

        message = self._translator.t(
            "loading image failed, reload is performed (this could indicate a timing problem)"
        )
        self._log.info(message)
        self._log.summary_message(message)

        self.reload_attempts += 1
        self._host.sleep(float(self._options.timeout_ms) * RELOAD_DELAY_FACTOR)
        self._host.display_image(image)

    def wait_for(self, action: Callable[[], Any]) -> GateOutcome:
        outcome = super().wait_for(action)
        if self._gave_up:
            failed = self._failed_image
            self._gave_up = False
            self._failed_image = None
            raise ImageLoadError(
                f"image {failed!r} could not be loaded after {self.max_reload_attempts} reload attempts"
            )
        return outcome


__all__ = [
    "EventGate",
    "GateOutcome",
    "ImageLoadedGate",
    "PixelPipeGate",
]
