"""Typed wrappers around the host's generic UI automation call.

Paths follow the host's action naming, e.g. ``iop/exposure/exposure`` for a
control of a processing module or ``lib/history`` for a utility module.
Calls that change the image are routed through :class:`PixelPipeGate` so the
caller continues only after the host finished recomputing the pipeline.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .api import Host
from .events import GateOutcome, PixelPipeGate
from .formatting import (
    READ_SENTINEL,
    number_to_string,
    quote,
    round_value,
    value_to_bool,
)

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from initial_workflow.core.i18n import Translator
    from initial_workflow.core.workflow_log import WorkflowLog
    from initial_workflow.workflow.context import WorkflowOptions


LOGGER = logging.getLogger(__name__)

INDENT = ". "
RIGHT_PANEL = "DT_UI_PANEL_RIGHT"


class GuiAction:
    """Host action proxy used by all workflow steps."""

    def __init__(
        self,
        host: Host,
        pixelpipe: PixelPipeGate,
        options: "WorkflowOptions",
        log: "WorkflowLog",
        translator: "Translator",
    ) -> None:
        self._host = host
        self._pixelpipe = pixelpipe
        self._options = options
        self._log = log
        self._translator = translator

    def _(self, msgid: str) -> str:
        return self._translator.t(msgid)

    def _settle(self) -> None:
        self._host.sleep(self._options.timeout_ms / 2)

    # ------------------------------------------------------------------
    # Raw calls
    # ------------------------------------------------------------------
    def _do_internal(
        self,
        path: str,
        instance: int,
        element: str,
        effect: str,
        speed: float,
        wait_for_pipeline: bool,
    ) -> Any:
        self._log.info(
            f"gui_action({quote(path)},{instance},{quote(element)},{quote(effect)},"
            f"{number_to_string(speed)})"
        )

        if not wait_for_pipeline:
            result = self._host.gui_action(path, instance, element, effect, speed)
            self._settle()
            return result

        holder: dict[str, Any] = {}

        def _action() -> None:
            holder["result"] = self._host.gui_action(path, instance, element, effect, speed)

        outcome = self._pixelpipe.wait_for(_action)
        if outcome is GateOutcome.TIMED_OUT:
            LOGGER.debug("Action on %s finished without pipeline event", path, extra={"component": "GuiAction"})
        return holder.get("result")

    def do(self, path: str, instance: int = 0, element: str = "", effect: str = "", speed: float = 1.0) -> Any:
        """Perform the action and wait for ``pixelpipe-processing-complete``."""

        return self._do_internal(path, instance, element, effect, speed, True)

    def do_without_event(
        self, path: str, instance: int = 0, element: str = "", effect: str = "", speed: float = 1.0
    ) -> Any:
        """Perform an action that does not trigger pipeline processing."""

        return self._do_internal(path, instance, element, effect, speed, False)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------
    def get_value(self, path: str, element: str) -> Any:
        """Read the current value of ``element`` without changing it."""

        value = self.do_without_event(path, 0, element, "", READ_SENTINEL)
        self._log.info(f"{INDENT}get {quote(path)} {element} = {number_to_string(value, 'NaN', 'nil')}")
        return value

    def set_value(self, path: str, instance: int, element: str, effect: str, speed: float) -> bool:
        """Write ``speed`` unless the host already holds that value.

        Both values are compared after rounding to four decimals; the host
        does not emit a completion event for an unchanged value, so waiting
        for one would only run into the timeout.  Returns ``True`` when a
        write was issued.
        """

        current = round_value(self.do_without_event(path, 0, element, "set", READ_SENTINEL))
        requested = round_value(speed)
        self._log.info(f"{INDENT}get {quote(path)} {element} = {number_to_string(current, 'NaN', 'nil')}")

        if current != requested:
            self.do(path, instance, element, effect, speed)
            return True

        self._log.info(
            INDENT + self._("nothing to do, value already equals to %s") % quote(number_to_string(current))
        )
        return False

    def button_off_on(self, path: str) -> None:
        """Push the button at ``path``, releasing it first if it is active."""

        self._log.info(self._("push button off and on: %s") % quote(path))

        state = self.get_value(path, "button")
        if value_to_bool(state):
            self.do_without_event(path, 0, "button", "off", 1.0)
        else:
            self._log.info(INDENT + self._("nothing to do, button is already inactive"))

        self.do(path, 0, "button", "on", 1.0)

    def check_box_on(self, path: str) -> None:
        """Tick the checkbox at ``path`` if it is not ticked yet."""

        if not value_to_bool(self.get_value(path, "")):
            self.do(path, 0, "", "on", 1.0)
        else:
            self._log.info(INDENT + self._("checkbox already selected, nothing to do"))

    def select_module_preset(self, prefix: str, group: str, preset: str) -> None:
        """Apply ``preset`` of a module, optionally below a preset ``group``."""

        name = f"{group}: {preset}" if group else preset
        self._log.info(self._("apply preset %s") % quote(name))
        self.do(prefix + name, 0, "", "", 1.0)

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------
    def show_module(self, module: str) -> None:
        self._log.info(self._("show module if not visible: %s") % module)
        if not value_to_bool(self.get_value(module, "show")):
            self._host.panel_show(RIGHT_PANEL)
            self._settle()
            self.do_without_event(module, 0, "show", "", 1.0)
        else:
            self._log.info(INDENT + self._("module is already visible, nothing to do"))

    def hide_module(self, module: str) -> None:
        self._log.info(self._("hide module if visible: %s") % module)
        if value_to_bool(self.get_value(module, "show")):
            self.do_without_event(module, 0, "show", "", 1.0)
        else:
            self._log.info(INDENT + self._("module is already hidden, nothing to do"))

    def enable_module(self, module: str) -> None:
        self._log.info(self._("enable module if disabled: %s") % module)
        if not value_to_bool(self.get_value(module, "enable")):
            self.do(module, 0, "enable", "", 1.0)
        else:
            self._log.info(INDENT + self._("module is already enabled, nothing to do"))

        if self._options.show_modules_during_execution:
            self.show_module(module)

    def disable_module(self, module: str) -> None:
        self._log.info(self._("disable module if enabled: %s") % module)
        if value_to_bool(self.get_value(module, "enable")):
            self.do(module, 0, "enable", "", 1.0)
        else:
            self._log.info(INDENT + self._("module is already disabled, nothing to do"))

    def reset_module(self, module: str) -> None:
        self._log.info(f"{self._translator.tdt('reset parameters')} ({module})")
        self.do(module, 0, "reset", "", 1.0)

    def show_active_modules(self) -> None:
        """Switch the module group selector to the active modules."""

        self.do_without_event("lib/modulegroups/active modules", 0, "", "on", 1.0)


__all__ = ["GuiAction", "INDENT"]
