"""Panel interactions: run button, single steps, bulk configuration."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Type

from initial_workflow.host.api import HostError, View

from .context import WorkflowContext
from .sequencer import Sequencer
from .step_catalog import CreatorStep, LicenseStep, RunSingleStepOnChangeStep, TimeoutStep
from .steps import BasicMode, ButtonStep, ComboBoxStep, StackGroup, WorkflowStep


LOGGER = logging.getLogger(__name__)

BULK_CHANGE_SLEEP_MS = 100

# steps whose values are personal and survive bulk changes and resets
BULK_EXCLUDED: Tuple[Type[WorkflowStep], ...] = (TimeoutStep, CreatorStep)
RESET_EXCLUDED: Tuple[Type[WorkflowStep], ...] = (
    TimeoutStep,
    RunSingleStepOnChangeStep,
    CreatorStep,
    LicenseStep,
)


class ModuleSettingsChoice(str, Enum):
    """Choices of the "all module settings" selector."""

    DEFAULT = "default"
    UNCHANGED = "unchanged"


class WorkflowController:
    """Connects panel events with steps, preferences and the sequencer."""

    def __init__(
        self,
        context: WorkflowContext,
        steps: Sequence[WorkflowStep],
        buttons: Sequence[ButtonStep] = (),
        *,
        sequencer: Optional[Sequencer] = None,
    ) -> None:
        self.context = context
        self.steps: List[WorkflowStep] = list(steps)
        self.buttons: List[ButtonStep] = list(buttons)
        self.sequencer = sequencer or Sequencer(context, self.steps)
        self.active_stack = StackGroup.MODULES

    def _(self, msgid: str) -> str:
        return self.context.translator.t(msgid)

    def attach(self) -> None:
        """Start reacting to selection changes of the steps."""

        for step in self.steps:
            step.on_changed = self.on_step_changed

    def detach(self) -> None:
        for step in self.steps:
            step.on_changed = None

    def steps_in(self, group: StackGroup) -> List[WorkflowStep]:
        return [step for step in self.steps if step.stack_group is group]

    # ------------------------------------------------------------------
    # Buttons
    # ------------------------------------------------------------------
    def run_clicked(self) -> Optional[bool]:
        """Process the displayed image or the lighttable selection.

        Returns whether the run was canceled, ``None`` when the current view
        cannot start a run.
        """

        view = self.context.host.current_view()
        if view is View.DARKROOM:
            return self.sequencer.process_image()
        if view is View.LIGHTTABLE:
            return self.sequencer.process_selected_images()
        LOGGER.debug("Run ignored in view %s", view, extra={"component": "WorkflowController"})
        return None

    def show_modules_clicked(self) -> None:
        self.active_stack = StackGroup.MODULES

    def show_settings_clicked(self) -> None:
        self.active_stack = StackGroup.SETTINGS

    # ------------------------------------------------------------------
    # Selection changes
    # ------------------------------------------------------------------
    def on_step_changed(self, step: WorkflowStep) -> None:
        self.context.preferences.save(step)
        self.run_single_step(step)

    def run_single_step(self, step: WorkflowStep) -> bool:
        """Run ``step`` alone so the user sees the effect of a changed value.

        Only module steps run, only in the darkroom view, and only while
        both the global option and the step's own flag allow it.
        """

        context = self.context
        if context.host.current_view() is not View.DARKROOM:
            return False
        if not context.options.run_single_step_on_change:
            return False
        if not step.check_run_single_step_on_change():
            return False
        if step.stack_group is StackGroup.SETTINGS:
            return False

        if step.show_module_during_single_run and step.operation_name() is not None:
            context.actions.show_active_modules()
            context.actions.show_module(step.operation_path())

        log = context.log
        log.current_step = step.label_text
        log.screen(step.label_text)
        try:
            step.run()
        except HostError as exc:
            LOGGER.warning(
                "Single step %s failed: %s", step.label_text, exc,
                extra={"component": "WorkflowController"}, exc_info=True,
            )
            log.screen(self._("step failed: %s") % exc)
        finally:
            log.current_step = ""
        log.screen("Done")
        return True

    # ------------------------------------------------------------------
    # Bulk configuration
    # ------------------------------------------------------------------
    @contextmanager
    def _without_single_runs(self, step: WorkflowStep) -> Iterator[WorkflowStep]:
        step.disable_run_single_step_on_change()
        try:
            yield step
            # lets pending change callbacks see the disabled flag
            self.context.sleep(BULK_CHANGE_SLEEP_MS)
        finally:
            step.enable_run_single_step_on_change()

    def _bulk_targets(self, group: StackGroup) -> List[WorkflowStep]:
        return [step for step in self.steps_in(group) if not isinstance(step, BULK_EXCLUDED)]

    def configure_all_module_basics(self, mode: BasicMode) -> None:
        """Apply ``mode`` to the basic selection of every module step."""

        for step in self._bulk_targets(StackGroup.MODULES):
            with self._without_single_runs(step):
                if mode is BasicMode.DEFAULT:
                    step.enable_default_basic_configuration()
                else:
                    step.set_basic(mode)

    def configure_all_module_settings(self, choice: ModuleSettingsChoice) -> None:
        """Select the default or the unchanged configuration of every module step."""

        for step in self._bulk_targets(StackGroup.MODULES):
            with self._without_single_runs(step):
                if choice is ModuleSettingsChoice.DEFAULT:
                    step.enable_default_step_configuration()
                elif isinstance(step, ComboBoxStep):
                    step.enable_unchanged_step_configuration()

    def configure_all_common_settings(self) -> None:
        """Select the default configuration of every common setting."""

        for step in self._bulk_targets(StackGroup.SETTINGS):
            with self._without_single_runs(step):
                self.context.log.info(step.label_text)
                step.enable_default_step_configuration()

    def set_all_default_module_configurations(self) -> None:
        """Panel reset: default basic and configuration for every step.

        Personal choices (timeout, single step runs, creator and license)
        are kept.
        """

        for step in self.steps:
            if isinstance(step, RESET_EXCLUDED):
                continue
            with self._without_single_runs(step):
                step.enable_default_basic_configuration()
                step.enable_default_step_configuration()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def init_depending_on_current_view(self, view: Optional[View] = None) -> None:
        view = view or self.context.host.current_view()
        for step in self.steps:
            step.init_depending_on_current_view(view)
        for button in self.buttons:
            button.init_depending_on_current_view(view)


__all__ = [
    "BULK_EXCLUDED",
    "RESET_EXCLUDED",
    "ModuleSettingsChoice",
    "WorkflowController",
]
