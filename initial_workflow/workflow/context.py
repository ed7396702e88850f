"""Shared services handed to every step, the sequencer and the controller."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from initial_workflow.core.i18n import Translator
from initial_workflow.core.workflow_log import WorkflowLog
from initial_workflow.host.actions import GuiAction
from initial_workflow.host.api import Host
from initial_workflow.host.events import ImageLoadedGate, PixelPipeGate

from .preferences import PreferenceCodec, PreferenceStore


DEFAULT_TIMEOUT_MS = 2000
DEFAULT_OWNER = "InitialWorkflowModule"


@dataclass
class WorkflowOptions:
    """Process wide run settings.

    Only the common-settings steps (timeout, show modules, run single steps
    on change) write these values; everything else reads them.
    """

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    show_modules_during_execution: bool = False
    run_single_step_on_change: bool = True


@dataclass
class WorkflowContext:
    """Dependencies threaded through the workflow objects."""

    host: Host
    translator: Translator
    log: WorkflowLog
    options: WorkflowOptions
    actions: GuiAction
    pixelpipe: PixelPipeGate
    image_loaded: ImageLoadedGate
    preferences: PreferenceCodec = field(repr=False)
    owner: str = DEFAULT_OWNER

    @classmethod
    def create(
        cls,
        host: Host,
        translator: Optional[Translator] = None,
        *,
        options: Optional[WorkflowOptions] = None,
        log: Optional[WorkflowLog] = None,
        preference_store: Optional[PreferenceStore] = None,
        owner: str = DEFAULT_OWNER,
        max_image_reload_attempts: int = 5,
    ) -> "WorkflowContext":
        """Wire gates, the action proxy and the preference codec around ``host``.

        Preferences go to the host unless ``preference_store`` is given.
        """

        translator = translator or Translator()
        options = options or WorkflowOptions()
        log = log or WorkflowLog(host, translate=translator.t)
        pixelpipe = PixelPipeGate(host, options, log, translator, owner=owner)
        image_loaded = ImageLoadedGate(
            host, options, log, translator, owner=owner, max_reload_attempts=max_image_reload_attempts
        )
        actions = GuiAction(host, pixelpipe, options, log, translator)
        preferences = PreferenceCodec(preference_store or host, translator, owner)
        return cls(
            host=host,
            translator=translator,
            log=log,
            options=options,
            actions=actions,
            pixelpipe=pixelpipe,
            image_loaded=image_loaded,
            preferences=preferences,
            owner=owner,
        )

    def sleep(self, milliseconds: float) -> None:
        self.host.sleep(milliseconds)


__all__ = ["DEFAULT_OWNER", "DEFAULT_TIMEOUT_MS", "WorkflowContext", "WorkflowOptions"]
