"""Bootstrap of the initial workflow module inside the host."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

from PyQt5 import QtCore

from initial_workflow.host.api import MIN_API_VERSION, CapabilityError, Host, HostEvent, View, check_api_version
from initial_workflow.workflow.context import DEFAULT_OWNER, WorkflowContext
from initial_workflow.workflow.controller import WorkflowController
from initial_workflow.workflow.preferences import PreferenceStore
from initial_workflow.workflow.step_catalog import CreatorStep, build_default_buttons, build_default_steps
from initial_workflow.workflow.steps import ButtonStep, WorkflowStep

from .i18n import TranslationConfig, TranslationLoader, Translator
from .logging_config import LoggingConfigurator, LoggingOptions
from .settings_manager import SettingsManager, SettingsPreferenceStore


LOGGER = logging.getLogger(__name__)

PANEL_LABEL = "initial workflow"


@dataclass
class ModuleConfiguration:
    """Values used when constructing :class:`InitialWorkflowModule`."""

    organization: str = "darktable"
    application: str = "InitialWorkflowModule"
    owner: str = DEFAULT_OWNER
    minimum_api_version: str = MIN_API_VERSION
    max_image_reload_attempts: int = 5
    configure_logging: bool = True
    log_directory: Optional[Path] = None
    log_level: int = logging.INFO
    developer_diagnostics: bool = False
    enable_console_logging: bool = False
    translation_directories: Sequence[Path | str] = field(default_factory=list)
    translation_locales: Sequence[str] = field(default_factory=tuple)
    # keep preferences in a QSettings file instead of the host's store
    settings_path: Optional[Path] = None


class InitialWorkflowModule:
    """Creates the steps, restores their selections and wires host events."""

    def __init__(
        self,
        host: Host,
        config: Optional[ModuleConfiguration] = None,
        *,
        translator: Optional[Translator] = None,
        preference_store: Optional[PreferenceStore] = None,
    ) -> None:
        self.host = host
        self.config = config or ModuleConfiguration()
        self.translator = translator or Translator()
        self._preference_store = preference_store
        self.context: Optional[WorkflowContext] = None
        self.steps: List[WorkflowStep] = []
        self.buttons: List[ButtonStep] = []
        self.controller: Optional[WorkflowController] = None
        self.log_path: Optional[Path] = None
        self.installed = False
        self.panel_registered = False
        self._events_registered = False
        self._logging: Optional[LoggingConfigurator] = None
        self._translation_loader: Optional[TranslationLoader] = None

    def _(self, msgid: str) -> str:
        return self.translator.t(msgid)

    # ------------------------------------------------------------------
    # Ambient services
    # ------------------------------------------------------------------
    def _configure_logging(self) -> None:
        if not self.config.configure_logging or self._logging is not None:
            return
        options = LoggingOptions(
            log_directory=self.config.log_directory,
            level=self.config.log_level,
            enable_console=self.config.enable_console_logging,
            developer_diagnostics=self.config.developer_diagnostics,
        )
        self._logging = LoggingConfigurator(options)
        self.log_path = self._logging.configure()

    def _install_translations(self) -> None:
        if not self.config.translation_directories:
            return
        app = QtCore.QCoreApplication.instance()
        if app is None:
            LOGGER.debug("No Qt application, translations not installed", extra={"component": "Module"})
            return
        self._translation_loader = TranslationLoader(
            app,
            TranslationConfig(
                directories=self.config.translation_directories,
                locales=self.config.translation_locales,
            ),
        )
        loaded = self._translation_loader.install()
        self.translator.clear()
        LOGGER.info("Loaded %d translation catalogue(s)", len(loaded), extra={"component": "Module"})

    def _resolve_preference_store(self) -> Optional[PreferenceStore]:
        if self._preference_store is not None:
            return self._preference_store
        if self.config.settings_path is not None:
            manager = SettingsManager(
                self.config.organization, self.config.application, path=self.config.settings_path
            )
            return SettingsPreferenceStore(manager)
        return None

    # ------------------------------------------------------------------
    # Installation
    # ------------------------------------------------------------------
    def install(self) -> bool:
        """Create the workflow; return ``False`` when the host is unsuitable."""

        if self.installed:
            return True

        self._configure_logging()
        try:
            check_api_version(self.host, self.config.minimum_api_version)
        except CapabilityError as exc:
            LOGGER.error("Module not installed: %s", exc, extra={"component": "Module"})
            self.host.print_message(self._("module not installed: %s") % exc)
            return False

        self._install_translations()

        context = WorkflowContext.create(
            self.host,
            self.translator,
            preference_store=self._resolve_preference_store(),
            owner=self.config.owner,
            max_image_reload_attempts=self.config.max_image_reload_attempts,
        )
        self.context = context
        context.log.info(self._("create widget in lighttable and darkroom panels"))

        self.steps = build_default_steps(context)
        for step in self.steps:
            context.preferences.restore(step)

        self.buttons = build_default_buttons(context)
        self.controller = WorkflowController(context, self.steps, self.buttons)
        self.controller.attach()

        view = self.host.current_view()
        if view is View.LIGHTTABLE:
            self._register_panel()

        if not self._events_registered:
            self.host.register_event(self.config.owner, HostEvent.VIEW_CHANGED.value, self.on_view_changed)
            self.host.register_event(self.config.owner, HostEvent.EXIT.value, self.on_exit)
            self._events_registered = True

        self.controller.init_depending_on_current_view(view)
        self.installed = True
        LOGGER.info("Installed %d workflow steps", len(self.steps), extra={"component": "Module"})
        return True

    def _register_panel(self) -> None:
        if self.panel_registered:
            return
        if self.controller is None:
            raise RuntimeError("the panel needs an installed module")
        self.host.register_panel(
            self.config.owner, self._(PANEL_LABEL), self.controller.set_all_default_module_configurations
        )
        self.panel_registered = True

    def uninstall(self) -> None:
        """Release host subscriptions, translators and log handlers."""

        if self._events_registered:
            self.host.destroy_event(self.config.owner, HostEvent.VIEW_CHANGED.value)
            self.host.destroy_event(self.config.owner, HostEvent.EXIT.value)
            self._events_registered = False
        if self.controller is not None:
            self.controller.detach()
        if self._translation_loader is not None:
            self._translation_loader.remove()
            self._translation_loader = None
        if self._logging is not None:
            self._logging.shutdown()
            self._logging = None
        self.installed = False

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------
    def on_view_changed(self, event: str, old_view: Any, new_view: Any) -> None:
        if self.context is not None:
            self.context.log.info(self._("view changed to %s") % getattr(new_view, "value", new_view))
        if new_view is View.LIGHTTABLE and old_view is View.DARKROOM:
            self._register_panel()
        if self.controller is not None:
            self.controller.init_depending_on_current_view(new_view)

    def on_exit(self, event: str, *args: Any) -> None:
        """Persist the creator entry, which has no change notification."""

        if self.context is None:
            return
        for step in self.steps:
            if isinstance(step, CreatorStep):
                self.context.preferences.save(step)


__all__ = ["InitialWorkflowModule", "ModuleConfiguration", "PANEL_LABEL"]
