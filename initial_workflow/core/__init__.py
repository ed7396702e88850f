"""Ambient services: logging, settings, translations and the run log."""
from .i18n import Translator
from .logging_config import LoggingConfigurator, LoggingOptions
from .settings_manager import SettingsManager, SettingsPreferenceStore
from .workflow_log import WorkflowLog

__all__ = [
    "LoggingConfigurator",
    "LoggingOptions",
    "SettingsManager",
    "SettingsPreferenceStore",
    "Translator",
    "WorkflowLog",
]
