"""Persist step selections as language independent preference strings."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Protocol

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from initial_workflow.core.i18n import Translator

    from .steps import WorkflowStep


LOGGER = logging.getLogger(__name__)

PREFIX = "Current"
BASIC = "Basic"
CONFIG = "Config"


class PreferenceStore(Protocol):
    """String preferences addressed by namespace and key."""

    def read_preference(self, namespace: str, key: str) -> str:
        """Return the stored string, ``""`` when missing."""

    def write_preference(self, namespace: str, key: str, value: str) -> None:
        """Store ``value`` under ``namespace``/``key``."""


class PreferenceCodec:
    """Save and restore step selections.

    Keys are built from the untranslated step label and values hold the
    untranslated selection, so a stored workflow survives a change of the
    user interface language.
    """

    def __init__(self, store: PreferenceStore, translator: "Translator", namespace: str) -> None:
        self._store = store
        self._translator = translator
        self.namespace = namespace

    def key(self, kind: str, step: "WorkflowStep") -> str:
        return f"{PREFIX}:{kind}:{self._translator.reverse(step.label_text)}"

    def _read(self, kind: str, step: "WorkflowStep") -> str:
        return self._store.read_preference(self.namespace, self.key(kind, step)) or ""

    def _write_if_changed(self, kind: str, step: "WorkflowStep", value: str) -> bool:
        if self._read(kind, step) == value:
            return False
        self._store.write_preference(self.namespace, self.key(kind, step), value)
        return True

    def save(self, step: "WorkflowStep") -> None:
        """Write both selections of ``step`` when they differ from the store."""

        self._write_if_changed(CONFIG, step, self._translator.reverse(step.configuration_text()))
        self._write_if_changed(BASIC, step, self._translator.reverse(step.basic_text()))

    def read_basic(self, step: "WorkflowStep") -> None:
        """Restore the basic selection; unknown values select the default."""

        stored = self._read(BASIC, step)
        if not stored:
            step.enable_default_basic_configuration()
            return
        step.set_basic_from_name(stored)

    def read_configuration(self, step: "WorkflowStep") -> None:
        """Restore the configuration; unknown values select the default."""

        stored = self._read(CONFIG, step)
        if not stored:
            step.enable_default_step_configuration()
            return
        step.restore_configuration(stored)

    def restore(self, step: "WorkflowStep") -> None:
        self.read_basic(step)
        self.read_configuration(step)

    def stored_configuration(self, step: "WorkflowStep") -> Optional[str]:
        return self._read(CONFIG, step) or None


__all__ = ["BASIC", "CONFIG", "PREFIX", "PreferenceCodec", "PreferenceStore"]
