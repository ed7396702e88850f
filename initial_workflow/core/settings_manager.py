"""Persistent preference storage built on top of QSettings."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from PyQt5.QtCore import QSettings  # type: ignore


class SettingsManager:
    """High level interface around QSettings.

    When ``path`` is given the values are kept in that INI file instead of the
    platform's native settings location.
    """

    def __init__(self, organization: str, application: str, *, path: Optional[Path] = None) -> None:
        if path is not None:
            self._settings = QSettings(str(path), QSettings.IniFormat)
        else:
            self._settings = QSettings(organization, application)
        self.organization = organization
        self.application = application

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._settings.value(key, default)

    def set(self, key: str, value: Any) -> None:
        self._settings.setValue(key, value)
        self._settings.sync()


class SettingsPreferenceStore:
    """Expose a :class:`SettingsManager` through the host preference calls.

    Keys are stored as ``<namespace>/<key>``; missing entries read as an
    empty string, matching the host's own preference API.
    """

    def __init__(self, manager: SettingsManager) -> None:
        self._manager = manager

    @staticmethod
    def _qualified(namespace: str, key: str) -> str:
        return f"{namespace}/{key}"

    def read_preference(self, namespace: str, key: str) -> str:
        value = self._manager.get(self._qualified(namespace, key), "")
        return "" if value is None else str(value)

    def write_preference(self, namespace: str, key: str, value: str) -> None:
        self._manager.set(self._qualified(namespace, key), value)


__all__ = ["SettingsManager", "SettingsPreferenceStore"]
