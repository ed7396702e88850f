"""Translation helpers for user visible texts and host API names.

Texts shown in the panel come from two message domains: the module's own
catalogue and the host's catalogue (module names, preset names, combobox
items).  The host automation API expects the untranslated names, so every
translation is remembered in both directions and :meth:`Translator.reverse`
recovers the untranslated message id from a displayed text.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from PyQt5 import QtCore


LOCAL_DOMAIN = "initial_workflow"
HOST_DOMAIN = "darktable"


class MessageCatalog(Protocol):
    """Source of translated strings."""

    def translate(self, domain: str, msgid: str) -> str:
        """Return the translation of ``msgid`` within ``domain``."""


class QtMessageCatalog:
    """Look up translations through the installed Qt translators."""

    def translate(self, domain: str, msgid: str) -> str:
        return QtCore.QCoreApplication.translate(domain, msgid)


class Translator:
    """Caching translator with reverse lookup."""

    def __init__(
        self,
        catalog: Optional[MessageCatalog] = None,
        *,
        local_domain: str = LOCAL_DOMAIN,
        host_domain: str = HOST_DOMAIN,
    ) -> None:
        self._catalog = catalog or QtMessageCatalog()
        self.local_domain = local_domain
        self.host_domain = host_domain
        self._translations: Dict[tuple[str, str], str] = {}
        self._reverse: Dict[str, str] = {}

    def _lookup(self, domain: str, msgid: str) -> str:
        if not msgid:
            return ""
        key = (domain, msgid)
        cached = self._translations.get(key)
        if cached is not None:
            return cached
        translation = self._catalog.translate(domain, msgid) or msgid
        self._remember(key, msgid, translation)
        return translation

    def _remember(self, key: tuple[str, str], msgid: str, translation: str) -> None:
        self._translations[key] = translation
        self._reverse[translation] = msgid

    def t(self, msgid: str) -> str:
        """Translate ``msgid`` with the module's own catalogue."""

        return self._lookup(self.local_domain, msgid)

    def tdt(self, msgid: str) -> str:
        """Translate ``msgid`` with the host's catalogue."""

        return self._lookup(self.host_domain, msgid)

    def tdt_concat(self, parts: Sequence[str]) -> str:
        """Join host translations of ``parts`` into a new label.

        The untranslated concatenation is stored as reverse key so the label
        maps back to a language independent name.
        """

        message = "".join(parts)
        key = (self.host_domain + "+", message)
        cached = self._translations.get(key)
        if cached is not None:
            return cached
        translation = "".join(self.tdt(part) for part in parts)
        self._remember(key, message, translation)
        return translation

    def reverse(self, text: str) -> str:
        """Return the message id behind ``text`` or ``text`` itself."""

        return self._reverse.get(text, text)

    def clear(self) -> None:
        """Forget cached translations, e.g. after switching the locale."""

        self._translations.clear()
        self._reverse.clear()


def _normalise_locale_codes(locales: Sequence[str] | None) -> List[str]:
    """Return a list of normalised locale codes in preference order."""

    if not locales:
        system_locale = QtCore.QLocale.system()
        locales = [*system_locale.uiLanguages(), system_locale.name()]

    seen: set[str] = set()
    ordered: list[str] = []
    for entry in locales:
        if not entry:
            continue
        key = entry.replace("-", "_")
        if key and key not in seen:
            ordered.append(key)
            seen.add(key)
            if "_" in key:
                language = key.split("_", 1)[0]
                if language and language not in seen:
                    ordered.append(language)
                    seen.add(language)
    return ordered


def _candidate_paths(directory: Path, prefix: str, locale: str) -> Iterable[Path]:
    yield directory / f"{prefix}_{locale}.qm"
    if "_" in locale:
        language = locale.split("_", 1)[0]
        yield directory / f"{prefix}_{language}.qm"


@dataclass
class TranslationConfig:
    """Configuration describing how to locate translation catalogues."""

    directories: Sequence[Path | str] = field(default_factory=list)
    locales: Sequence[str] = field(default_factory=tuple)
    file_prefix: str = LOCAL_DOMAIN


class TranslationLoader:
    """Load ``.qm`` catalogues and install them on the Qt application."""

    def __init__(self, app: QtCore.QCoreApplication, config: TranslationConfig) -> None:
        self._app = app
        self._config = config
        self._translators: list[QtCore.QTranslator] = []

    def install(self) -> list[Path]:
        """Load translations and install the translators on the application."""

        self.remove()
        loaded: list[Path] = []
        locales = _normalise_locale_codes(self._config.locales)
        directories = [Path(path) for path in self._config.directories]

        for directory in directories:
            if not directory.exists():
                continue
            for locale in locales:
                for candidate in _candidate_paths(directory, self._config.file_prefix, locale):
                    if not candidate.exists() or candidate in loaded:
                        continue
                    translator = QtCore.QTranslator(self._app)
                    if translator.load(str(candidate)):
                        self._app.installTranslator(translator)
                        self._translators.append(translator)
                        loaded.append(candidate)
        return loaded

    def remove(self) -> None:
        """Remove previously installed translators from the application."""

        while self._translators:
            translator = self._translators.pop()
            self._app.removeTranslator(translator)


__all__ = [
    "HOST_DOMAIN",
    "LOCAL_DOMAIN",
    "MessageCatalog",
    "QtMessageCatalog",
    "TranslationConfig",
    "TranslationLoader",
    "Translator",
]
