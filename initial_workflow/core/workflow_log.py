"""User-visible run log and end-of-run summary."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from initial_workflow.host.api import Host


SEPARATOR = "=============================="

RUN_LOGGER = logging.getLogger("initial_workflow.run")


class WorkflowLog:
    """Prefixes run messages with the image counter and current step.

    Messages that should reach the user at the end of a run (timeouts,
    cancellations, reloads) are collected in the summary and written out by
    :meth:`flush_summary`.
    """

    def __init__(
        self,
        host: Optional["Host"] = None,
        *,
        translate=None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._host = host
        self._translate = translate or (lambda msgid: msgid)
        self._logger = logger or RUN_LOGGER
        self._summary: List[str] = []
        self.current_step = ""
        self.major_nr = 0
        self.major_max = 0

    def format(self, text: str) -> str:
        prefix = ""
        if self.major_nr != 0 or self.major_max != 0:
            prefix = f"[{self.major_nr}/{self.major_max}] "
        return f"{prefix}{self.current_step}: {text}"

    def info(self, text: str) -> None:
        self._logger.info(self.format(text), extra={"component": "WorkflowLog"})

    def screen(self, text: str) -> None:
        """Show ``text`` to the user as a short host message."""

        self._logger.debug("screen: %s", text, extra={"component": "WorkflowLog"})
        if self._host is not None:
            self._host.print_message(text)

    # ------------------------------------------------------------------
    # Run summary
    # ------------------------------------------------------------------
    def summary_clear(self) -> None:
        self._summary.clear()

    def summary_message(self, text: str) -> None:
        self._summary.append(self.format(text))

    @property
    def summary_messages(self) -> Sequence[str]:
        return tuple(self._summary)

    def reset_counters(self, major_nr: int = 0, major_max: int = 0) -> None:
        self.major_nr = major_nr
        self.major_max = major_max
        self.current_step = ""

    def flush_summary(self) -> None:
        """Write the collected summary, or a success note when it is empty."""

        _ = self._translate
        self.info(SEPARATOR)
        if not self._summary:
            self.info(_("OK - script run without errors"))
            self.screen(_("initial workflow done"))
        else:
            for message in self._summary:
                self.info(message)
                self.screen(message)
        self.info(_("initial workflow done"))
        self.info(SEPARATOR)


__all__ = ["RUN_LOGGER", "SEPARATOR", "WorkflowLog"]
