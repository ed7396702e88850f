"""Workflow step model.

Every step configures one darkroom module (or one utility action) of the
host.  A step carries two selections:

* the *basic* selection deciding whether and how the module is touched
  (ignore, enable, reset, disable, or ``default`` which resolves to the
  step's own default immediately), and
* the *configuration* selection, an index into the step's list of outcomes
  where index ``0`` means "leave the module unchanged".

:meth:`WorkflowStep.evaluate_basic` turns the basic selection into an early
stop or a go-ahead, after which :meth:`ComboBoxStep.apply` issues the step
specific host calls.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from initial_workflow.host.actions import INDENT
from initial_workflow.host.api import View
from initial_workflow.host.formatting import quote, wordwrap

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from initial_workflow.core.i18n import Translator

    from .context import WorkflowContext


LOGGER = logging.getLogger(__name__)


class BasicMode(str, Enum):
    """Values of the basic selector; the value doubles as message id."""

    NONE = ""
    DEFAULT = "default"
    IGNORE = "ignore"
    ENABLE = "enable"
    RESET = "reset"
    DISABLE = "disable"


class BasicWidgetKind(Enum):
    """Which basic selector a step offers."""

    EMPTY = "empty"
    SIMPLE = "simple"
    FULL = "full"


BASIC_CHOICES: Mapping[BasicWidgetKind, Tuple[BasicMode, ...]] = {
    BasicWidgetKind.FULL: (
        BasicMode.DEFAULT,
        BasicMode.IGNORE,
        BasicMode.ENABLE,
        BasicMode.RESET,
        BasicMode.DISABLE,
    ),
    BasicWidgetKind.SIMPLE: (BasicMode.IGNORE, BasicMode.ENABLE),
    BasicWidgetKind.EMPTY: (BasicMode.NONE,),
}

DEFAULT_BASIC: Mapping[BasicWidgetKind, BasicMode] = {
    BasicWidgetKind.FULL: BasicMode.RESET,
    BasicWidgetKind.SIMPLE: BasicMode.ENABLE,
    BasicWidgetKind.EMPTY: BasicMode.NONE,
}


class StackGroup(Enum):
    """Panel page a step is shown on."""

    MODULES = 1
    SETTINGS = 2


@dataclass(frozen=True)
class Message:
    """A translatable text, resolved against the module or host catalogue."""

    parts: Tuple[str, ...]
    host: bool = True

    def render(self, translator: "Translator") -> str:
        if not self.host:
            return translator.t("".join(self.parts))
        if len(self.parts) == 1:
            return translator.tdt(self.parts[0])
        return translator.tdt_concat(self.parts)


def dt(*parts: str) -> Message:
    """Text from the host catalogue; several parts are concatenated."""

    return Message(tuple(parts), host=True)


def local(msgid: str) -> Message:
    """Text from the module's own catalogue."""

    return Message((msgid,), host=False)


Text = Union[Message, str, int, float]

UNCHANGED = local("unchanged")


def render_text(text: Text, translator: "Translator") -> str:
    if isinstance(text, Message):
        return text.render(translator)
    return str(text)


StepCallback = Callable[["WorkflowStep"], None]


class WorkflowStep(ABC):
    """Base class of all configurable workflow steps."""

    label: ClassVar[Message]
    tooltip: ClassVar[str] = ""
    operation: ClassVar[Optional[str]] = None
    stack_group: ClassVar[StackGroup] = StackGroup.MODULES
    basic_kind: ClassVar[BasicWidgetKind] = BasicWidgetKind.FULL
    default_basic_mode: ClassVar[Optional[BasicMode]] = None
    show_module_during_single_run: ClassVar[bool] = True
    single_run_on_change: ClassVar[bool] = True

    def __init__(self, context: "WorkflowContext") -> None:
        self.context = context
        self.label_text = self.label.render(context.translator)
        self.tooltip_text = wordwrap(f"{self.label_text}: {context.translator.t(self.tooltip)}") if self.tooltip else ""
        self.basic = BasicMode.NONE
        self.run_single_step_on_change = True
        self.on_changed: Optional[StepCallback] = None
        self.initialised = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label_text!r})"

    # ------------------------------------------------------------------
    # Shortcuts
    # ------------------------------------------------------------------
    @property
    def actions(self):
        return self.context.actions

    @property
    def log(self):
        return self.context.log

    def _(self, msgid: str) -> str:
        return self.context.translator.t(msgid)

    def _dt(self, msgid: str) -> str:
        return self.context.translator.tdt(msgid)

    def reverse(self, text: str) -> str:
        return self.context.translator.reverse(text)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def init(self) -> None:
        """Build the selectable values and apply the defaults."""

        self.basic_choices: Tuple[BasicMode, ...] = BASIC_CHOICES[self.basic_kind]
        self.default_basic = self.default_basic_mode or DEFAULT_BASIC[self.basic_kind]
        self.basic = self.default_basic
        self._init_configuration()
        self.initialised = True

    @abstractmethod
    def _init_configuration(self) -> None:
        """Create the configuration values of the step."""

    @abstractmethod
    def run(self) -> None:
        """Execute the step against the image shown in the darkroom."""

    @abstractmethod
    def enable_default_step_configuration(self) -> None:
        """Select the step's default configuration."""

    @abstractmethod
    def configuration_text(self) -> str:
        """Return the displayed configuration value."""

    @abstractmethod
    def restore_configuration(self, stored: str) -> None:
        """Select the configuration saved as language independent ``stored``."""

    def init_depending_on_current_view(self, view: View) -> None:
        """Adjust the step after the host switched views."""

    # ------------------------------------------------------------------
    # Operation
    # ------------------------------------------------------------------
    def operation_name(self) -> Optional[str]:
        return self.operation

    def operation_path(self) -> str:
        return f"iop/{self.operation_name()}"

    # ------------------------------------------------------------------
    # Basic selection
    # ------------------------------------------------------------------
    def basic_values(self) -> List[str]:
        return [self._(mode.value) for mode in self.basic_choices]

    def basic_text(self) -> str:
        return self._(self.basic.value)

    def enable_default_basic_configuration(self) -> None:
        self.set_basic(self.default_basic)

    def set_basic(self, mode: BasicMode) -> None:
        """Select ``mode``; unsupported modes degrade to ignore or the default."""

        if mode is BasicMode.DEFAULT:
            mode = self.default_basic
        if mode not in self.basic_choices:
            if mode in (BasicMode.RESET, BasicMode.DISABLE) and BasicMode.IGNORE in self.basic_choices:
                mode = BasicMode.IGNORE
            else:
                mode = self.default_basic
        if mode is not self.basic:
            self.basic = mode
            self._notify_changed()

    def set_basic_from_name(self, name: str) -> None:
        try:
            mode = BasicMode(name)
        except ValueError:
            self.enable_default_basic_configuration()
            return
        self.set_basic(mode)

    # ------------------------------------------------------------------
    # Single step runs
    # ------------------------------------------------------------------
    def enable_run_single_step_on_change(self) -> None:
        self.run_single_step_on_change = True

    def disable_run_single_step_on_change(self) -> None:
        self.run_single_step_on_change = False

    def check_run_single_step_on_change(self) -> bool:
        return self.single_run_on_change and self.run_single_step_on_change

    def _notify_changed(self) -> None:
        if self.on_changed is not None:
            self.on_changed(self)

    # ------------------------------------------------------------------
    # Basic evaluation
    # ------------------------------------------------------------------
    def log_step_message(self) -> None:
        self.log.info("==============================")
        self.log.info(self._("selection = %s - %s") % (self.basic_text(), self.configuration_text()))

    def run_basic_widget(self) -> bool:
        """Evaluate the five-way basic selection.

        Returns ``False`` when nothing else must be done for this step.
        """

        basic = self.basic
        if basic is BasicMode.NONE:
            return True
        if basic is BasicMode.IGNORE:
            return False

        self.log_step_message()

        if basic is BasicMode.DISABLE:
            self.actions.disable_module(self.operation_path())
            return False
        if basic is BasicMode.ENABLE:
            self.actions.enable_module(self.operation_path())
            return True
        if basic is BasicMode.RESET:
            self.actions.enable_module(self.operation_path())
            self.actions.reset_module(self.operation_path())
            return True
        return True

    def run_simple_basic_widget(self) -> bool:
        """Evaluate the two-way ignore/enable selection."""

        basic = self.basic
        if basic is BasicMode.NONE:
            return True
        if basic is BasicMode.IGNORE:
            return False

        self.log_step_message()

        if basic is BasicMode.ENABLE and self.operation_name() is not None:
            self.actions.enable_module(self.operation_path())
        return True

    def evaluate_basic(self) -> bool:
        if self.basic_kind is BasicWidgetKind.FULL:
            return self.run_basic_widget()
        if self.basic_kind is BasicWidgetKind.SIMPLE:
            return self.run_simple_basic_widget()
        return True


class ComboBoxStep(WorkflowStep):
    """Step whose configuration is chosen from a fixed list."""

    values: ClassVar[Sequence[Text]] = (UNCHANGED,)
    default_index: ClassVar[int] = 0
    unchanged_index: ClassVar[int] = 0

    def _init_configuration(self) -> None:
        translator = self.context.translator
        self.configuration_values: List[str] = [render_text(value, translator) for value in self.values]
        self.index = self.default_configuration_index()
        self._apply_selection()

    def default_configuration_index(self) -> int:
        return self.default_index

    @property
    def selection(self) -> str:
        return self.configuration_values[self.index]

    def configuration_text(self) -> str:
        return self.selection

    def select(self, index: int) -> None:
        if not 0 <= index < len(self.configuration_values):
            raise IndexError(f"{self!r} has no configuration value {index}")
        if index != self.index:
            self.index = index
            self._apply_selection()
            self._notify_changed()

    def select_value(self, text: str) -> None:
        self.select(self.configuration_values.index(text))

    def _apply_selection(self) -> None:
        """Hook for steps that mirror their selection into shared options."""

    def enable_default_step_configuration(self) -> None:
        self.select(self.default_configuration_index())

    def enable_unchanged_step_configuration(self) -> None:
        self.select(self.unchanged_index)

    def restore_configuration(self, stored: str) -> None:
        for index, value in enumerate(self.configuration_values):
            if self.reverse(value) == stored:
                self.select(index)
                return
        self.enable_default_step_configuration()

    def configuration_value_from_selection_index(self, index: Any) -> Optional[str]:
        """Map the host's negative one-based combobox index to a value.

        The host's list lacks the leading "unchanged" entry, so ``-1`` maps
        to ``configuration_values[1]``.
        """

        try:
            position = -int(index)
        except (TypeError, ValueError):
            return None
        if 0 <= position < len(self.configuration_values):
            return self.configuration_values[position]
        return None

    def run(self) -> None:
        if not self.evaluate_basic():
            return
        if self.index == self.unchanged_index:
            return
        self.apply(self.selection)

    def apply(self, selection: str) -> None:
        """Issue the host calls for ``selection``."""

    def apply_host_selection(
        self,
        path: str,
        selection: str,
        *,
        subject: str = "value",
        extra_values: int = 0,
        write: Optional[Callable[[], Any]] = None,
    ) -> bool:
        """Select ``selection`` in the host combobox at ``path`` if needed.

        ``extra_values`` counts leading entries of the step's list that the
        host combobox does not have besides "unchanged".
        """

        index = self.actions.get_value(path, "selection")
        try:
            index = index - extra_values
        except TypeError:
            pass
        current = self.configuration_value_from_selection_index(index)

        if selection != current:
            self.log.info(INDENT + self._("current %s = %s") % (subject, quote(current)))
            if write is not None:
                write()
            else:
                self.actions.do(path, 0, "selection", "item:" + self.reverse(selection), 1.0)
            return True

        self.log.info(INDENT + self._("nothing to do, %s already = %s") % (subject, quote(current)))
        return False


class ExclusiveModuleStep(ComboBoxStep):
    """Combobox step choosing between alternative host modules.

    The host does not keep alternative modules exclusive.  Before the basic
    selection is evaluated every module of ``exclusion_group`` other than the
    one matching the current selection is disabled.
    """

    exclusion_group: ClassVar[Tuple[str, ...]] = ()
    selection_operations: ClassVar[Dict[int, str]] = {}

    def selected_operation(self) -> Optional[str]:
        return self.selection_operations.get(self.index)

    def operation_name(self) -> Optional[str]:
        return self.selected_operation() or self.operation

    def run(self) -> None:
        if self.basic is BasicMode.IGNORE:
            return
        if self.basic is BasicMode.DISABLE:
            self.actions.disable_module(self.operation_path())
            return

        selected = self.selected_operation()
        if selected is not None:
            for sibling in self.exclusion_group:
                if sibling != selected:
                    self.actions.disable_module(f"iop/{sibling}")

        super().run()


class TextEntryStep(WorkflowStep):
    """Step configured by free text; empty text leaves the image unchanged."""

    basic_kind = BasicWidgetKind.EMPTY
    # typed text is applied by the next run, not per keystroke
    single_run_on_change = False
    placeholder: ClassVar[str] = "empty, tag keeps unchanged"

    def _init_configuration(self) -> None:
        self.text = ""
        self.placeholder_text = self._(self.placeholder)

    def configuration_text(self) -> str:
        return self.text

    def set_text(self, text: str) -> None:
        text = text or ""
        if text != self.text:
            self.text = text
            self._notify_changed()

    def restore_configuration(self, stored: str) -> None:
        self.set_text(stored)
        self.enable_default_step_configuration()

    def enable_default_step_configuration(self) -> None:
        # the entered text is kept
        pass

    def value(self) -> str:
        return self.text


class ButtonStep(ABC):
    """Panel button bound to a single host action."""

    label: ClassVar[Message]
    tooltip: ClassVar[str] = ""
    darkroom_only: ClassVar[bool] = True

    def __init__(self, context: "WorkflowContext") -> None:
        self.context = context
        self.label_text = self.label.render(context.translator)
        self.tooltip_text = wordwrap(f"{self.label_text}: {context.translator.t(self.tooltip)}") if self.tooltip else ""
        self.sensitive = True

    def init_depending_on_current_view(self, view: View) -> None:
        if self.darkroom_only:
            self.sensitive = view is View.DARKROOM

    def clicked(self) -> None:
        if not self.sensitive:
            LOGGER.debug("Ignoring click on inactive button %s", self.label_text, extra={"component": "ButtonStep"})
            return
        self.click()

    @abstractmethod
    def click(self) -> None:
        """Perform the button action."""


class ModuleButton(ButtonStep):
    """Enable a darkroom module and show it for manual adjustment."""

    module: ClassVar[str]

    def click(self) -> None:
        self.context.actions.enable_module(self.module)
        self.context.actions.show_module(self.module)


__all__ = [
    "BASIC_CHOICES",
    "DEFAULT_BASIC",
    "BasicMode",
    "BasicWidgetKind",
    "ButtonStep",
    "ComboBoxStep",
    "ExclusiveModuleStep",
    "Message",
    "ModuleButton",
    "StackGroup",
    "TextEntryStep",
    "UNCHANGED",
    "WorkflowStep",
    "dt",
    "local",
    "render_text",
]
