from __future__ import annotations

from typing import List

import pytest

from initial_workflow.host.api import View
from initial_workflow.workflow.steps import (
    UNCHANGED,
    BasicMode,
    BasicWidgetKind,
    ComboBoxStep,
    ExclusiveModuleStep,
    ModuleButton,
    TextEntryStep,
    local,
)

from tests._host_mocks import FakeHost, make_context


class _ModuleStep(ComboBoxStep):
    label = local("test module")
    tooltip = "adjust the test module"
    operation = "testmodule"
    values = (UNCHANGED, local("first"), local("second"))
    default_index = 1

    def __init__(self, context) -> None:
        super().__init__(context)
        self.applied: List[str] = []

    def apply(self, selection: str) -> None:
        self.applied.append(selection)


class _SimpleStep(_ModuleStep):
    label = local("simple module")
    basic_kind = BasicWidgetKind.SIMPLE


class _TextStep(TextEntryStep):
    label = local("note")

    def run(self) -> None:
        pass


class _ExclusiveStep(ExclusiveModuleStep):
    label = local("exclusive")
    operation = "alpha"
    exclusion_group = ("alpha", "beta", "gamma")
    selection_operations = {1: "alpha", 2: "beta"}
    values = (UNCHANGED, local("use alpha"), local("use beta"))
    default_index = 1

    def __init__(self, context) -> None:
        super().__init__(context)
        self.applied: List[str] = []

    def apply(self, selection: str) -> None:
        self.applied.append(selection)


class _Button(ModuleButton):
    label = local("exposure")
    module = "iop/exposure"


def _make(step_type, host=None):
    context = make_context(host or FakeHost())
    step = step_type(context)
    step.init()
    return step


def test_init_applies_defaults() -> None:
    step = _make(_ModuleStep)

    assert step.initialised is True
    assert step.basic is BasicMode.RESET
    assert step.selection == "first"
    assert step.configuration_values == ["unchanged", "first", "second"]
    assert step.tooltip_text.startswith("test module: adjust")


def test_disable_never_applies_configuration() -> None:
    host = FakeHost()
    host.values[("iop/testmodule", "enable")] = 1.0
    step = _make(_ModuleStep, host)
    step.set_basic(BasicMode.DISABLE)
    step.select(2)

    step.run()

    assert step.applied == []
    assert host.writes() == [("iop/testmodule", 0, "enable", "", 1.0)]


def test_ignore_does_not_touch_the_host() -> None:
    host = FakeHost()
    step = _make(_ModuleStep, host)
    step.set_basic(BasicMode.IGNORE)

    step.run()

    assert host.calls == []
    assert step.applied == []


def test_unchanged_configuration_only_evaluates_basic() -> None:
    host = FakeHost()
    step = _make(_ModuleStep, host)
    step.set_basic(BasicMode.ENABLE)
    step.enable_unchanged_step_configuration()

    step.run()

    assert step.applied == []
    assert host.writes() == [("iop/testmodule", 0, "enable", "", 1.0)]


def test_reset_enables_then_resets_before_applying() -> None:
    host = FakeHost()
    step = _make(_ModuleStep, host)

    step.run()

    assert [call[2] for call in host.writes()] == ["enable", "reset"]
    assert step.applied == ["first"]


def test_default_basic_resolves_immediately() -> None:
    step = _make(_ModuleStep)
    step.set_basic(BasicMode.IGNORE)

    step.set_basic(BasicMode.DEFAULT)

    assert step.basic is BasicMode.RESET


def test_unsupported_basic_falls_back() -> None:
    simple = _make(_SimpleStep)
    simple.set_basic(BasicMode.DISABLE)
    assert simple.basic is BasicMode.IGNORE

    text = _make(_TextStep)
    text.set_basic(BasicMode.ENABLE)
    assert text.basic is BasicMode.NONE


def test_set_basic_from_unknown_name_selects_default() -> None:
    step = _make(_ModuleStep)
    step.set_basic(BasicMode.IGNORE)

    step.set_basic_from_name("no such mode")

    assert step.basic is BasicMode.RESET


def test_selection_changes_notify_once() -> None:
    step = _make(_ModuleStep)
    changed = []
    step.on_changed = changed.append

    step.select(2)
    step.select(2)

    assert changed == [step]
    with pytest.raises(IndexError):
        step.select(3)


def test_host_selection_index_maps_past_unchanged_entry() -> None:
    step = _make(_ModuleStep)

    assert step.configuration_value_from_selection_index(-1) == "first"
    assert step.configuration_value_from_selection_index(-2) == "second"
    assert step.configuration_value_from_selection_index(0) == "unchanged"
    assert step.configuration_value_from_selection_index(-7) is None
    assert step.configuration_value_from_selection_index(float("nan")) is None


def test_apply_host_selection_writes_only_when_needed() -> None:
    host = FakeHost()
    step = _make(_ModuleStep, host)
    path = "iop/testmodule/mode"
    host.values[(path, "selection")] = -1

    assert step.apply_host_selection(path, "first") is False
    assert host.writes() == []

    assert step.apply_host_selection(path, "second") is True
    assert host.writes() == [(path, 0, "selection", "item:second", 1.0)]


def test_restore_configuration_with_unknown_value_selects_default() -> None:
    step = _make(_ModuleStep)
    step.select(2)

    step.restore_configuration("gone")

    assert step.selection == "first"


def test_exclusive_step_disables_siblings_before_enabling() -> None:
    host = FakeHost()
    host.values[("iop/beta", "enable")] = 1.0
    host.values[("iop/gamma", "enable")] = 1.0
    step = _make(_ExclusiveStep, host)
    step.set_basic(BasicMode.ENABLE)

    step.run()

    assert host.written_paths() == ["iop/beta", "iop/gamma", "iop/alpha"]
    assert host.values[("iop/alpha", "enable")] == 1.0
    assert step.applied == ["use alpha"]


def test_exclusive_step_disable_targets_selected_module() -> None:
    host = FakeHost()
    host.values[("iop/beta", "enable")] = 1.0
    step = _make(_ExclusiveStep, host)
    step.select(2)
    step.set_basic(BasicMode.DISABLE)

    step.run()

    assert host.written_paths() == ["iop/beta"]
    assert step.applied == []


def test_text_step_notifies_on_change() -> None:
    step = _make(_TextStep)
    changed = []
    step.on_changed = changed.append

    step.set_text("Jane Doe")
    step.set_text("Jane Doe")

    assert step.value() == "Jane Doe"
    assert changed == [step]


def test_module_button_is_only_active_in_darkroom() -> None:
    host = FakeHost()
    button = _Button(make_context(host))

    button.init_depending_on_current_view(View.LIGHTTABLE)
    button.clicked()
    assert host.calls == []

    button.init_depending_on_current_view(View.DARKROOM)
    button.clicked()
    assert host.written_paths() == ["iop/exposure", "iop/exposure"]
