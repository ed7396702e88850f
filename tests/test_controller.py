from __future__ import annotations

from typing import List

import pytest

from initial_workflow.host.api import HostError, View
from initial_workflow.workflow.controller import ModuleSettingsChoice, WorkflowController
from initial_workflow.workflow.step_catalog import (
    CompressHistoryStep,
    CreatorStep,
    DynamicRangeStep,
    LicenseStep,
    RunSingleStepOnChangeStep,
    ShowModulesStep,
    TimeoutStep,
    build_default_buttons,
    build_default_steps,
)
from initial_workflow.workflow.steps import BasicMode, BasicWidgetKind, ComboBoxStep, StackGroup

from tests._host_mocks import FakeHost, RecordingStep, make_context, make_image


def _recording_controller(host, on_run=None):
    context = make_context(host)
    order: List[str] = []
    step = RecordingStep(context, "single", order, on_run=on_run)
    step.init()
    controller = WorkflowController(context, [step])
    controller.attach()
    return context, controller, step, order


def _catalogue_controller(host):
    context = make_context(host)
    steps = build_default_steps(context)
    controller = WorkflowController(context, steps, build_default_buttons(context))
    controller.attach()
    by_type = {type(step): step for step in steps}
    return context, controller, by_type


def test_changed_step_runs_alone_in_darkroom() -> None:
    host = FakeHost()
    _, _, step, order = _recording_controller(host)

    step.select(0)

    assert order == ["single"]
    assert host.written_paths()[:1] == ["lib/modulegroups/active modules"]
    assert "iop/recording" in host.written_paths()
    assert host.messages == ["single", "Done"]


def test_changed_step_is_saved_but_not_run_outside_darkroom() -> None:
    host = FakeHost(view=View.LIGHTTABLE)
    context, _, step, order = _recording_controller(host)

    step.select(0)

    assert order == []
    assert host.calls == []
    assert context.preferences.stored_configuration(step) == "unchanged"


def test_single_runs_follow_global_option_and_step_flag() -> None:
    host = FakeHost()
    context, controller, step, order = _recording_controller(host)

    context.options.run_single_step_on_change = False
    step.select(0)
    assert order == []

    context.options.run_single_step_on_change = True
    step.disable_run_single_step_on_change()
    step.select(1)
    assert order == []

    step.enable_run_single_step_on_change()
    assert controller.run_single_step(step) is True
    assert order == ["single"]


def test_creator_entry_is_saved_without_single_run() -> None:
    host = FakeHost()
    image = make_image("a.raw")
    host.displayed = image
    context, controller, by_type = _catalogue_controller(host)
    context.options.run_single_step_on_change = True
    creator = by_type[CreatorStep]
    writes_before = len(host.writes())

    creator.set_text("Jane Doe")

    assert image.creator == ""
    assert len(host.writes()) == writes_before
    assert context.preferences.stored_configuration(creator) == "Jane Doe"
    assert controller.run_single_step(creator) is False


def test_failed_single_run_is_reported() -> None:
    host = FakeHost()

    def _fail(step) -> None:
        raise HostError("module missing")

    _, _, step, _ = _recording_controller(host, on_run=_fail)

    step.select(0)

    assert host.messages == ["single", "step failed: module missing", "Done"]


def test_settings_changes_never_run_a_step() -> None:
    host = FakeHost()
    context, _, by_type = _catalogue_controller(host)

    by_type[TimeoutStep].select(0)
    by_type[CompressHistoryStep].select(0)

    assert host.calls == []
    assert context.options.timeout_ms == 500
    assert host.preferences[(context.owner, "Current:Config:timeout value")] == "500"


def test_module_step_change_runs_step_with_module_shown() -> None:
    host = FakeHost()
    _, _, by_type = _catalogue_controller(host)

    by_type[DynamicRangeStep].select(3)

    paths = host.written_paths()
    assert paths[0] == "lib/modulegroups/active modules"
    assert paths[1] == "iop/sigmoid"
    assert host.messages[-1] == "Done"


def test_bulk_basic_change_does_not_trigger_single_runs() -> None:
    host = FakeHost()
    context, controller, by_type = _catalogue_controller(host)

    controller.configure_all_module_basics(BasicMode.IGNORE)

    assert host.calls == []
    modules = controller.steps_in(StackGroup.MODULES)
    for step in modules:
        assert step.run_single_step_on_change is True
        if step.basic_kind is not BasicWidgetKind.EMPTY:
            assert step.basic is BasicMode.IGNORE
    assert host.preferences[(context.owner, "Current:Basic:filmic rgb / sigmoid")] == "ignore"


def test_bulk_default_basic_restores_each_default() -> None:
    host = FakeHost(view=View.LIGHTTABLE)
    _, controller, by_type = _catalogue_controller(host)
    controller.configure_all_module_basics(BasicMode.IGNORE)

    controller.configure_all_module_basics(BasicMode.DEFAULT)

    assert by_type[DynamicRangeStep].basic is BasicMode.RESET
    for step in controller.steps_in(StackGroup.MODULES):
        assert step.basic is step.default_basic


@pytest.mark.parametrize("choice", list(ModuleSettingsChoice))
def test_bulk_module_settings(choice) -> None:
    host = FakeHost()
    _, controller, by_type = _catalogue_controller(host)

    controller.configure_all_module_settings(choice)

    assert host.calls == []
    for step in controller.steps_in(StackGroup.MODULES):
        if not isinstance(step, ComboBoxStep):
            continue
        if choice is ModuleSettingsChoice.DEFAULT:
            assert step.index == step.default_configuration_index()
        else:
            assert step.index == step.unchanged_index


def test_common_settings_default_keeps_timeout() -> None:
    host = FakeHost(view=View.LIGHTTABLE)
    context, controller, by_type = _catalogue_controller(host)
    by_type[TimeoutStep].select(0)
    by_type[ShowModulesStep].select(1)

    controller.configure_all_common_settings()

    assert context.options.timeout_ms == 500
    assert context.options.show_modules_during_execution is False


def test_panel_reset_keeps_personal_choices() -> None:
    host = FakeHost(view=View.LIGHTTABLE)
    context, controller, by_type = _catalogue_controller(host)
    by_type[TimeoutStep].select(0)
    by_type[RunSingleStepOnChangeStep].select(0)
    by_type[CreatorStep].set_text("Jane Doe")
    by_type[LicenseStep].select_value("CC BY")
    dynamic = by_type[DynamicRangeStep]
    dynamic.set_basic(BasicMode.IGNORE)
    dynamic.select(1)
    by_type[CompressHistoryStep].select(0)

    controller.set_all_default_module_configurations()

    assert dynamic.basic is BasicMode.RESET
    assert dynamic.index == dynamic.default_index
    assert by_type[CompressHistoryStep].is_yes() is True
    assert by_type[TimeoutStep].value() == 500
    assert by_type[RunSingleStepOnChangeStep].value() is False
    assert by_type[CreatorStep].value() == "Jane Doe"
    assert by_type[LicenseStep].selection == "CC BY"
    assert context.options.run_single_step_on_change is False


def test_panel_reset_in_darkroom_runs_nothing() -> None:
    host = FakeHost()
    _, controller, by_type = _catalogue_controller(host)
    by_type[RunSingleStepOnChangeStep].select(0)
    by_type[RunSingleStepOnChangeStep].select(1)
    host.calls.clear()
    by_type[DynamicRangeStep].set_basic(BasicMode.IGNORE)
    host.calls.clear()

    controller.set_all_default_module_configurations()

    assert host.calls == []


def test_buttons_follow_view() -> None:
    host = FakeHost()
    _, controller, _ = _catalogue_controller(host)

    controller.init_depending_on_current_view(View.LIGHTTABLE)
    assert [button.sensitive for button in controller.buttons] == [False, False, False]

    controller.init_depending_on_current_view()
    assert [button.sensitive for button in controller.buttons] == [True, True, True]


def test_stack_switching() -> None:
    host = FakeHost()
    _, controller, _ = _catalogue_controller(host)

    assert controller.active_stack is StackGroup.MODULES
    controller.show_settings_clicked()
    assert controller.active_stack is StackGroup.SETTINGS
    assert len(controller.steps_in(StackGroup.SETTINGS)) == 5
    controller.show_modules_clicked()
    assert controller.active_stack is StackGroup.MODULES
    assert len(controller.steps_in(StackGroup.MODULES)) == 19


def test_run_clicked_depends_on_view() -> None:
    host = FakeHost(view=View.OTHER)
    _, controller, _, order = _recording_controller(host)

    assert controller.run_clicked() is None
    assert order == []

    host.view = View.DARKROOM
    assert controller.run_clicked() is False
    assert order == ["single"]

    host.view = View.LIGHTTABLE
    assert controller.run_clicked() is False
    assert host.messages[-1] == "no image selected"


def test_detach_stops_change_handling() -> None:
    host = FakeHost()
    _, controller, step, order = _recording_controller(host)

    controller.detach()
    step.select(0)

    assert order == []
    assert host.preferences == {}
