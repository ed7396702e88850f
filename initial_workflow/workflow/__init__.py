"""Workflow steps, their persistence and execution."""
from .context import WorkflowContext, WorkflowOptions
from .controller import ModuleSettingsChoice, WorkflowController
from .preferences import PreferenceCodec
from .sequencer import Sequencer
from .step_catalog import build_default_buttons, build_default_steps
from .steps import BasicMode, BasicWidgetKind, ComboBoxStep, StackGroup, TextEntryStep, WorkflowStep

__all__ = [
    "BasicMode",
    "BasicWidgetKind",
    "ComboBoxStep",
    "ModuleSettingsChoice",
    "PreferenceCodec",
    "Sequencer",
    "StackGroup",
    "TextEntryStep",
    "WorkflowContext",
    "WorkflowController",
    "WorkflowOptions",
    "WorkflowStep",
    "build_default_buttons",
    "build_default_steps",
]
