"""Concrete workflow steps and panel buttons.

The order of :data:`STEP_TYPES` is the order shown in the panel.  A run
executes the steps from last to first, which follows the host's pixel
pipeline from input to output.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar, Dict, List, Optional, Sequence, Tuple, Type

from initial_workflow.host.actions import INDENT
from initial_workflow.host.formatting import READ_SENTINEL, is_missing, quote

from .steps import (
    UNCHANGED,
    BasicMode,
    BasicWidgetKind,
    ButtonStep,
    ComboBoxStep,
    ExclusiveModuleStep,
    ModuleButton,
    StackGroup,
    TextEntryStep,
    WorkflowStep,
    dt,
    local,
)

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from .context import WorkflowContext


NO_YES = (dt("no"), dt("yes"))

WORKFLOW_PREFERENCE = ("darktable", "plugins/darkroom/workflow")
SCENE_REFERRED = "scene-referred"


def is_modern_workflow(context: "WorkflowContext") -> bool:
    """Return ``True`` when the host is set up for the scene-referred workflow."""

    value = context.host.read_preference(*WORKFLOW_PREFERENCE) or ""
    return value.startswith(SCENE_REFERRED)


# ----------------------------------------------------------------------
# Common settings
# ----------------------------------------------------------------------
class SettingsStep(ComboBoxStep):
    """Step on the settings page; it configures the run, not a module."""

    stack_group = StackGroup.SETTINGS
    basic_kind = BasicWidgetKind.EMPTY
    values = NO_YES

    def is_yes(self) -> bool:
        return self.reverse(self.selection) == "yes"


class CompressHistoryStep(SettingsStep):
    label = dt("compress history stack")
    tooltip = (
        "Generate the shortest history stack that reproduces the current image. "
        "This removes your current history snapshots."
    )
    default_index = 1

    def apply(self, selection: str) -> None:
        self.actions.do("lib/history/compress history stack", 0, "", "", 1.0)


class DiscardHistoryStep(SettingsStep):
    label = local("discard complete history")
    tooltip = "Reset all modules of the whole pixelpipe and discard complete history."

    def apply(self, selection: str) -> None:
        self.actions.do("lib/history", 0, "reset", "", 1.0)


class ShowModulesStep(SettingsStep):
    label = local("show modules")
    tooltip = (
        "Show darkroom modules for enabled workflow steps during execution of this initial workflow. "
        "This makes the changes easier to understand."
    )

    def _apply_selection(self) -> None:
        self.context.options.show_modules_during_execution = self.value()

    def value(self) -> bool:
        return self.is_yes()

    def run(self) -> None:
        pass


class RunSingleStepOnChangeStep(SettingsStep):
    label = local("run single steps on change")
    tooltip = (
        "When settings change, execute individual workflow steps. Configure a single module. "
        "This allows you to see the changes made by each configuration without having to execute "
        "the entire workflow."
    )
    default_index = 1
    unchanged_index = 1

    def _apply_selection(self) -> None:
        self.context.options.run_single_step_on_change = self.value()

    def value(self) -> bool:
        return self.is_yes()

    def run(self) -> None:
        pass


class TimeoutStep(SettingsStep):
    label = local("timeout value")
    tooltip = (
        "Some calculations take a certain amount of time. Depending on the hardware equipment also longer. "
        "This script waits and attempts to detect timeouts. If steps take much longer than expected, those "
        "steps will be aborted. You can configure the default timeout (ms). Before and after each step of "
        "the workflow, the script waits this time. In other places also a multiple (loading an image) or a "
        "fraction (querying a status)."
    )
    values = ("500", "1000", "2000", "3000", "4000", "5000")
    default_index = 2
    unchanged_index = 1

    def _apply_selection(self) -> None:
        self.context.options.timeout_ms = self.value()

    def value(self) -> int:
        return int(self.selection)

    def run(self) -> None:
        self.log.info(self._("step timeout = %s ms") % self.value())


# ----------------------------------------------------------------------
# Module steps
# ----------------------------------------------------------------------
class DynamicRangeStep(ExclusiveModuleStep):
    label = dt("filmic rgb", " / ", "sigmoid")
    tooltip = (
        "Use Filmic or Sigmoid to expand or contract the dynamic range of the scene to fit the dynamic "
        "range of the display. Auto tune filmic levels of black + white relative exposure. Or use Sigmoid "
        "with one of its presets. Use only one of Filmic, Sigmoid or Basecurve, this module disables the "
        "others."
    )
    operation = "sigmoid"
    exclusion_group = ("filmicrgb", "sigmoid", "basecurve")
    values = (
        UNCHANGED,
        dt("filmic", " ", "auto tune levels"),
        dt("filmic", " + ", "highlight reconstruction"),
        dt("sigmoid", " ", "default"),
        dt("sigmoid", " ", "ACES 100-nit like"),
        dt("sigmoid", " ", "neutral gray"),
    )
    selection_operations = {1: "filmicrgb", 2: "filmicrgb", 3: "sigmoid", 4: "sigmoid", 5: "sigmoid"}
    default_index = 5

    SIGMOID_PRESETS: ClassVar[Dict[int, str]] = {4: "ACES 100-nit like", 5: "neutral gray"}

    def apply(self, selection: str) -> None:
        if self.selected_operation() == "filmicrgb":
            self.actions.button_off_on("iop/filmicrgb/auto tune levels")
            if self.index == 2:
                self.actions.check_box_on("iop/filmicrgb/enable highlight reconstruction")
            return

        preset = self.SIGMOID_PRESETS.get(self.index)
        if preset is not None:
            self.actions.select_module_preset("iop/sigmoid/preset/", "", preset)


class ColorBalanceContrastStep(ComboBoxStep):
    label = dt("color balance rgb", " ", "contrast")
    tooltip = (
        "Adjust brilliance in color balance rgb module to add contrast (darker shadows and brighter "
        "highlights). You can combine this with sigmoid neutral gray preset."
    )
    operation = "colorbalancergb"
    basic_kind = BasicWidgetKind.SIMPLE
    values = (UNCHANGED, 0, 5, 10, 15, 20, 25, 30)
    default_index = 5

    def apply(self, selection: str) -> None:
        amount = int(selection) / 100
        self.actions.set_value("iop/colorbalancergb/brilliance/shadows", 0, "value", "set", -amount)
        self.actions.set_value("iop/colorbalancergb/brilliance/highlights", 0, "value", "set", amount)


class ColorBalanceMasksStep(ComboBoxStep):
    label = dt("color balance rgb", " ", "masks")
    tooltip = (
        "Set auto pickers of the module mask and peak white and gray luminance value to normalize the "
        "power setting in the 4 ways tab."
    )
    operation = "colorbalancergb"
    default_basic_mode = BasicMode.ENABLE
    values = (UNCHANGED, local("peak white & grey fulcrum"))
    default_index = 1

    def apply(self, selection: str) -> None:
        self.actions.button_off_on("iop/colorbalancergb/white fulcrum")
        self.actions.button_off_on("iop/colorbalancergb/contrast gray fulcrum")


class PresetStep(ComboBoxStep):
    """Applies the selected value as a preset of the step's module."""

    preset_group: ClassVar[str] = ""

    def preset_prefix(self) -> str:
        return f"{self.operation_path()}/preset/"

    def apply(self, selection: str) -> None:
        self.actions.select_module_preset(self.preset_prefix(), self.preset_group, self.reverse(selection))


class ColorBalanceColorfulnessStep(PresetStep):
    label = dt("color balance rgb", " ", "basic colorfulness")
    tooltip = "Choose a predefined basic colorfulness preset for your color-grading."
    operation = "colorbalancergb"
    preset_group = "basic colorfulness"
    values = (UNCHANGED, dt("legacy"), dt("natural skin"), dt("standard"), dt("vibrant colors"))
    default_index = 4


class ContrastEqualizerStep(ComboBoxStep):
    label = dt("contrast equalizer")
    tooltip = (
        "Adjust luminance and chroma contrast. Apply choosen preset (clarity or denoise & sharpen). "
        "Choose different values to adjust the strength of the effect."
    )
    operation = "atrous"

    MIXES: ClassVar[Tuple[Tuple[str, float], ...]] = (
        ("clarity", 0.10),
        ("clarity", 0.25),
        ("clarity", 0.50),
        ("denoise & sharpen", 0.10),
        ("denoise & sharpen", 0.25),
        ("denoise & sharpen", 0.50),
    )
    values = (UNCHANGED,) + tuple(dt(preset, ", ", "mix", " ", f"{mix:.2f}") for preset, mix in MIXES)

    def apply(self, selection: str) -> None:
        preset, mix = self.MIXES[self.index - 1]
        self.actions.select_module_preset("iop/atrous/preset/", "", preset)
        self.actions.set_value("iop/atrous/mix", 0, "value", "set", mix)


class ColorLookupTableStep(PresetStep):
    label = dt("color look up table")
    tooltip = (
        "Use LUTs to modify the color mapping, perform color corrections or apply looks. "
        "You can choose a given preset."
    )
    operation = "colorchecker"
    basic_kind = BasicWidgetKind.SIMPLE
    values = (
        UNCHANGED,
        dt("expanded color checker"),
        dt("Fuji Astia emulation"),
        dt("Fuji Classic Chrome emulation"),
        dt("Fuji Monochrome emulation"),
        dt("Fuji Provia emulation"),
        dt("Fuji Velvia emulation"),
        dt("Helmholtz/Kohlrausch monochrome"),
        dt("it8 skin tones"),
    )
    default_index = 1


class DiffuseOrSharpenStep(PresetStep):
    label = dt("diffuse or sharpen")
    tooltip = (
        "Adjust luminance and chroma contrast. Apply choosen preset (clarity or denoise & sharpen). "
        "Choose different values to adjust the strength of the effect."
    )
    operation = "diffuse"
    values = (
        UNCHANGED,
        dt("dehaze | default"),
        dt("denoise | coarse"),
        dt("denoise | fine"),
        dt("denoise | medium"),
        dt("lens deblur | medium"),
        dt("local contrast | normal"),
        dt("sharpen demosaicing | AA filter"),
        dt("sharpness | normal"),
    )
    default_index = 7


class ToneEqualizerMaskStep(ComboBoxStep):
    label = dt("tone equalizer", " ", "masking")
    tooltip = (
        "Apply automatic mask contrast and exposure compensation. "
        "Auto adjust the contrast and average exposure."
    )
    operation = "toneequal"
    basic_kind = BasicWidgetKind.SIMPLE
    values = (
        UNCHANGED,
        local("mask exposure compensation"),
        local("mask contrast compensation"),
        local("exposure & contrast comp."),
    )
    default_index = 3

    COMPENSATIONS: ClassVar[Dict[int, Tuple[str, ...]]] = {
        1: ("mask exposure compensation",),
        2: ("mask contrast compensation",),
        3: ("mask exposure compensation", "mask contrast compensation"),
    }

    def apply(self, selection: str) -> None:
        # the buttons only react while the module is visible
        self.actions.show_module("iop/toneequal")
        self.actions.do_without_event("iop/toneequal/page", 0, "masking", "", 1.0)

        for control in self.COMPENSATIONS[self.index]:
            path = f"iop/toneequal/{control}"
            # moving the slider first initialises the mask post-processing
            current = self.actions.do_without_event(path, 0, "value", "set", READ_SENTINEL)
            current = 0.0 if is_missing(current) else float(current)
            self.actions.set_value(path, 0, "value", "set", current + 0.1)
            self.actions.do(path, 0, "button", "toggle", 1.0)
            self.context.sleep(self.context.options.timeout_ms)

        self.actions.hide_module("iop/toneequal")


class ToneEqualizerPresetStep(ComboBoxStep):
    label = dt("tone equalizer", " ", "compress shadows-highlights")
    tooltip = (
        "Use preset to compress shadows and highlights with exposure-independent guided filter (eigf) "
        "(soft, medium or strong)."
    )
    operation = "toneequal"
    values = (UNCHANGED, dt("EIGF", " ", "medium"), dt("EIGF", " ", "soft"), dt("EIGF", " ", "strong"))

    # "@<" escapes the slash of the host's preset group name
    PRESET_GROUP: ClassVar[str] = "compress shadows@<highlights"
    PRESETS: ClassVar[Tuple[str, ...]] = ("EIGF | medium", "EIGF | soft", "EIGF | strong")

    def apply(self, selection: str) -> None:
        self.actions.select_module_preset("iop/toneequal/preset/", self.PRESET_GROUP, self.PRESETS[self.index - 1])


class ExposureStep(ComboBoxStep):
    label = dt("exposure")
    tooltip = (
        "Automatically adjust the exposure correction. Remove the camera exposure bias, "
        "useful if you exposed the image to the right."
    )
    operation = "exposure"
    values = (UNCHANGED, local("adjust exposure correction"), local("adjust & compensate bias"))

    def apply(self, selection: str) -> None:
        self.actions.button_off_on("iop/exposure/exposure")
        if self.index == 2:
            self.actions.check_box_on("iop/exposure/compensate exposure bias")


class LensCorrectionStep(ComboBoxStep):
    label = dt("lens correction")
    tooltip = "Enable and reset lens correction module."
    operation = "lens"
    values = (UNCHANGED, dt("Lensfun database"))
    default_index = 1

    def apply(self, selection: str) -> None:
        # the host combobox has no "unchanged" entry
        methods = [self._dt("embedded metadata"), self.configuration_values[1]]
        index = self.actions.get_value("iop/lens/correction method", "selection")
        try:
            position = -int(index) - 1
        except (TypeError, ValueError):
            position = -1
        current = methods[position] if 0 <= position < len(methods) else None

        if current != selection:
            self.log.info(INDENT + self._("current correction method = %s") % quote(current))
            self.actions.do("iop/lens/correction method", 0, "selection", "item:Lensfun database", 1.0)
        else:
            self.log.info(INDENT + self._("nothing to do, correction method already = %s") % quote(current))


class DenoiseProfiledStep(ComboBoxStep):
    label = dt("denoise (profiled)")
    tooltip = (
        "Enable denoise (profiled) module. There is nothing to configure, just enable or reset this module."
    )
    operation = "denoiseprofile"


class ChromaticAberrationsStep(ExclusiveModuleStep):
    label = dt("chromatic aberrations")
    tooltip = (
        "Correct chromatic aberrations. Distinguish between Bayer sensor and other camera sensors. "
        "This operation uses the corresponding correction module and disables the other."
    )
    operation = "cacorrect"
    exclusion_group = ("cacorrect", "cacorrectrgb")
    values = (UNCHANGED, local("Bayer sensor"), local("other sensors"))
    selection_operations = {1: "cacorrect", 2: "cacorrectrgb"}
    default_index = 1


class ColorCalibrationAdaptationStep(ComboBoxStep):
    label = dt("color calibration", " ", "adaptation")
    tooltip = (
        "Perform color space corrections in color calibration module. Select the adaptation. The working "
        "color space in which the module will perform its chromatic adaptation transform and channel mixing."
    )
    operation = "channelmixerrgb"
    values = (
        UNCHANGED,
        dt("linear Bradford (ICC v4)"),
        dt("CAT16 (CIECAM16)"),
        dt("non-linear Bradford"),
        dt("XYZ"),
        dt("none (bypass)"),
    )
    default_index = 2

    def apply(self, selection: str) -> None:
        self.apply_host_selection("iop/channelmixerrgb/adaptation", selection, subject=self._("adaptation"))


class ColorCalibrationIlluminantStep(ComboBoxStep):
    label = dt("color calibration", " ", "illuminant")
    tooltip = (
        "Perform color space corrections in color calibration module. Select the illuminant. The type of "
        "illuminant assumed to have lit the scene. By default unchanged for the legacy workflow."
    )
    operation = "channelmixerrgb"
    default_basic_mode = BasicMode.ENABLE
    values = (
        UNCHANGED,
        dt("set white balance to detected from area"),
        dt("same as pipeline (D50)"),
        dt("A (incandescent)"),
        dt("D (daylight)"),
        dt("E (equi-energy)"),
        dt("F (fluorescent)"),
        dt("LED (LED light)"),
        dt("Planckian (black body)"),
        dt("custom"),
        dt("as shot in camera"),
    )

    def __init__(self, context: "WorkflowContext", adaptation: ColorCalibrationAdaptationStep) -> None:
        super().__init__(context)
        self.adaptation = adaptation

    def apply(self, selection: str) -> None:
        index = self.actions.get_value("iop/channelmixerrgb/adaptation", "selection")
        adaptation = self.adaptation.configuration_value_from_selection_index(index)
        self.log.info(INDENT + self._("color calibration adaption = %s") % adaptation)
        if adaptation == self._dt("none (bypass)"):
            self.log.info(INDENT + self._("illuminant cannot be set"))
            return
        self.log.info(INDENT + self._("illuminant can be set"))

        if self.index == 1:
            self.actions.do("iop/channelmixerrgb/picker", 0, "", "toggle", 1.0)
            return

        self.apply_host_selection(
            "iop/channelmixerrgb/illuminant", selection, subject=self._("illuminant"), extra_values=1
        )


class HighlightReconstructionStep(ComboBoxStep):
    label = dt("highlight reconstruction")
    tooltip = (
        "Reconstruct color information for clipped pixels. Select an appropriate reconstruction methods to "
        "reconstruct the missing data from unclipped channels and/or neighboring pixels."
    )
    operation = "highlights"
    values = (
        UNCHANGED,
        dt("inpaint opposed"),
        dt("reconstruct in LCh"),
        dt("clip highlights"),
        dt("segmentation based"),
        dt("guided laplacians"),
    )
    default_index = 1

    def apply(self, selection: str) -> None:
        self.apply_host_selection("iop/highlights/method", selection)


class WhiteBalanceStep(ComboBoxStep):
    label = local("white balance")
    tooltip = (
        "Adjust the white balance of the image by altering the temperature. "
        "By default unchanged for the legacy workflow."
    )
    operation = "temperature"
    values = (
        UNCHANGED,
        dt("as shot"),
        dt("from image area"),
        dt("user modified"),
        dt("camera reference"),
        dt("as shot to reference"),
    )
    MODERN_DEFAULT_INDEX: ClassVar[int] = 5

    def default_configuration_index(self) -> int:
        return self.MODERN_DEFAULT_INDEX if is_modern_workflow(self.context) else self.unchanged_index

    def apply(self, selection: str) -> None:
        self.apply_host_selection(
            "iop/temperature/settings/settings",
            selection,
            write=lambda: self.actions.do("iop/temperature/settings/" + self.reverse(selection), 0, "", "", 1.0),
        )


class CreatorStep(TextEntryStep):
    label = dt("metadata", " ", "creator")
    tooltip = (
        "Creator of this image. Enter your name or contact address. Leave this field blank if you don't "
        "want to change the current value. After reloading your image you can find this value as full text "
        "in metadata editor and image information module. This value is exported to jpg meta data."
    )

    def run(self) -> None:
        creator = self.value()
        if not creator:
            return
        image = self.context.host.display_image()
        self.log.info(self.context.translator.tdt_concat(("creator", " = ")) + creator)
        image.creator = creator


LICENSE_FULL_TEXT: Dict[str, str] = {
    "all rights reserved": "all rights reserved",
    "CC BY": "Creative Commons Attribution (CC BY)",
    "CC BY-NC": "Creative Commons Attribution-NonCommercial (CC BY-NC)",
    "CC BY-NC-ND": "Creative Commons Attribution-NonCommercial-NoDerivs (CC BY-NC-ND)",
    "CC BY-NC-SA": "Creative Commons Attribution-NonCommercial-ShareAlike (CC BY-NC-SA)",
    "CC BY-ND": "Creative Commons Attribution-NoDerivs (CC BY-ND)",
    "CC BY-SA": "Creative Commons Attribution-ShareAlike (CC BY-SA)",
}


class LicenseStep(ComboBoxStep):
    label = dt("metadata", " ", "license")
    tooltip = (
        "Choose a creative common license. After reloading your image you can find this value as full text "
        "in metadata editor and image information module. This value is exported to jpg meta data."
    )
    basic_kind = BasicWidgetKind.EMPTY
    show_module_during_single_run = False
    values = (UNCHANGED,) + tuple(LICENSE_FULL_TEXT)

    def apply(self, selection: str) -> None:
        rights = LICENSE_FULL_TEXT[selection]
        image = self.context.host.display_image()
        self.log.info(self.context.translator.tdt_concat(("rights", " = ")) + rights)
        image.rights = rights


# ----------------------------------------------------------------------
# Buttons
# ----------------------------------------------------------------------
class RotateButton(ModuleButton):
    label = dt("rotate and perspective")
    tooltip = "Activate the module to rotate the image and adjust the perspective. Enabled in darkroom view."
    module = "iop/ashift"


class CropButton(ModuleButton):
    label = dt("crop")
    tooltip = "Activate the module to crop the image. Enabled in darkroom view."
    module = "iop/crop"


class ExposureButton(ModuleButton):
    label = dt("exposure")
    tooltip = (
        "Show exposure module to adjust the exposure until the mid-tones are clear enough. "
        "Enabled in darkroom view."
    )
    module = "iop/exposure"


# ----------------------------------------------------------------------
# Catalogue
# ----------------------------------------------------------------------
STEP_TYPES: Sequence[Type[WorkflowStep]] = (
    CompressHistoryStep,
    DynamicRangeStep,
    ColorBalanceContrastStep,
    ColorBalanceMasksStep,
    ColorBalanceColorfulnessStep,
    ContrastEqualizerStep,
    ColorLookupTableStep,
    DiffuseOrSharpenStep,
    ToneEqualizerMaskStep,
    ToneEqualizerPresetStep,
    ExposureStep,
    LensCorrectionStep,
    DenoiseProfiledStep,
    ChromaticAberrationsStep,
    ColorCalibrationIlluminantStep,
    ColorCalibrationAdaptationStep,
    HighlightReconstructionStep,
    WhiteBalanceStep,
    CreatorStep,
    LicenseStep,
    DiscardHistoryStep,
    ShowModulesStep,
    RunSingleStepOnChangeStep,
    TimeoutStep,
)

BUTTON_TYPES: Sequence[Type[ButtonStep]] = (RotateButton, CropButton, ExposureButton)


def build_default_steps(
    context: "WorkflowContext",
    *,
    initialise: bool = True,
    step_types: Sequence[Type[WorkflowStep]] = STEP_TYPES,
) -> List[WorkflowStep]:
    """Create every step of ``step_types`` in panel order."""

    adaptation: Optional[ColorCalibrationAdaptationStep] = None
    steps: List[WorkflowStep] = []
    for step_type in step_types:
        if step_type is ColorCalibrationIlluminantStep:
            # created after the adaptation step it consults
            continue
        step = step_type(context)
        if isinstance(step, ColorCalibrationAdaptationStep):
            adaptation = step
        steps.append(step)

    if ColorCalibrationIlluminantStep in step_types:
        if adaptation is None:
            raise RuntimeError("the illuminant step needs the color calibration adaptation step")
        illuminant = ColorCalibrationIlluminantStep(context, adaptation)
        steps.insert(steps.index(adaptation), illuminant)

    if initialise:
        for step in steps:
            step.init()
    return steps


def build_default_buttons(context: "WorkflowContext") -> List[ButtonStep]:
    return [button_type(context) for button_type in BUTTON_TYPES]


__all__ = [
    "BUTTON_TYPES",
    "LICENSE_FULL_TEXT",
    "STEP_TYPES",
    "build_default_buttons",
    "build_default_steps",
    "is_modern_workflow",
] + [step_type.__name__ for step_type in STEP_TYPES] + [button_type.__name__ for button_type in BUTTON_TYPES]
