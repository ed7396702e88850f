from __future__ import annotations

import math
from collections import Counter
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from initial_workflow.core.i18n import Translator
from initial_workflow.core.workflow_log import WorkflowLog
from initial_workflow.host.api import HostEvent, View
from initial_workflow.workflow.context import WorkflowContext, WorkflowOptions
from initial_workflow.workflow.steps import ComboBoxStep, local


class FakeJob:
    """Progress indicator recording its updates."""

    def __init__(self, label: str, cancelable: bool, cancel_callback: Optional[Callable[["FakeJob"], None]]) -> None:
        self.label = label
        self.cancelable = cancelable
        self.cancel_callback = cancel_callback
        self.percent = 0.0
        self.valid = True
        self.percent_updates: List[float] = []

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "percent" and "percent_updates" in self.__dict__:
            self.percent_updates.append(value)
        super().__setattr__(name, value)

    def cancel(self) -> None:
        """Simulate a click on the cancel button of the progress bar."""

        if self.cancel_callback is not None:
            self.cancel_callback(self)


class FakeHost:
    """In-memory host with a simulated clock.

    Every mutating ``gui_action`` schedules a pipeline completion event
    ``pipeline_delay_ms`` later unless ``pipeline_events`` is off.  Events
    are delivered to registered listeners while ``sleep`` advances the
    clock.
    """

    def __init__(
        self,
        *,
        view: View = View.DARKROOM,
        api_version: str = "9.1.0",
        pipeline_events: bool = True,
        pipeline_delay_ms: float = 10.0,
    ) -> None:
        self.api_version = api_version
        self.view = view
        self.pipeline_events = pipeline_events
        self.pipeline_delay_ms = pipeline_delay_ms
        self.clock = 0.0
        self.sleeps: List[float] = []
        self.calls: List[Tuple[str, int, str, str, float]] = []
        self.values: Dict[Tuple[str, str], Any] = {}
        self.listeners: Dict[Tuple[str, str], Callable[..., None]] = {}
        self.registrations: Counter = Counter()
        self.unregistrations: Counter = Counter()
        self.scheduled: List[Tuple[float, str, Tuple[Any, ...]]] = []
        self.preferences: Dict[Tuple[str, str], str] = {}
        self.messages: List[str] = []
        self.jobs: List[FakeJob] = []
        self.images: List[Any] = []
        self.selection: List[Any] = []
        self.displayed: Any = None
        self.unclean_loads = 0
        self.ending = False
        self.panels: List[Tuple[str, str, Callable[[], None]]] = []
        self.panel_shows: List[str] = []
        self.view_switches: List[View] = []

    # ------------------------------------------------------------------
    # Automation
    # ------------------------------------------------------------------
    def gui_action(self, path: str, instance: int, element: str, effect: str, speed: float) -> Any:
        self.calls.append((path, instance, element, effect, speed))
        if isinstance(speed, float) and math.isnan(speed):
            return self.values.get((path, element), 0.0)

        key = (path, element)
        if effect == "" and element in ("enable", "show"):
            self.values[key] = 0.0 if self.values.get(key, 0.0) else 1.0
        elif element == "button" and effect in ("on", "off"):
            self.values[key] = 1.0 if effect == "on" else 0.0
        elif element == "button" and effect == "toggle":
            self.values[key] = 0.0 if self.values.get(key, 0.0) else 1.0
        elif element == "" and effect == "on":
            self.values[key] = 1.0
        elif effect == "set":
            self.values[key] = speed
        elif element == "selection" and effect.startswith("item:"):
            self.values[(path, "item")] = effect[len("item:"):]

        if self.pipeline_events:
            self.schedule(HostEvent.PIXELPIPE_COMPLETE.value, self.pipeline_delay_ms)
        return None

    def writes(self) -> List[Tuple[str, int, str, str, float]]:
        """Calls that were not reads."""

        return [call for call in self.calls if not (isinstance(call[4], float) and math.isnan(call[4]))]

    def written_paths(self) -> List[str]:
        return [call[0] for call in self.writes()]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def register_event(self, owner: str, event_type: str, callback: Callable[..., None]) -> None:
        self.listeners[(owner, event_type)] = callback
        self.registrations[event_type] += 1

    def destroy_event(self, owner: str, event_type: str) -> None:
        self.listeners.pop((owner, event_type), None)
        self.unregistrations[event_type] += 1

    def listener_count(self, event_type: str) -> int:
        return sum(1 for (_, kind) in self.listeners if kind == event_type)

    def schedule(self, event_type: str, delay_ms: float, *args: Any) -> None:
        self.scheduled.append((self.clock + delay_ms, event_type, args))

    def fire(self, event_type: str, *args: Any) -> None:
        for (owner, kind), callback in list(self.listeners.items()):
            if kind == event_type:
                callback(event_type, *args)

    def sleep(self, milliseconds: float) -> None:
        self.sleeps.append(milliseconds)
        self.clock += milliseconds
        due = [entry for entry in self.scheduled if entry[0] <= self.clock]
        self.scheduled = [entry for entry in self.scheduled if entry[0] > self.clock]
        for _, event_type, args in sorted(due, key=lambda entry: entry[0]):
            self.fire(event_type, *args)

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------
    def read_preference(self, namespace: str, key: str) -> str:
        return self.preferences.get((namespace, key), "")

    def write_preference(self, namespace: str, key: str, value: str) -> None:
        self.preferences[(namespace, key)] = value

    # ------------------------------------------------------------------
    # Views, images, jobs
    # ------------------------------------------------------------------
    def create_job(self, label: str, cancelable: bool, cancel_callback=None) -> FakeJob:
        job = FakeJob(label, cancelable, cancel_callback)
        self.jobs.append(job)
        return job

    def current_view(self) -> View:
        return self.view

    def switch_view(self, view: View) -> None:
        self.view = view
        self.view_switches.append(view)
        if self.pipeline_events:
            self.schedule(HostEvent.PIXELPIPE_COMPLETE.value, self.pipeline_delay_ms)

    def display_image(self, image: Any = None) -> Any:
        if image is None:
            return self.displayed
        self.displayed = image
        clean = True
        if self.unclean_loads > 0:
            self.unclean_loads -= 1
            clean = False
        self.schedule(HostEvent.IMAGE_LOADED.value, self.pipeline_delay_ms, clean, image)
        if self.pipeline_events:
            self.schedule(HostEvent.PIXELPIPE_COMPLETE.value, self.pipeline_delay_ms * 2)
        return image

    def action_images(self) -> Sequence[Any]:
        return list(self.images)

    def set_selection(self, images: Sequence[Any]) -> None:
        self.selection = list(images)

    def panel_show(self, panel: str) -> None:
        self.panel_shows.append(panel)

    def print_message(self, text: str) -> None:
        self.messages.append(text)

    def is_ending(self) -> bool:
        return self.ending

    def register_panel(self, owner: str, label: str, reset_callback: Callable[[], None]) -> None:
        self.panels.append((owner, label, reset_callback))


def make_image(filename: str) -> SimpleNamespace:
    return SimpleNamespace(filename=filename, creator="", rights="")


class DictMessageCatalog:
    """Message catalogue backed by plain dictionaries per domain."""

    def __init__(self, translations: Optional[Dict[str, Dict[str, str]]] = None) -> None:
        self.translations = translations or {}

    def translate(self, domain: str, msgid: str) -> str:
        return self.translations.get(domain, {}).get(msgid, msgid)


def make_context(
    host: Optional[FakeHost] = None,
    *,
    catalog: Optional[DictMessageCatalog] = None,
    timeout_ms: int = 1000,
    max_image_reload_attempts: int = 5,
) -> WorkflowContext:
    host = host or FakeHost()
    translator = Translator(catalog or DictMessageCatalog())
    return WorkflowContext.create(
        host,
        translator,
        options=WorkflowOptions(timeout_ms=timeout_ms),
        log=WorkflowLog(host, translate=translator.t),
        max_image_reload_attempts=max_image_reload_attempts,
    )


class RecordingStep(ComboBoxStep):
    """Module step that records its runs in a shared list."""

    operation = "recording"
    values = (local("unchanged"), local("apply"))
    default_index = 1

    def __init__(self, context: WorkflowContext, name: str, order: List[str], on_run=None) -> None:
        self.label = local(name)
        super().__init__(context)
        self.name = name
        self.order = order
        self.on_run = on_run

    def run(self) -> None:
        self.order.append(self.name)
        if self.on_run is not None:
            self.on_run(self)
