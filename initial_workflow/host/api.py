"""Narrow call surface of the host photo editor consumed by the workflow.

The workflow never talks to the editor directly.  Everything it needs is
expressed by the :class:`Host` protocol below: the UI automation primitive
(``gui_action``), event subscription, a cooperative ``sleep`` that yields to
the host loop, a key/value preference store, progress jobs and a handful of
view and selection queries.  Adapters for a concrete editor implement this
protocol; the test-suite uses an in-memory fake.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional, Protocol, Sequence


MIN_API_VERSION = "9.1.0"

EventCallback = Callable[..., None]


class HostEvent(str, Enum):
    """Host events the workflow subscribes to."""

    PIXELPIPE_COMPLETE = "pixelpipe-processing-complete"
    IMAGE_LOADED = "darkroom-image-loaded"
    VIEW_CHANGED = "view-changed"
    EXIT = "exit"


class View(str, Enum):
    """Host views relevant for the workflow."""

    DARKROOM = "darkroom"
    LIGHTTABLE = "lighttable"
    OTHER = "other"


class HostError(RuntimeError):
    """Base class for failures raised while driving the host."""


class CapabilityError(HostError):
    """Raised when the host lacks a capability or its API is too old."""


class GateBusyError(HostError):
    """Raised when an event gate is entered while it is already waiting."""


class ImageLoadError(HostError):
    """Raised when an image could not be loaded cleanly after several attempts."""


class Job(Protocol):
    """Progress indicator created by the host."""

    percent: float
    valid: bool


class Host(Protocol):
    """Operations offered by the host application."""

    api_version: str

    def gui_action(
        self, path: str, instance: int, element: str, effect: str, speed: float
    ) -> Any:
        """Perform ``effect`` on ``element`` of the control at ``path``.

        A NaN ``speed`` requests a read of the current value without mutating
        anything.  Combobox reads return a negative one-based index.
        """

    def register_event(self, owner: str, event_type: str, callback: EventCallback) -> None:
        """Subscribe ``callback`` to ``event_type`` on behalf of ``owner``."""

    def destroy_event(self, owner: str, event_type: str) -> None:
        """Remove the subscription of ``owner`` for ``event_type``."""

    def sleep(self, milliseconds: float) -> None:
        """Yield to the host loop for ``milliseconds``."""

    def read_preference(self, namespace: str, key: str) -> str:
        """Return the stored string for ``key`` or an empty string."""

    def write_preference(self, namespace: str, key: str, value: str) -> None:
        """Persist ``value`` under ``key``."""

    def create_job(
        self, label: str, cancelable: bool, cancel_callback: Optional[Callable[[Job], None]] = None
    ) -> Job:
        """Create a progress indicator."""

    def current_view(self) -> View:
        """Return the active host view."""

    def switch_view(self, view: View) -> None:
        """Activate ``view``."""

    def display_image(self, image: Any = None) -> Any:
        """Load ``image`` into the single-image view; return the displayed image."""

    def action_images(self) -> Sequence[Any]:
        """Return the images the user selected for an action."""

    def set_selection(self, images: Sequence[Any]) -> None:
        """Replace the current multi-image selection."""

    def panel_show(self, panel: str) -> None:
        """Make the named side panel visible."""

    def print_message(self, text: str) -> None:
        """Show a short message to the user."""

    def is_ending(self) -> bool:
        """Return ``True`` while the host is shutting down."""

    def register_panel(self, owner: str, label: str, reset_callback: Callable[[], None]) -> None:
        """Add the module panel to the lighttable and darkroom side panels."""


def parse_version(version: str) -> tuple[int, ...]:
    """Convert ``"9.1.0"`` style strings into comparable integer tuples."""

    parts: list[int] = []
    for chunk in str(version).split("."):
        digits = "".join(ch for ch in chunk if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def check_api_version(host: Host, minimum: str = MIN_API_VERSION) -> None:
    """Raise :class:`CapabilityError` unless ``host`` offers ``minimum``."""

    current = getattr(host, "api_version", None)
    if current is None:
        raise CapabilityError("host does not report an API version")
    if parse_version(current) < parse_version(minimum):
        raise CapabilityError(
            f"host API version {current} is too old, at least {minimum} is required"
        )


__all__ = [
    "MIN_API_VERSION",
    "CapabilityError",
    "EventCallback",
    "GateBusyError",
    "Host",
    "HostError",
    "HostEvent",
    "ImageLoadError",
    "Job",
    "View",
    "check_api_version",
    "parse_version",
]
