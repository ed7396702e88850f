"""Access to the host editor: call surface, event gates and action proxy."""
from .actions import GuiAction
from .api import (
    CapabilityError,
    GateBusyError,
    Host,
    HostError,
    HostEvent,
    ImageLoadError,
    Job,
    View,
    check_api_version,
)
from .events import EventGate, GateOutcome, ImageLoadedGate, PixelPipeGate

__all__ = [
    "CapabilityError",
    "EventGate",
    "GateBusyError",
    "GateOutcome",
    "GuiAction",
    "Host",
    "HostError",
    "HostEvent",
    "ImageLoadError",
    "ImageLoadedGate",
    "Job",
    "PixelPipeGate",
    "View",
    "check_api_version",
]
