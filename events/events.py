# events/events.py
from dataclasses import dataclass
from typing import Optional

from core.event_bus import Event


@dataclass
class DictationStarted(Event):
    mode: str                       # "global" or "field"
    field: Optional[str] = None     # bound field in per-field mode


@dataclass
class DictationStopped(Event):
    reason: str = "stopped"         # "stopped", "command", "ended", "error", "restart"


@dataclass
class DictationError(Event):
    message: str                    # user-facing, shown once


@dataclass
class TranscriptUpdated(Event):
    text: str                       # final + interim, display only


@dataclass
class FieldChanged(Event):
    field: str
    value: str


@dataclass
class SubmitRequested(Event):
    pass


@dataclass
class ExportRequested(Event):
    pass


@dataclass
class CancelRequested(Event):
    pass


@dataclass
class ItemSaved(Event):
    item_id: str


@dataclass
class ItemSaveFailed(Event):
    message: str
