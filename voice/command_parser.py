# voice/command_parser.py

import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Callable, Mapping, Optional, Pattern, Tuple

from inspection.dates import to_iso_date
from inspection.fields import INSPECTION_DATE, field_from_spoken

GLOBAL = "global"
FIELD = "field"
IDLE = "idle"


class Action(Enum):
    STOP = "stop"
    SAVE = "save"
    EXPORT = "export"
    CANCEL = "cancel"


@dataclass(frozen=True)
class DictationState:
    mode: str = IDLE
    active_field: Optional[str] = None
    transcript: str = ""
    values: Mapping[str, str] = field(default_factory=dict)

    def with_values(self, values: Mapping[str, str]) -> "DictationState":
        return replace(self, values=dict(values))


@dataclass(frozen=True)
class StepResult:
    state: DictationState
    action: Optional[Action] = None
    changes: Tuple[Tuple[str, str], ...] = ()


def start_state(field_key: Optional[str] = None, values: Optional[Mapping[str, str]] = None) -> DictationState:
    """State of a fresh session: bound to `field_key` (per-field mode) or global."""
    return DictationState(
        mode=FIELD if field_key else GLOBAL,
        active_field=field_key,
        values=dict(values or {}),
    )


_ACTIONS: Tuple[Tuple[Pattern, Action], ...] = (
    (re.compile(r"^(stop|done|that['’]?s all|finish|end)$", re.I), Action.STOP),
    (re.compile(r"^save$", re.I), Action.SAVE),
    (re.compile(r"^export$", re.I), Action.EXPORT),
    (re.compile(r"^cancel$", re.I), Action.CANCEL),
)

_FOCUS = re.compile(r"^(?:enter|start|begin|focus|select|go to)\s+(?:text\s+for\s+)?(.+)$", re.I)
_CLEAR = re.compile(r"^clear\s+(.+)$", re.I)
_ASSIGN = re.compile(
    r"^(?:set\s+)?(name|description|notes?|inspector|inspection\s*date|date)\b"
    r"\s*(?:(?:is|to)\b|:)?\s*(.+)$",
    re.I,
)
_CONNECTOR = re.compile(r"^\s*(?:(?:is|to|as)\b|=|:)\s*", re.I)
_TRAILING_PUNCT = re.compile(r"[\s.!?,]+$")


def clean_tail(s: str) -> str:
    """Drop a leading connector word ("is", "to", "as", "=", ":") from a spoken value."""
    return _CONNECTOR.sub("", s, count=1).strip()


def match_action(text: str) -> Optional[Action]:
    t = _TRAILING_PUNCT.sub("", text.strip())
    for pattern, action in _ACTIONS:
        if pattern.match(t):
            return action
    return None


Handler = Callable[[DictationState, "re.Match"], Optional[StepResult]]


class CommandParser:
    """
    Turns finalized utterances into form mutations or control actions.

    `step` is pure: it reads the state (including a snapshot of the current
    field values) and returns the next state, an optional action and the
    field changes to apply. In global mode the grammar is an ordered list of
    (pattern, handler) rules; the first rule whose handler accepts the
    utterance wins, a handler returning None passes to the next rule.
    """

    def __init__(self, today: Optional[Callable[[], date]] = None):
        self._today = today
        self.rules: Tuple[Tuple[Pattern, Handler], ...] = (
            (_FOCUS, self._focus),
            (_CLEAR, self._clear),
            (_ASSIGN, self._assign),
        )

    def normalize_date(self, value: str) -> str:
        return to_iso_date(value, self._today() if self._today else None)

    def step(self, state: DictationState, utterance: str) -> StepResult:
        t = (utterance or "").strip()
        if not t:
            return StepResult(state)
        state = replace(state, transcript=(state.transcript + " " + t).strip())

        if state.mode == FIELD and state.active_field:
            return self._replace(state, state.active_field, t)

        action = match_action(t)
        if action is not None:
            if action in (Action.STOP, Action.CANCEL):
                state = replace(state, mode=IDLE, active_field=None)
            return StepResult(state, action=action)

        for pattern, handler in self.rules:
            m = pattern.match(t)
            if m:
                result = handler(state, m)
                if result is not None:
                    return result

        if state.active_field:
            if state.active_field == INSPECTION_DATE:
                return self._replace(state, INSPECTION_DATE, t)
            return self._append(state, state.active_field, t)
        return StepResult(state)

    # ── grammar handlers ──────────────────────────────────────────

    def _focus(self, state: DictationState, m) -> Optional[StepResult]:
        key = field_from_spoken(m.group(1))
        if key is None:
            return None
        return StepResult(replace(state, active_field=key))

    def _clear(self, state: DictationState, m) -> Optional[StepResult]:
        key = field_from_spoken(m.group(1))
        if key is None:
            return None
        return self._set(state, key, "")

    def _assign(self, state: DictationState, m) -> Optional[StepResult]:
        key = field_from_spoken(m.group(1))
        if key is None:
            return None
        value = clean_tail(m.group(2))
        if key == INSPECTION_DATE:
            return self._replace(state, key, value)
        return self._set(state, key, value)

    # ── mutations ─────────────────────────────────────────────────

    def _set(self, state: DictationState, key: str, value: str) -> StepResult:
        values = dict(state.values)
        values[key] = value
        new_state = replace(state, active_field=key, values=values)
        return StepResult(new_state, changes=((key, value),))

    def _replace(self, state: DictationState, key: str, value: str) -> StepResult:
        # dates only replace on a successful normalization
        if key == INSPECTION_DATE:
            iso = self.normalize_date(value)
            if not iso:
                return StepResult(state)
            value = iso
        return self._set(state, key, value)

    def _append(self, state: DictationState, key: str, text: str) -> StepResult:
        current = state.values.get(key, "")
        sep = " " if current else ""
        return self._set(state, key, current + sep + text)
