import asyncio
import logging
from typing import Any, Callable, Optional, Set

from core.event_bus import EventBus
from events.events import (
    CancelRequested,
    DictationError,
    DictationStarted,
    DictationStopped,
    ExportRequested,
    FieldChanged,
    SubmitRequested,
    TranscriptUpdated,
)
from inspection.fields import FIELD_KEYS, ItemForm
from voice.command_parser import (
    FIELD,
    GLOBAL,
    Action,
    CommandParser,
    DictationState,
    start_state,
)
from voice.recognizer import RecognitionEvent, Recognizer, RecognizerUnavailable

# Configure logger
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

UNSUPPORTED_MESSAGE = "Speech recognition is not available on this device."


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class DictationModule:
    """
    Runs one speech recognition session at a time, feeds each finalized
    utterance through the CommandParser, applies the resulting field changes
    to the form and fires the save / export / cancel callbacks.
    """
    def __init__(
        self,
        bus: EventBus,
        form: ItemForm,
        recognizer: Optional[Recognizer],
        parser: Optional[CommandParser] = None,
        on_submit: Optional[Callable[[], Any]] = None,
        on_export: Optional[Callable[[ItemForm], Any]] = None,
        on_cancel: Optional[Callable[[], Any]] = None,
        lang: str = "en-US",
    ):
        self.bus = bus
        self.form = form
        self.recognizer = recognizer
        self.parser = parser or CommandParser()
        self.on_submit = on_submit
        self.on_export = on_export
        self.on_cancel = on_cancel
        self.lang = lang
        self.state = DictationState()
        self._interim = ""
        self._session = 0
        self._task: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()

    @property
    def listening(self) -> bool:
        return self._task is not None

    def start(self, field: Optional[str] = None) -> bool:
        """
        Start dictating into `field` (per-field mode) or into the whole form.
        Returns False when no recognizer can be started.
        """
        if field is not None and field not in FIELD_KEYS:
            raise KeyError(f"unknown field: {field!r}")
        if self.recognizer is None:
            self._fail(UNSUPPORTED_MESSAGE)
            return False
        if self._task is not None:
            self.stop(reason="restart")

        try:
            stream = self.recognizer.start(self.lang)
        except RecognizerUnavailable as e:
            self._fail(str(e) or UNSUPPORTED_MESSAGE)
            return False

        self._session += 1
        self.state = start_state(field, self.form.values())
        self._interim = ""
        self._task = asyncio.create_task(self._run(stream, self._session))
        mode = self.state.mode
        logger.info("Dictation started (mode=%s, field=%s)", mode, field)
        self.bus.emit(DictationStarted(mode=mode, field=field))
        return True

    def stop(self, reason: str = "stopped"):
        """End the current session; does nothing when none is running."""
        task, self._task = self._task, None
        if task is None:
            return
        try:
            self.recognizer.stop()
        except Exception as e:
            logger.warning("Failed to stop recognizer: %s", e, exc_info=True)
        if task is not _current_task():
            task.cancel()
        self.state = DictationState()
        self._interim = ""
        logger.info("Dictation stopped (%s)", reason)
        self.bus.emit(DictationStopped(reason=reason))

    async def wait(self):
        """Wait for the running session and the callbacks it fired to finish."""
        while self._task is not None:
            await asyncio.wait({self._task})
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _run(self, stream, session: int):
        try:
            async for event in stream:
                if session != self._session or self._task is None:
                    break
                self.handle_event(event)
            else:
                if session == self._session and self._task is not None:
                    self.stop(reason="ended")
        except asyncio.CancelledError:
            logger.debug("Dictation session %d cancelled", session)
        except RecognizerUnavailable as e:
            if session == self._session:
                self._fail(str(e) or UNSUPPORTED_MESSAGE)
        except Exception as e:
            logger.error("Speech recognition failed: %s", e, exc_info=True)
            if session == self._session:
                self._fail(f"Speech recognition error: {e}")
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                try:
                    await aclose()
                except Exception as e:
                    logger.debug("Closing recognition stream failed: %s", e)

    def _fail(self, message: str):
        logger.error("Dictation unavailable: %s", message)
        self.bus.emit(DictationError(message=message))
        self.stop(reason="error")

    # ── utterance handling ──────────────────────────────────────

    def handle_event(self, event: RecognitionEvent):
        if not event.is_final:
            self._interim = event.transcript
            self.bus.emit(TranscriptUpdated(text=self._display_transcript()))
            return
        self._interim = ""
        self.process_utterance(event.transcript)

    def process_utterance(self, text: str):
        """Apply one finalized utterance to the form."""
        if self.state.mode not in (GLOBAL, FIELD):
            logger.debug("Ignoring utterance outside a session: %r", text)
            return
        result = self.parser.step(self.state.with_values(self.form.values()), text)
        self.state = result.state
        self.bus.emit(TranscriptUpdated(text=self._display_transcript()))

        for key, value in result.changes:
            self.form.set(key, value)
            logger.info("Field %s := %r", key, value)
            self.bus.emit(FieldChanged(field=key, value=value))

        if result.action is not None:
            self._dispatch(result.action)

    def _dispatch(self, action: Action):
        logger.info("Voice command: %s", action.value)
        if action is Action.STOP:
            self.stop(reason="command")
        elif action is Action.SAVE:
            self.bus.emit(SubmitRequested())
            self._invoke(self.on_submit)
        elif action is Action.EXPORT:
            self.bus.emit(ExportRequested())
            self._invoke(self.on_export, self.form)
        elif action is Action.CANCEL:
            self.bus.emit(CancelRequested())
            self._invoke(self.on_cancel)
            self.stop(reason="command")

    def _invoke(self, callback: Optional[Callable[..., Any]], *args):
        if callback is None:
            return
        try:
            result = callback(*args)
        except Exception as e:
            logger.error("Voice command callback failed: %s", e, exc_info=True)
            return
        # fire and forget
        if asyncio.iscoroutine(result):
            task = asyncio.create_task(result)
            self._pending.add(task)
            task.add_done_callback(self._forget)

    def _forget(self, task: asyncio.Task):
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Voice command callback failed: %s", task.exception(),
                         exc_info=task.exception())

    def _display_transcript(self) -> str:
        return (self.state.transcript + " " + self._interim).strip()
