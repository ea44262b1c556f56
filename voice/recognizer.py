# voice/recognizer.py

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import AsyncIterator, Iterable, Optional, Protocol

from voice.stt_module import STTModule

logger = logging.getLogger(__name__)


class RecognizerUnavailable(Exception):
    """No speech recognition engine can be used on this machine."""


@dataclass
class RecognitionEvent:
    transcript: str
    is_final: bool = True


class Recognizer(Protocol):
    def start(self, lang: str) -> AsyncIterator[RecognitionEvent]:
        ...

    def stop(self) -> None:
        ...


class ScriptedRecognizer:
    """
    Replays a fixed sequence of utterances as final results.
    Strings are final; RecognitionEvent items are passed through as-is
    so interim results can be scripted too.
    """

    def __init__(self, utterances: Iterable, delay: float = 0.0):
        self.utterances = list(utterances)
        self.delay = delay
        self._stopped = False

    async def start(self, lang: str) -> AsyncIterator[RecognitionEvent]:
        self._stopped = False
        logger.debug("Scripted recognition started (%s, %d utterances)", lang, len(self.utterances))
        for item in self.utterances:
            if self._stopped:
                break
            await asyncio.sleep(self.delay)
            if isinstance(item, RecognitionEvent):
                yield item
            else:
                yield RecognitionEvent(transcript=str(item), is_final=True)

    def stop(self) -> None:
        self._stopped = True


class StdinRecognizer:
    """Each line typed on stdin is one finalized utterance."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self._stopped = False

    async def start(self, lang: str) -> AsyncIterator[RecognitionEvent]:
        self._stopped = False
        loop = asyncio.get_running_loop()
        while not self._stopped:
            line = await loop.run_in_executor(None, self.stream.readline)
            if not line:
                break
            yield RecognitionEvent(transcript=line.rstrip("\n"), is_final=True)

    def stop(self) -> None:
        self._stopped = True


class TranscribingRecognizer:
    """
    Sends recorded clips to the ASR service, one utterance per clip.
    """

    def __init__(self, stt: Optional[STTModule], audio_paths: Iterable[str]):
        if stt is None:
            raise RecognizerUnavailable("Speech recognition service is not configured.")
        self.stt = stt
        self.audio_paths = list(audio_paths)
        self._stopped = False

    async def start(self, lang: str) -> AsyncIterator[RecognitionEvent]:
        self._stopped = False
        for path in self.audio_paths:
            if self._stopped:
                break
            text = await self.stt.transcribe(path, lang=lang)
            if not text.strip():
                logger.info("No speech recognized in %s; skipping", path)
                continue
            yield RecognitionEvent(transcript=text, is_final=True)

    def stop(self) -> None:
        self._stopped = True
