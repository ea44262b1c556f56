# voice/stt_module.py

import os
import logging
from pathlib import Path
from typing import Optional

import httpx

from config import Config
from core.http import post_with_retries

logger = logging.getLogger(__name__)


class STTModule:
    """
    Resilient speech-to-text client,
    using manual retry/back-off and built-in timeouts.
    """

    def __init__(self,
                 url: Optional[str] = None,
                 timeout: float = 10.0,
                 max_retries: int = 3,
                 backoff_factor: float = 1.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.transport = transport

    @classmethod
    def from_config(cls, config: dict) -> "STTModule":
        http = config.get("http", {})
        return cls(
            url=config["host"]["url"].rstrip("/") + config["asr"]["endpoint"],
            timeout=http.get("timeout", 10.0),
            max_retries=http.get("max_retries", 3),
            backoff_factor=http.get("backoff_factor", 1.0),
        )

    async def transcribe(self, audio_path: str, lang: str = "en-US") -> str:
        """Transcript of one recorded clip, "" when nothing could be recognized."""
        if not os.path.isfile(audio_path):
            logger.warning("transcribe: file not found %s", audio_path)
            return ""

        url = self.url or Config.url_for("asr")
        logger.debug("Transcribing %s → %s", audio_path, url)

        try:
            filename = Path(audio_path).name
            headers = {"Accept": "application/json"}
            with open(audio_path, "rb") as f:
                files = {"audio_file": (filename, f, "audio/wav")}
                resp = await post_with_retries(
                    url,
                    files=files,
                    data={"lang": lang},
                    headers=headers,
                    timeout=self.timeout,
                    max_retries=self.max_retries,
                    backoff_factor=self.backoff_factor,
                    transport=self.transport,
                )
            return resp.json().get("transcript", "").strip()
        except Exception as e:
            logger.error("transcribe failed: %s", e, exc_info=True)
            return ""
