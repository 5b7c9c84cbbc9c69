"""Thin client for the OpenAI chat-completion and speech endpoints."""

from __future__ import annotations

import time
from typing import Any, Iterator

from openai import OpenAI

from . import config
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/openai_client")

CHAT_MODEL = "gpt-4-turbo-preview"
# Zero temperature keeps the narration repeatable for the same forecast.
CHAT_TEMPERATURE = 0
SPEECH_MODEL = "tts-1"
SPEECH_VOICE = "onyx"


class OpenAIClient:
    """Minimal wrapper around the OpenAI SDK for streamed chat and speech synthesis."""

    def __init__(self, settings: config.Settings | None = None, *, client: Any | None = None):
        """Initialize with an SDK client built from settings, or an injected one."""
        settings = settings or config.settings
        self.chat_model = CHAT_MODEL
        self.temperature = CHAT_TEMPERATURE
        self.speech_model = SPEECH_MODEL
        self.voice = SPEECH_VOICE
        self._client = client if client is not None else OpenAI(api_key=settings.openai_api_key)

    def stream_chat(self, messages: list[dict]) -> Iterator[str]:
        """Yield text fragments from a streamed chat completion, in arrival order.

        Chunks without content (role headers, the final stop chunk) are skipped.
        """
        logger.debug("OpenAI chat request: model=%s messages=%d", self.chat_model, len(messages))
        started = time.monotonic()
        stream = self._client.chat.completions.create(
            model=self.chat_model,
            messages=messages,
            stream=True,
            temperature=self.temperature,
        )

        fragments = 0
        for chunk in stream:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if not content:
                continue
            fragments += 1
            yield content

        logger.info("OpenAI chat stream finished: %d fragments in %.2fs", fragments, time.monotonic() - started)

    def synthesize_speech(self, text: str) -> bytes:
        """Return the audio bytes for `text` spoken with the fixed voice."""
        logger.debug("OpenAI speech request: model=%s voice=%s chars=%d", self.speech_model, self.voice, len(text))
        started = time.monotonic()
        response = self._client.audio.speech.create(
            model=self.speech_model,
            voice=self.voice,
            input=text,
        )
        audio = response.content
        logger.info("OpenAI speech took %.2fs, %d bytes", time.monotonic() - started, len(audio))
        return audio
