"""Render the finished narration to an MP3 file."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/audio_report")

REPORT_PATH = Path("report.mp3")


class SpeechSynthesizer(Protocol):
    def synthesize_speech(self, text: str) -> bytes:
        ...


def render_audio_report(text: str, client: SpeechSynthesizer, *, path: Path | str = REPORT_PATH) -> Path:
    """Synthesize `text` and write the audio bytes verbatim to `path`, replacing any existing file."""
    target = Path(path).resolve()
    audio = client.synthesize_speech(text)
    target.write_bytes(audio)
    logger.info("Wrote %d bytes of audio to %s", len(audio), target)
    return target
