"""Prompt construction and streamed narration of the daily forecast."""

from __future__ import annotations

import json
import sys
from typing import Callable, Iterable, Protocol, Sequence, TextIO

from app.data_sources import ForecastDay
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/narration")


SYSTEM_PROMPT = """You are a bot designed to help people understand the weather.

You will be given data from the OpenWeatherMap API and asked to generate a report
based on the data.

Temperatures will be in Kelvin. You should convert them to Fahrenheit and not include
the Kelvin values in your output. Output temperatures to the nearest degree and use the
format of {number} degrees instead of {number}°F. For example, "72 degrees".

Wind speeds will be in meters per second. Convert them to mph and
round to the nearest 5 mph. If under 5 mph, report "Calm".

Use the tone of a local weather reporter. You should be informative and professional,
but also friendly and engaging.

Use relative days (e.g. "tomorrow" or the name of the day) instead of specific dates."""


FragmentObserver = Callable[[str], None]


class FragmentStream(Protocol):
    """Anything that can turn chat messages into a stream of text fragments."""

    def stream_chat(self, messages: list[dict]) -> Iterable[str]:
        ...


class NarrativeAccumulator:
    """Append-only collector for streamed fragments."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def __call__(self, fragment: str) -> None:
        self._parts.append(fragment)

    @property
    def text(self) -> str:
        return "".join(self._parts)


def echo_to(stream: TextIO) -> FragmentObserver:
    """Return an observer that writes each fragment to `stream` as soon as it arrives."""
    def _echo(fragment: str) -> None:
        stream.write(fragment)
        stream.flush()
    return _echo


def consume_fragments(fragments: Iterable[str], observers: Sequence[FragmentObserver]) -> int:
    """Hand every fragment to each observer, in arrival order. Returns the fragment count."""
    count = 0
    for fragment in fragments:
        for observe in observers:
            observe(fragment)
        count += 1
    return count


def serialize_forecast(days: Sequence[ForecastDay]) -> str:
    """Render forecast days as a compact JSON array."""
    return json.dumps([day.model_dump(mode="json") for day in days], separators=(",", ":"))


def build_report_messages(days: Sequence[ForecastDay]) -> list[dict]:
    """Prepare the system+user messages asking for a spoken-style report."""
    user_msg = "\n".join([
        "Use the following data to generate a report:",
        "",
        f'"""{serialize_forecast(days)}"""',
        "",
        "Provide a summary of the weather data and any trends or patterns that you notice.",
    ])
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_msg},
    ]


def generate_report(days: Sequence[ForecastDay], client: FragmentStream, *, out: TextIO | None = None) -> str:
    """
    Stream a narrated report for `days`, echoing it to `out` while collecting it.

    If the stream raises part-way through, the error propagates and the partial
    text is discarded, so a truncated report never reaches speech synthesis.
    """
    messages = build_report_messages(days)
    logger.debug(
        "LLM prompt lengths (chars): system=%d user=%d",
        len(messages[0]["content"]),
        len(messages[1]["content"]),
    )
    accumulator = NarrativeAccumulator()
    count = consume_fragments(
        client.stream_chat(messages),
        [accumulator, echo_to(out or sys.stdout)],
    )
    report = accumulator.text
    logger.info("Narration complete: %d fragments, %d chars", count, len(report))
    return report
