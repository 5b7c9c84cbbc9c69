"""Command-line entrypoint: zip code in, narrated forecast and report.mp3 out."""

from __future__ import annotations

import sys
from typing import Sequence, TextIO

import requests
from openai import OpenAIError

from app.audio_report import REPORT_PATH, render_audio_report
from app.config import Settings
from app.data_sources import MalformedResponseError
from app.forecast_service import get_forecast_for_zip
from app.narration import generate_report
from app.openai_client import OpenAIClient
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="cli")

AUDIO_STATUS_LINE = "\n\n---\n\nGenerating audio report, Please wait..."
CLEAR_SCREEN = "\033[2J\033[H"


def clear_terminal(out: TextIO) -> None:
    """Clear the screen, but only when writing to an interactive terminal."""
    if out.isatty():
        out.write(CLEAR_SCREEN)
        out.flush()


def run_report(
    zip_code: str,
    settings: Settings,
    *,
    client: OpenAIClient | None = None,
    out: TextIO | None = None,
) -> None:
    """Fetch the forecast for `zip_code`, stream its narration to `out`, then write the audio report."""
    out = out or sys.stdout
    forecast_days = get_forecast_for_zip(zip_code, settings=settings)
    client = client or OpenAIClient(settings)
    text_report = generate_report(forecast_days, client, out=out)
    print(AUDIO_STATUS_LINE, file=out, flush=True)
    render_audio_report(text_report, client, path=REPORT_PATH)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the report for the zip code given as the last argument."""
    argv = list(sys.argv if argv is None else argv)
    clear_terminal(sys.stdout)

    settings = Settings()
    setup_logging(level=settings.log_level, job_name="weather_report")

    zip_code = argv[-1]
    logger.info("Generating weather report for zip %s", zip_code)
    try:
        run_report(zip_code, settings)
    except MalformedResponseError:
        logger.error("OpenWeatherMap returned an unexpected payload; check the API plan covers One Call 3.0.")
        raise
    except requests.exceptions.RequestException:
        logger.error("OpenWeatherMap request failed; check OPENWEATHERMAP_API_KEY and the zip code.")
        raise
    except OpenAIError:
        logger.error("OpenAI request failed; check OPEN_AI_API_KEY.")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
