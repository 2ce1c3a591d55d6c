"""AI crop suggestions for a configured polyhouse.

Sends the configuration and the regional climate to Gemini and returns the
free-text answer.  Requires ``GEMINI_API_KEY`` or ``GOOGLE_API_KEY`` unless a
client is passed in.  Failures raise ``CropSuggestionError``; there is no
automatic retry.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from .climate import ClimateReport
from .parameters import PolyhouseConfig

__all__ = [
    "DEFAULT_MODEL",
    "SYSTEM_INSTRUCTION",
    "FALLBACK_ANSWER",
    "CropSuggestionError",
    "get_api_key",
    "build_crop_prompt",
    "suggest_crops",
]

DEFAULT_MODEL = "gemini-2.5-flash"
SYSTEM_INSTRUCTION = "You are an expert agricultural advisor specializing in protected cultivation."
FALLBACK_ANSWER = "Unable to generate suggestions"


class CropSuggestionError(RuntimeError):
    """The suggestion service could not be reached or refused the request."""


def get_api_key() -> str:
    """Get the Gemini API key from the environment."""
    key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    if not key:
        raise CropSuggestionError("Set GEMINI_API_KEY or GOOGLE_API_KEY to request crop suggestions")
    return key


def build_crop_prompt(config: PolyhouseConfig, climate: ClimateReport) -> str:
    profile = climate.profile
    location = ", ".join(part for part in (config.district, config.state) if part) or "unspecified"
    return (
        "You are an agricultural expert. Based on the following polyhouse configuration "
        "and climate data, suggest 5 suitable crops with brief explanations.\n"
        "\n"
        f"Polyhouse: {config.length:g}m x {config.width:g}m, {config.polyhouse_type} type\n"
        f"Cover: {config.cover_material}\n"
        f"Location: {location}\n"
        f"Climate Zone: {profile.zone}\n"
        f"Avg Temperature: {profile.avg_temperature_c:g}°C\n"
        f"Humidity: {profile.humidity_pct:g}%\n"
        f"Annual Rainfall: {profile.rainfall_mm:g}mm\n"
        "\n"
        "Provide crop recommendations with expected yield and growing tips. "
        "Be concise and practical."
    )


def suggest_crops(
    config: PolyhouseConfig,
    climate: ClimateReport,
    client: Optional[Any] = None,
    model: str = DEFAULT_MODEL,
) -> str:
    """Ask Gemini for crop suggestions; returns the answer text."""
    prompt = build_crop_prompt(config, climate)

    if client is None:
        from google import genai

        client = genai.Client(api_key=get_api_key())

    from google.genai import types

    try:
        response = client.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(system_instruction=SYSTEM_INSTRUCTION),
        )
    except Exception as exc:
        logging.warning("Crop suggestion request failed: %s", exc)
        raise CropSuggestionError(f"AI service error: {exc}") from exc

    text = (getattr(response, "text", None) or "").strip()
    if not text:
        logging.info("Crop suggestion service returned no text")
        return FALLBACK_ANSWER
    return text
