"""Configuration constants, voice defaults, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Provider defaults, check thresholds and output
locations are plain data, not buried in logic, so a script author can
tune them without touching the pipeline.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values. The load_api_key() function provides a clear
error when the key is missing.

RULES:
- API key is loaded from .env via python-dotenv, never hardcoded
- All provider defaults can be overridden via environment variables
- Check thresholds are in seconds of raw (un-sped-up) narration
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Speech-synthesis provider
# ---------------------------------------------------------------------------

ELEVENLABS_BASE_URL = os.getenv("ELEVENLABS_BASE_URL", "https://api.elevenlabs.io/v1")
ELEVENLABS_MODEL = os.getenv("ELEVENLABS_MODEL", "eleven_turbo_v2_5")
DEFAULT_VOICE_ID = os.getenv("ELEVENLABS_VOICE_ID", "NOpBlnGInO9m6vDvFkFC")

DEFAULT_VOICE_SETTINGS: dict[str, object] = {
    "stability": 0.35,
    "similarity_boost": 0.80,
    "style": 0.85,
    "use_speaker_boost": True,
}
"""Voice settings sent when the topic definition does not override them."""

# ---------------------------------------------------------------------------
# Output locations
# ---------------------------------------------------------------------------

AUDIO_DIR = os.getenv("NARRATION_AUDIO_DIR", "public/assets/audio")

# ---------------------------------------------------------------------------
# Timing checks
# ---------------------------------------------------------------------------

EARLY_HIGHLIGHT_S = 3.0
"""Highlights before this point land on the opening line of the narration."""

TIMER_MIN_S = 8.0
TIMER_MAX_S = 25.0

SCRIPT_MIN_WORDS = 150
SCRIPT_MAX_WORDS = 250


def load_api_key() -> str:
    """Load the ElevenLabs API key from the environment.

    WHY: The API key is required for every synthesis call. Loading it
    from the environment (via .env) keeps it out of source code.

    HOW: Reads ELEVENLABS_API_KEY from os.environ (populated by python-dotenv).

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("ELEVENLABS_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "ElevenLabs API key not configured. "
            "Add ELEVENLABS_API_KEY to the .env file in the project folder."
        )
    return key
