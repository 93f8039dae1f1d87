"""Speech-synthesis API client package.

WHY: The pipeline needs one text-to-speech call per topic: narration
audio plus character timing. This package encapsulates that HTTP
exchange behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response data is
parsed into the SpeechResult dataclass defined in models.py.

RULES:
- All HTTP calls go through ElevenLabsClient (no direct httpx usage elsewhere)
- Never retry a synthesis call
"""

from narration_cues.api.client import ElevenLabsClient, SpeechAPIError
from narration_cues.api.models import SpeechResult

__all__ = ["ElevenLabsClient", "SpeechAPIError", "SpeechResult"]
