"""Async HTTP client for the ElevenLabs text-to-speech API.

WHY: Every topic's narration comes from one text-to-speech call that
returns both the audio and the per-character timing. This module hides
the HTTP details behind a single client class so the CLI and tests do
not deal with headers, URLs or status codes.

HOW: Uses httpx.AsyncClient. The ElevenLabsClient is an async context
manager: enter it to get an authenticated client, exit to close the
connection pool. synthesize() posts the script to the
/text-to-speech/{voice_id}/with-timestamps endpoint and parses the
response into a SpeechResult.

RULES:
- Always use the async context manager (async with ElevenLabsClient() as client:)
- One request per synthesize() call, never retried (each call is billed
  and produces a different take)
- Authentication is the xi-api-key header from config
- Any status other than 200 raises SpeechAPIError; a 200 body without
  audio raises ValueError
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Dict, Optional

import httpx

from narration_cues.api.models import SpeechResult
from narration_cues.config import (
    DEFAULT_VOICE_ID,
    DEFAULT_VOICE_SETTINGS,
    ELEVENLABS_BASE_URL,
    ELEVENLABS_MODEL,
    load_api_key,
)

logger = logging.getLogger(__name__)


class SpeechAPIError(Exception):
    """Raised when the text-to-speech API returns an error response.

    RULES:
    - Always include status_code and message
    - message is the response body text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"ElevenLabs API error {status_code}: {message}")


class ElevenLabsClient:
    """Async client for the ElevenLabs text-to-speech API.

    RULES:
    - Use as: async with ElevenLabsClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url and model default to config values
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or ELEVENLABS_BASE_URL).rstrip("/")
        self._model = model or ELEVENLABS_MODEL
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ElevenLabsClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "xi-api-key": self._api_key,
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(300.0, connect=30.0),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "ElevenLabsClient must be used as an async context manager: "
                "async with ElevenLabsClient() as client: ..."
            )
        return self._client

    async def synthesize(
        self,
        text: str,
        voice_id: str | None = None,
        model_id: str | None = None,
        voice_settings: Optional[Dict[str, Any]] = None,
        on_status: Callable[[str], None] | None = None,
    ) -> SpeechResult:
        """Synthesize narration audio with character-level timestamps.

        Args:
            text: The narration script.
            voice_id: Voice to use (defaults to config DEFAULT_VOICE_ID).
            model_id: Model to use (defaults to the client's model).
            voice_settings: Provider voice settings (defaults to
                            DEFAULT_VOICE_SETTINGS).
            on_status: Optional callback for status updates.

        Returns:
            SpeechResult with base64 audio and the character alignments.

        Raises:
            ValueError: if text is empty.
            SpeechAPIError: on non-2xx responses.
        """
        if not text.strip():
            raise ValueError("Cannot synthesize an empty script")

        client = self._ensure_client()
        voice = voice_id or DEFAULT_VOICE_ID
        if on_status:
            on_status("Synthesizing {} characters with voice {}...".format(len(text), voice))

        body: dict = {
            "text": text,
            "model_id": model_id or self._model,
            "voice_settings": voice_settings or dict(DEFAULT_VOICE_SETTINGS),
        }

        logger.debug("POST /text-to-speech/%s/with-timestamps (model %s)", voice, body["model_id"])
        resp = await client.post(f"/text-to-speech/{voice}/with-timestamps", json=body)

        if resp.status_code != 200:
            raise SpeechAPIError(resp.status_code, resp.text)

        result = SpeechResult.from_dict(resp.json())
        if on_status:
            on_status("  Received {} bytes of audio".format(len(result.audio_bytes)))
        return result
