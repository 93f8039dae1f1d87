"""Speech-synthesis response dataclasses.

WHY: The ElevenLabs "with-timestamps" endpoint returns base64 audio plus
two character alignments in one JSON object. A typed wrapper makes the
fields explicit and keeps base64 handling out of the CLI.

HOW: SpeechResult.from_dict() parses the raw response. Alignments are
kept as the provider's raw dicts; the segmenter validates them.

RULES:
- audio_base64 is always present
- alignment / normalized_alignment may be None
- best_alignment() prefers the raw alignment, which matches the script
  text the cues were written against
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from narration_cues.core.ir import CharTiming
from narration_cues.core.segmenter import AlignmentError, alignment_from_dict


@dataclass
class SpeechResult:
    """Parsed response of one text-to-speech call."""

    audio_base64: str
    alignment: Optional[Dict[str, Any]] = None
    normalized_alignment: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: dict) -> SpeechResult:
        """Parse a with-timestamps response body.

        Raises:
            ValueError: when the body is not an object or has no audio_base64
                string.
        """
        if not isinstance(data, dict) or not isinstance(data.get("audio_base64"), str):
            raise ValueError("Speech response has no audio_base64")
        return cls(
            audio_base64=data["audio_base64"],
            alignment=data.get("alignment"),
            normalized_alignment=data.get("normalized_alignment"),
        )

    @property
    def audio_bytes(self) -> bytes:
        return base64.b64decode(self.audio_base64)

    def best_alignment(self) -> List[CharTiming]:
        """Return the validated character alignment.

        Raises:
            AlignmentError: when the response carries no alignment or the
                alignment is malformed.
        """
        raw = self.alignment or self.normalized_alignment
        if not raw:
            raise AlignmentError("Speech response contains no character alignment")
        return alignment_from_dict(raw)
