"""Cue map formatter: flat cue id → timestamp document.

WHY: The renderer addresses cues by name (``option.B``, ``vignette.2``,
``phase.0.item.1``). A flat map keeps that lookup trivial and makes an
unresolved cue visible as an explicit null.

RULES:
- Suffix: -cues.json
- Keys in topic order (question, vignette, teaching, meme)
- Unresolved cues are null, never 0
"""

from __future__ import annotations

import json

from narration_cues.formatters.base import (
    BaseFormatter,
    FormatterInputError,
    FormatterOutput,
    TopicTiming,
)


class CueMapFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "Cue map JSON"

    def format(self, timing: TopicTiming) -> list[FormatterOutput]:
        if timing.resolution is None:
            raise FormatterInputError("Cue map needs resolved cues")
        return [FormatterOutput(
            suffix="-cues.json",
            content=json.dumps(timing.resolution.as_map(), indent=2),
            media_type="application/json",
        )]
