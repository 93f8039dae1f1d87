"""Words document formatter: the canonical per-topic timing artifact.

WHY: The renderer draws captions and drives mouth movement from the word
list, and later resolution runs read it back instead of paying for a new
synthesis call. It must stay schema-valid and keep the literal script
text of every word.

HOW: Serializes {topic, duration, words[]} with the configured text key
and validates the result against the packaged timestamps.schema.json
(jsonschema) before returning it.

RULES:
- Suffix: -timestamps.json
- text_key is "word" (default) or "text"
- Times are written unrounded, as produced by the provider
"""

from __future__ import annotations

import json

import jsonschema

from narration_cues.formatters.base import BaseFormatter, FormatterOutput, TopicTiming
from narration_cues.schemas import load_schema

_TEXT_KEYS = ("word", "text")


class WordTimestampsFormatter(BaseFormatter):
    """Writes the ``{topic, duration, words}`` document."""

    def __init__(self, text_key: str = "word") -> None:
        if text_key not in _TEXT_KEYS:
            raise ValueError("text_key must be one of {}".format(", ".join(_TEXT_KEYS)))
        self._text_key = text_key

    @property
    def name(self) -> str:
        return "Word timestamps JSON"

    def build(self, timing: TopicTiming) -> dict:
        data = {
            "topic": timing.topic,
            "duration": timing.duration,
            "words": [
                {self._text_key: w.text, "start": w.start, "end": w.end}
                for w in timing.words
            ],
        }
        jsonschema.validate(instance=data, schema=load_schema("timestamps"))
        return data

    def format(self, timing: TopicTiming) -> list[FormatterOutput]:
        return [FormatterOutput(
            suffix="-timestamps.json",
            content=json.dumps(self.build(timing), indent=2, ensure_ascii=False),
            media_type="application/json",
        )]
