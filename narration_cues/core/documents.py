"""Reading the persisted timing artifacts.

WHY: The words document is the canonical timing artifact for a topic.
It is written once after synthesis and read back by later runs (cue
resolution, re-renders). Older artifacts name the text field "word",
newer ones "text", and saved provider responses carry the alignment in
one of two places. Readers accept all of these so every topic can be
re-run with the same code.

HOW: load_words_document() reads {topic, duration, words} and returns a
WordsDocument. alignment_from_response() picks the alignment out of a
saved provider response (or accepts a bare alignment object).

RULES:
- Word records accept "word" or "text" for the text field
- Missing duration → end of last word
- Word records are validated: non-empty text without whitespace,
  0 <= start <= end, non-decreasing start; violations raise DocumentError
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

from narration_cues.core.ir import CharTiming, Word
from narration_cues.core.segmenter import alignment_from_dict, words_duration


class DocumentError(ValueError):
    """Raised when a persisted timing artifact is unreadable or malformed."""


@dataclass
class WordsDocument:
    topic: str
    duration: float
    words: List[Word]


def words_from_records(records: Any) -> List[Word]:
    """Build Words from ``{word|text, start, end}`` records."""
    if not isinstance(records, list):
        raise DocumentError("'words' must be a list")

    words: List[Word] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise DocumentError("Word record {} is not an object".format(index))
        text = record.get("word", record.get("text"))
        if not isinstance(text, str) or not text or any(c.isspace() for c in text):
            raise DocumentError(
                "Word record {} has invalid text {!r}".format(index, text)
            )
        try:
            start = float(record["start"])
            end = float(record["end"])
        except (KeyError, TypeError, ValueError):
            raise DocumentError(
                "Word record {} ({!r}) needs numeric start and end".format(index, text)
            ) from None
        if start < 0:
            raise DocumentError(
                "Word record {} ({!r}) starts at a negative time".format(index, text)
            )
        if end < start:
            raise DocumentError(
                "Word record {} ({!r}) ends before it starts".format(index, text)
            )
        if words and start < words[-1].start:
            raise DocumentError(
                "Word record {} ({!r}) starts before the previous word".format(index, text)
            )
        words.append(Word(text=text, start=start, end=end))
    return words


def parse_words_document(data: Any, default_topic: str = "") -> WordsDocument:
    if not isinstance(data, dict) or "words" not in data:
        raise DocumentError("Words document must be an object with a 'words' list")
    words = words_from_records(data["words"])
    duration = data.get("duration")
    return WordsDocument(
        topic=data.get("topic") or default_topic,
        duration=float(duration) if duration is not None else words_duration(words),
        words=words,
    )


def load_words_document(path: str | Path) -> WordsDocument:
    """Read a ``{topic}-timestamps.json`` words document.

    The file stem (minus a trailing ``-timestamps``) stands in for the
    topic when the document has none.
    """
    path = Path(path)
    data = _read_json(path)
    stem = path.stem
    if stem.endswith("-timestamps"):
        stem = stem[: -len("-timestamps")]
    return parse_words_document(data, default_topic=stem)


def alignment_from_response(data: Any) -> List[CharTiming]:
    """Extract the character alignment from a saved provider response.

    RULES:
    - Prefers "alignment" (it matches the authored script text), falls
      back to "normalized_alignment"
    - A bare alignment (parallel arrays or record list) is accepted as-is
    """
    if isinstance(data, dict):
        for key in ("alignment", "normalized_alignment"):
            if data.get(key):
                return alignment_from_dict(data[key])
    return alignment_from_dict(data)


def load_alignment(path: str | Path) -> List[CharTiming]:
    """Read a saved provider response or alignment JSON file."""
    return alignment_from_response(_read_json(Path(path)))


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise DocumentError("Cannot read {}: {}".format(path, e)) from e
