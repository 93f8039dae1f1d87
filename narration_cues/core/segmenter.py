"""Character alignment → word segmentation.

WHY: The speech-synthesis provider returns timing per character, as three
parallel arrays (characters, start times, end times). Captions, lip-sync
and cue resolution all work on words. Every topic needs the same
conversion, so it lives here once.

HOW: alignment_from_arrays() / alignment_from_dict() validate the provider
payload and zip it into CharTiming records. segment_words() walks the
records and accumulates runs of non-whitespace characters, flushing a Word
at every whitespace character and once more at the end of the alignment.

RULES:
- Whitespace (str.isspace) separates words; consecutive whitespace yields
  no empty words
- Word.start = first character's start, Word.end = last character's end
- A trailing non-whitespace character is kept in the final word
- Text is preserved exactly (case and punctuation untouched)
- Array length mismatch, a negative start, end < start, or a decreasing
  start is fatal (AlignmentError); an empty alignment yields no words
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from narration_cues.core.ir import CharTiming, Word

# Provider keys for the parallel-array alignment shape
_CHARS_KEY = "characters"
_STARTS_KEY = "character_start_times_seconds"
_ENDS_KEY = "character_end_times_seconds"


class AlignmentError(ValueError):
    """Raised when a character alignment is malformed.

    WHY: A length mismatch between the character list and a timing array
    shifts every timestamp after the first gap. Carrying on would produce
    captions that drift out of sync with no visible error.

    RULES:
    - Raised before any word is produced
    - Message names the offending field or record index
    """


def alignment_from_arrays(
    characters: Sequence[str],
    starts: Sequence[float],
    ends: Sequence[float],
) -> List[CharTiming]:
    """Zip the provider's parallel arrays into CharTiming records.

    RULES:
    - All three arrays must have the same length
    - Starts must be >= 0 and each record must satisfy end >= start
    - Starts must be non-decreasing across the sequence
    """
    if len(starts) != len(characters):
        raise AlignmentError(
            "Alignment has {} characters but {} start times".format(
                len(characters), len(starts)
            )
        )
    if len(ends) != len(characters):
        raise AlignmentError(
            "Alignment has {} characters but {} end times".format(
                len(characters), len(ends)
            )
        )

    alignment: List[CharTiming] = []
    previous_start: Optional[float] = None
    for index, (char, start, end) in enumerate(zip(characters, starts, ends)):
        if not isinstance(char, str):
            raise AlignmentError("Character {} is not a string: {!r}".format(index, char))
        try:
            start = float(start)
            end = float(end)
        except (TypeError, ValueError):
            raise AlignmentError(
                "Character {} ({!r}) has non-numeric timing".format(index, char)
            ) from None
        if start < 0:
            raise AlignmentError(
                "Character {} ({!r}) starts at a negative time {}s".format(index, char, start)
            )
        if end < start:
            raise AlignmentError(
                "Character {} ({!r}) ends at {}s before it starts at {}s".format(
                    index, char, end, start
                )
            )
        if previous_start is not None and start < previous_start:
            raise AlignmentError(
                "Character {} ({!r}) starts at {}s, before the previous "
                "character at {}s".format(index, char, start, previous_start)
            )
        previous_start = start
        alignment.append(CharTiming(char=char, start=start, end=end))

    return alignment


def alignment_from_dict(data: Any) -> List[CharTiming]:
    """Parse an alignment from either supported JSON shape.

    WHY: The provider returns parallel arrays, while hand-fixed or older
    saved artifacts use a list of ``{character, startTime, endTime}``
    records. Both feed the same segmenter.

    HOW: A dict with a ``characters`` key is treated as parallel arrays;
    a list is treated as records.

    RULES:
    - Parallel arrays: characters, character_start_times_seconds,
      character_end_times_seconds (all required)
    - Records: character / startTime / endTime (all required)
    - Anything else raises AlignmentError
    """
    if isinstance(data, dict):
        missing = [k for k in (_CHARS_KEY, _STARTS_KEY, _ENDS_KEY) if k not in data]
        if missing:
            raise AlignmentError(
                "Alignment is missing field(s): {}".format(", ".join(missing))
            )
        return alignment_from_arrays(data[_CHARS_KEY], data[_STARTS_KEY], data[_ENDS_KEY])

    if isinstance(data, list):
        characters: List[str] = []
        starts: List[float] = []
        ends: List[float] = []
        for index, record in enumerate(data):
            try:
                characters.append(record["character"])
                starts.append(record["startTime"])
                ends.append(record["endTime"])
            except (KeyError, TypeError):
                raise AlignmentError(
                    "Alignment record {} is not a "
                    "{{character, startTime, endTime}} object".format(index)
                ) from None
        return alignment_from_arrays(characters, starts, ends)

    raise AlignmentError(
        "Unsupported alignment shape: {}".format(type(data).__name__)
    )


def segment_words(alignment: Sequence[CharTiming]) -> List[Word]:
    """Split a character alignment into timed words.

    Args:
        alignment: CharTiming records in spoken order.

    Returns:
        Words in input order. Empty when the alignment is empty or
        contains only whitespace.
    """
    words: List[Word] = []

    # Accumulator for the word being built
    current_chars: List[str] = []
    current_start = 0.0
    current_end = 0.0

    def _flush_current() -> None:
        """Emit the current accumulated word, if any."""
        text = "".join(current_chars)
        if text:
            words.append(Word(text=text, start=current_start, end=current_end))
        current_chars.clear()

    for timing in alignment:
        if timing.char.isspace():
            _flush_current()
            continue

        if not current_chars:
            current_start = timing.start
        current_chars.append(timing.char)
        current_end = timing.end

    # The last character closes the final word even without trailing whitespace
    _flush_current()

    return words


def words_duration(words: Sequence[Word]) -> float:
    """Total narration length: the end of the last word (0.0 if none)."""
    return words[-1].end if words else 0.0
