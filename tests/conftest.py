"""Shared test fixtures for the narration_cues test suite.

WHY: Segmenter, resolver, topic, formatter and CLI tests all need the
same realistic inputs: a provider alignment for a known script and a
topic definition whose triggers appear in that script. Centralizing them
keeps the expected timings consistent across modules.

HOW: build_alignment() turns (text, start, end) word triples into the
provider's parallel-array alignment, with a space character filling each
gap. NEPHROTIC_SCRIPT is an excerpt of a real narration; the fixtures
time it at one word every 0.4 seconds.

RULES:
- Alignments produced here always satisfy the provider invariants
  (non-decreasing starts, end >= start per character)
- Word i of NEPHROTIC_SCRIPT starts at 0.2 + 0.4 * i
"""

from typing import Any, Dict, List, Sequence, Tuple

import pytest

from narration_cues.core.segmenter import alignment_from_dict, segment_words


NEPHROTIC_SCRIPT = (
    "Face puffed up like a BALLOON, ankles swollen somethin' FIERCE. "
    "Mother says his pee's been FROTHY as a root beer float. "
    "Protein spillin' out, four grams a day. Albumin's TANKED at one point eight. "
    "So what's causin' this? A? Post-strep glomerulonephritis, B? Minimal change disease, "
    "C? IgA nephropathy, D? Hemolytic uremic syndrome, or E? Acute tubular necrosis. "
    "Think on it. Well I'll be HORNSWOGGLED, it's B. Minimal change disease. "
    "Most of you probably picked A thinkin' strep. "
    "Nephrotic syndrome's got four things - massive proteinuria, hypoalbuminemia, "
    "EDEMA, and hyperlipidemia. In youngsters, it's minimal change. "
    "Give 'em steroids, they get better."
)

WORD_SPACING_S = 0.4
FIRST_WORD_S = 0.2


def build_alignment(timed_words: Sequence[Tuple[str, float, float]]) -> Dict[str, List[Any]]:
    """Build a parallel-array alignment from (text, start, end) word triples.

    Characters inside a word split the word's span evenly. A single space
    character spans the gap between consecutive words.
    """
    chars: List[str] = []
    starts: List[float] = []
    ends: List[float] = []
    for i, (text, start, end) in enumerate(timed_words):
        if i:
            chars.append(" ")
            starts.append(ends[-1])
            ends.append(start)
        step = (end - start) / len(text)
        for k, char in enumerate(text):
            chars.append(char)
            starts.append(start + k * step)
            ends.append(start + (k + 1) * step)
    return {
        "characters": chars,
        "character_start_times_seconds": starts,
        "character_end_times_seconds": ends,
    }


def evenly_timed(text: str) -> List[Tuple[str, float, float]]:
    """Time every word of text at FIRST_WORD_S + WORD_SPACING_S * i, lasting 0.3s."""
    return [
        (word, FIRST_WORD_S + WORD_SPACING_S * i, FIRST_WORD_S + WORD_SPACING_S * i + 0.3)
        for i, word in enumerate(text.split())
    ]


@pytest.fixture
def nephrotic_alignment():
    """Provider-shaped alignment for NEPHROTIC_SCRIPT."""
    return build_alignment(evenly_timed(NEPHROTIC_SCRIPT))


@pytest.fixture
def nephrotic_words(nephrotic_alignment):
    """Segmented words for NEPHROTIC_SCRIPT."""
    return segment_words(alignment_from_dict(nephrotic_alignment))


@pytest.fixture
def nephrotic_topic_data():
    """A topic definition document whose triggers all appear in NEPHROTIC_SCRIPT."""
    return {
        "topic": "nephrotic-syndrome-minimal-change",
        "script": NEPHROTIC_SCRIPT,
        "voice": {"voiceId": "test-voice", "settings": {"stability": 0.5}},
        "criticalMoments": {
            "answerReveal": "Minimal change disease",
            "answerRevealTrigger": "HORNSWOGGLED",
            "questionTrigger": "causin'",
        },
        "vignetteHighlights": [
            {"phrase": "Face puffed up", "triggerWord": "BALLOON", "shouldShake": False},
            {"phrase": "frothy", "triggerWord": "FROTHY", "shouldShake": False},
            {"phrase": "4+ g/day", "triggerWord": "four", "shouldShake": True},
            {"phrase": "1.8 g/dL", "triggerWord": "one", "shouldShake": True, "match": "exact"},
        ],
        "teachingPhases": [
            {
                "title": "Nephrotic Tetrad",
                "startTrigger": "proteinuria",
                "layout": "pearl-card",
                "formula": [
                    {"text": "Proteinuria", "triggerWord": "proteinuria"},
                    {"text": "Edema", "triggerWord": "EDEMA"},
                ],
            },
            {
                "title": "Kids = Minimal Change",
                "startTrigger": "youngsters",
                "layout": "split-view",
                "bullets": [
                    {"text": "Steroids work", "triggerWord": "steroids"},
                ],
            },
        ],
        "memes": {
            "answerReveal": "hornswoggled.gif",
            "contextual": {"memeId": "beer-foam.gif", "triggerWord": "FROTHY"},
        },
    }


def word_start(words, text: str, occurrence: int = 0) -> float:
    """Start time of the n-th word whose literal text equals text."""
    matches = [w.start for w in words if w.text == text]
    return matches[occurrence]
