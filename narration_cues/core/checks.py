"""Sanity checks on topic inputs and resolved timings.

WHY: Some mistakes only show up once the video is rendered: a trigger
word that never appears in the script, a countdown timer that starts
while vignette highlights are still popping, a highlight that fires
during the opening line. These checks surface them as a list of issues
before anyone renders anything.

HOW: check_topic_input() lints the topic definition against its own
script text. check_timing() inspects a Resolution. Both return Issue
lists; neither raises for findings, so the caller decides what is fatal.

RULES:
- Severity "error": the video will be visibly wrong
- Severity "warning": likely a mistake, worth a human look
- Unresolved cues are skipped here; the resolver already reports them
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from narration_cues.config import (
    EARLY_HIGHLIGHT_S,
    SCRIPT_MAX_WORDS,
    SCRIPT_MIN_WORDS,
    TIMER_MAX_S,
    TIMER_MIN_S,
)
from narration_cues.core.ir import Resolution
from narration_cues.core.topic import (
    ANSWER_REVEAL_CUE,
    TopicDefinition,
    option_cue_id,
    vignette_cue_id,
)

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class Issue:
    severity: str
    message: str


def has_errors(issues: List[Issue]) -> bool:
    return any(issue.severity == ERROR for issue in issues)


def check_topic_input(topic: TopicDefinition) -> List[Issue]:
    """Lint a topic definition before any audio is generated.

    RULES:
    - Every trigger (vignette, phase start, phase item, question, answer
      reveal, meme), every option marker and the answer reveal phrase must
      appear in the script, case-insensitive
    - Script word count outside SCRIPT_MIN_WORDS..SCRIPT_MAX_WORDS warns
    """
    issues: List[Issue] = []
    script = topic.script.lower()

    def _require(text: str, label: str) -> None:
        if text.lower() not in script:
            issues.append(Issue(ERROR, "{} {!r} not found in script".format(label, text)))

    for i, highlight in enumerate(topic.vignette_highlights):
        _require(highlight.trigger.text, "Vignette highlight #{} trigger".format(i + 1))

    for i, phase in enumerate(topic.teaching_phases):
        _require(phase.start.text, "Teaching phase #{} start trigger".format(i + 1))
        for j, item in enumerate(phase.items):
            _require(item.trigger.text, "Teaching phase #{} item #{} trigger".format(i + 1, j + 1))

    if topic.question_trigger is not None:
        _require(topic.question_trigger.text, "Question trigger")

    _require(topic.answer_reveal, "Answer reveal")
    _require(topic.answer_trigger.text, "Answer reveal trigger")

    for letter, marker in topic.options.items():
        _require(marker, "Option {} marker".format(letter))

    if topic.meme_trigger is not None:
        _require(topic.meme_trigger.text, "Meme trigger")

    word_count = len(topic.script.split())
    if word_count < SCRIPT_MIN_WORDS or word_count > SCRIPT_MAX_WORDS:
        issues.append(Issue(
            WARNING,
            "Script length {} words (recommended: {}-{})".format(
                word_count, SCRIPT_MIN_WORDS, SCRIPT_MAX_WORDS
            ),
        ))

    return issues


def question_start(topic: TopicDefinition, resolution: Resolution) -> Optional[float]:
    """The countdown timer starts at the first option marker."""
    if not topic.options:
        return None
    first_letter = next(iter(topic.options))
    return resolution.get(option_cue_id(first_letter))


def check_timing(topic: TopicDefinition, resolution: Resolution) -> List[Issue]:
    """Check resolved timestamps against the video's pacing rules.

    RULES:
    - The question timer must start after the latest vignette highlight
    - Highlights before EARLY_HIGHLIGHT_S warn (they land on the opener)
    - Answer reveal minus question start outside TIMER_MIN_S..TIMER_MAX_S
      warns
    """
    issues: List[Issue] = []

    highlight_times = []
    for i, highlight in enumerate(topic.vignette_highlights):
        ts = resolution.get(vignette_cue_id(i))
        if ts is None:
            continue
        highlight_times.append(ts)
        if ts < EARLY_HIGHLIGHT_S:
            issues.append(Issue(
                WARNING,
                "Vignette highlight #{} ({!r}) at {:.2f}s is in the first {:.0f} seconds".format(
                    i + 1, highlight.phrase, ts, EARLY_HIGHLIGHT_S
                ),
            ))

    start = question_start(topic, resolution)
    if start is not None and highlight_times:
        latest = max(highlight_times)
        if start <= latest:
            issues.append(Issue(
                ERROR,
                "Timer starts at {:.2f}s but the latest vignette highlight is at {:.2f}s".format(
                    start, latest
                ),
            ))

    reveal = resolution.get(ANSWER_REVEAL_CUE)
    if start is not None and reveal is not None:
        duration = reveal - start
        if duration < TIMER_MIN_S:
            issues.append(Issue(
                WARNING,
                "Timer duration {:.1f}s is short (expected {:.0f}-{:.0f}s)".format(
                    duration, TIMER_MIN_S, TIMER_MAX_S
                ),
            ))
        elif duration > TIMER_MAX_S:
            issues.append(Issue(
                WARNING,
                "Timer duration {:.1f}s is long (expected {:.0f}-{:.0f}s)".format(
                    duration, TIMER_MIN_S, TIMER_MAX_S
                ),
            ))

    return issues
