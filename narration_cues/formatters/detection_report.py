"""Timestamp detection report: grouped cue timings for the video composition.

WHY: The composition component is authored per topic and reads cues by
meaning (the question timer, option reveals, highlight list, teaching
phases with their elements) rather than by cue id. It also needs the
unresolved list and check findings so a human can fix the script
before rendering.

HOW: Walks the TopicDefinition and looks up each cue in the Resolution
by the ids topic.py assigned. The question timer starts at the first
option marker.

RULES:
- Suffix: -timestamp-detection.json
- Requires both a Resolution and a TopicDefinition
- Unresolved timestamps are null
- Phase elements are "text" for pearl-card layouts, "bullet" otherwise
"""

from __future__ import annotations

import json
from typing import Any, Dict

from narration_cues.core.checks import question_start
from narration_cues.core.topic import (
    ANSWER_REVEAL_CUE,
    MEME_CUE,
    option_cue_id,
    phase_item_cue_id,
    phase_start_cue_id,
    vignette_cue_id,
)
from narration_cues.formatters.base import (
    BaseFormatter,
    FormatterInputError,
    FormatterOutput,
    TopicTiming,
)


class DetectionReportFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "Timestamp detection report"

    def build(self, timing: TopicTiming) -> Dict[str, Any]:
        resolution = timing.resolution
        topic = timing.definition
        if resolution is None or topic is None:
            raise FormatterInputError(
                "Detection report needs resolved cues and the topic definition"
            )

        phases = []
        for i, phase in enumerate(topic.teaching_phases):
            phases.append({
                "titleText": phase.title,
                "startTime": resolution.get(phase_start_cue_id(i)),
                "layout": phase.layout,
                "elements": [
                    {
                        "type": phase.item_kind,
                        "text": item.text,
                        "timestamp": resolution.get(phase_item_cue_id(i, j)),
                    }
                    for j, item in enumerate(phase.items)
                ],
            })

        return {
            "topic": timing.topic,
            "questionStartTimeRaw": question_start(topic, resolution),
            "answerRevealTimeRaw": resolution.get(ANSWER_REVEAL_CUE),
            "optionTimestamps": {
                letter: resolution.get(option_cue_id(letter)) for letter in topic.options
            },
            "vignetteHighlights": [
                {
                    "phrase": h.phrase,
                    "triggerWord": h.trigger.text,
                    "timestamp": resolution.get(vignette_cue_id(i)),
                    "isCritical": h.is_critical,
                }
                for i, h in enumerate(topic.vignette_highlights)
            ],
            "teachingPhases": phases,
            "memeId": topic.meme_id,
            "memeTimestamp": resolution.get(MEME_CUE),
            "rawDuration": timing.duration,
            "unresolved": resolution.unresolved,
            "issues": [
                {"severity": issue.severity, "message": issue.message}
                for issue in timing.issues
            ],
        }

    def format(self, timing: TopicTiming) -> list[FormatterOutput]:
        return [FormatterOutput(
            suffix="-timestamp-detection.json",
            content=json.dumps(self.build(timing), indent=2, ensure_ascii=False),
            media_type="application/json",
        )]
