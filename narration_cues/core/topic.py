"""Topic definitions and their cue groups.

WHY: Each video topic is authored as one JSON file: the narration script,
the voice, the multiple-choice option markers, the answer reveal, the
vignette highlights, the teaching phases and the contextual meme. The
resolver knows nothing about these categories; it only sees named cue
specs. This module is the bridge.

HOW: load_topic() reads and schema-validates the JSON (jsonschema, with
the packaged topic.schema.json), parse_topic() builds a TopicDefinition,
and build_cue_groups() turns it into CueGroups with stable cue ids.

RULES:
- Cue ids: questionAnchor, option.<L>, answerReveal, vignette.<n>,
  phase.<n>.start, phase.<n>.item.<m>, meme (n, m zero-based)
- "question" group (ordered): the optional question anchor, the option
  markers (EXACT), then the answer reveal trigger. The anchor bounds the
  search for marker "A?", whose normalized form also matches the article "a"
- "vignette" group: independent highlights
- "teaching" group (ordered): each phase start, then that phase's items
- "meme" group: the contextual meme trigger, if any
- Trigger words default to CONTAINS_NORMALIZED; option markers to EXACT;
  a per-trigger "match" ("exact" | "contains") overrides either
- Missing "options" → markers "A?" to "E?"
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from narration_cues.core.ir import CueGroup, CueSpec, MatchMode
from narration_cues.schemas import load_schema

QUESTION_GROUP = "question"
VIGNETTE_GROUP = "vignette"
TEACHING_GROUP = "teaching"
MEME_GROUP = "meme"

QUESTION_ANCHOR_CUE = "questionAnchor"
ANSWER_REVEAL_CUE = "answerReveal"
MEME_CUE = "meme"

DEFAULT_OPTION_MARKERS: Dict[str, str] = {
    letter: "{}?".format(letter) for letter in "ABCDE"
}


class TopicDefinitionError(ValueError):
    """Raised when a topic definition file is unreadable or fails validation."""


@dataclass
class Trigger:
    """A trigger word with its match mode and search bound."""

    text: str
    mode: MatchMode = MatchMode.CONTAINS_NORMALIZED
    search_after: float = 0.0


@dataclass
class VignetteHighlight:
    phrase: str
    trigger: Trigger
    is_critical: bool = False


@dataclass
class PhaseItem:
    """One bullet or formula element shown during a teaching phase."""

    text: str
    trigger: Trigger


@dataclass
class TeachingPhase:
    title: str
    start: Trigger
    layout: str = "bullets"
    items: List[PhaseItem] = field(default_factory=list)

    @property
    def item_kind(self) -> str:
        """``"text"`` for pearl-card formula elements, else ``"bullet"``."""
        return "text" if self.layout == "pearl-card" else "bullet"


@dataclass
class VoiceConfig:
    voice_id: Optional[str] = None
    model_id: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


@dataclass
class TopicDefinition:
    """A validated per-topic input file.

    RULES:
    - options preserves authoring order (letter → spoken marker)
    - answer_reveal is the full answer phrase; answer_trigger the word
      that is actually matched (defaults to the phrase's first word)
    - question_trigger, when set, is a word spoken just before the options
    """

    topic: str
    script: str
    options: Dict[str, str]
    answer_reveal: str
    answer_trigger: Trigger
    question_trigger: Optional[Trigger] = None
    vignette_highlights: List[VignetteHighlight] = field(default_factory=list)
    teaching_phases: List[TeachingPhase] = field(default_factory=list)
    meme_trigger: Optional[Trigger] = None
    meme_id: Optional[str] = None
    voice: VoiceConfig = field(default_factory=VoiceConfig)


# ---------------------------------------------------------------------------
# Cue ids
# ---------------------------------------------------------------------------


def option_cue_id(letter: str) -> str:
    return "option.{}".format(letter)


def vignette_cue_id(index: int) -> str:
    return "vignette.{}".format(index)


def phase_start_cue_id(index: int) -> str:
    return "phase.{}.start".format(index)


def phase_item_cue_id(phase_index: int, item_index: int) -> str:
    return "phase.{}.item.{}".format(phase_index, item_index)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _mode(value: Optional[str], default: MatchMode) -> MatchMode:
    return MatchMode(value) if value else default


def _trigger(
    data: Dict[str, Any],
    key: str = "triggerWord",
    default_mode: MatchMode = MatchMode.CONTAINS_NORMALIZED,
) -> Trigger:
    return Trigger(
        text=data[key],
        mode=_mode(data.get("match"), default_mode),
        search_after=float(data.get("searchAfter", 0.0)),
    )


def parse_topic(data: Any) -> TopicDefinition:
    """Validate a decoded topic JSON document and build a TopicDefinition.

    Raises:
        TopicDefinitionError: when the document does not match
            topic.schema.json.
    """
    try:
        jsonschema.validate(instance=data, schema=load_schema("topic"))
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise TopicDefinitionError(
            "Invalid topic definition at {}: {}".format(location, e.message)
        ) from e

    moments = data["criticalMoments"]
    answer_reveal = moments["answerReveal"]
    answer_text = moments.get("answerRevealTrigger") or answer_reveal.split()[0]

    highlights = [
        VignetteHighlight(
            phrase=h["phrase"],
            trigger=_trigger(h),
            is_critical=bool(h.get("shouldShake", False)),
        )
        for h in data.get("vignetteHighlights", [])
    ]

    phases = []
    for p in data.get("teachingPhases", []):
        layout = p.get("layout", "bullets")
        raw_items = p.get("formula") if layout == "pearl-card" else p.get("bullets")
        phases.append(TeachingPhase(
            title=p["title"],
            start=_trigger(p, key="startTrigger"),
            layout=layout,
            items=[PhaseItem(text=i["text"], trigger=_trigger(i)) for i in raw_items or []],
        ))

    question_text = moments.get("questionTrigger")
    contextual = data.get("memes", {}).get("contextual")
    voice = data.get("voice", {})

    return TopicDefinition(
        topic=data["topic"],
        script=data["script"],
        options=dict(data.get("options") or DEFAULT_OPTION_MARKERS),
        answer_reveal=answer_reveal,
        answer_trigger=Trigger(
            text=answer_text,
            mode=_mode(moments.get("match"), MatchMode.CONTAINS_NORMALIZED),
        ),
        question_trigger=Trigger(text=question_text) if question_text else None,
        vignette_highlights=highlights,
        teaching_phases=phases,
        meme_trigger=_trigger(contextual) if contextual else None,
        meme_id=contextual.get("memeId") if contextual else None,
        voice=VoiceConfig(
            voice_id=voice.get("voiceId"),
            model_id=voice.get("modelId"),
            settings=voice.get("settings"),
        ),
    )


def load_topic(path: str | Path) -> TopicDefinition:
    """Read a topic definition JSON file from disk.

    RULES:
    - File must be UTF-8 JSON
    - Unreadable or invalid JSON raises TopicDefinitionError
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise TopicDefinitionError("Cannot read topic file {}: {}".format(path, e)) from e
    return parse_topic(data)


# ---------------------------------------------------------------------------
# Cue groups
# ---------------------------------------------------------------------------


def _spec(cue_id: str, trigger: Trigger) -> CueSpec:
    return CueSpec(
        id=cue_id,
        match_text=trigger.text,
        mode=trigger.mode,
        search_after=trigger.search_after,
    )


def build_cue_groups(topic: TopicDefinition) -> List[CueGroup]:
    """Turn a topic definition into the cue groups the resolver consumes.

    Returns:
        Groups in output order: question, vignette, teaching, meme.
    """
    question = CueGroup(name=QUESTION_GROUP, ordered=True)
    if topic.question_trigger is not None:
        question.cues.append(_spec(QUESTION_ANCHOR_CUE, topic.question_trigger))
    for letter, marker in topic.options.items():
        question.cues.append(CueSpec(
            id=option_cue_id(letter),
            match_text=marker,
            mode=MatchMode.EXACT,
        ))
    question.cues.append(_spec(ANSWER_REVEAL_CUE, topic.answer_trigger))

    vignette = CueGroup(name=VIGNETTE_GROUP, ordered=False, cues=[
        _spec(vignette_cue_id(i), h.trigger)
        for i, h in enumerate(topic.vignette_highlights)
    ])

    teaching = CueGroup(name=TEACHING_GROUP, ordered=True)
    for i, phase in enumerate(topic.teaching_phases):
        teaching.cues.append(_spec(phase_start_cue_id(i), phase.start))
        for j, item in enumerate(phase.items):
            teaching.cues.append(_spec(phase_item_cue_id(i, j), item.trigger))

    meme = CueGroup(name=MEME_GROUP, ordered=False)
    if topic.meme_trigger is not None:
        meme.cues.append(_spec(MEME_CUE, topic.meme_trigger))

    return [question, vignette, teaching, meme]
