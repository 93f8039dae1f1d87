"""Intermediate representation dataclasses for narration timing.

WHY: The provider returns per-character timing, the topic script names
trigger words, and the renderer wants a flat map of timestamps. Each stage
needs a well-typed, immutable form so segmentation, resolution and
formatting stay decoupled.

HOW: Dataclasses form a small hierarchy:
  CharTiming  : one character of the provider alignment
  Word        : a whitespace-delimited run of characters with timing
  CueSpec     : a named request to locate a timestamp
  CueGroup    : cue specs resolved together (ordered or independent)
  ResolvedCue : a cue id with its timestamp, or None when unresolved
  Resolution  : every ResolvedCue for a topic, grouping preserved

RULES:
- All times are float seconds
- Word.text is the literal script text: no case folding, punctuation kept
- ResolvedCue.timestamp is None for unresolved cues, never 0.0
- CharTiming, Word, CueSpec and ResolvedCue are frozen
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class MatchMode(str, Enum):
    """How a cue's match text is compared with each word."""

    EXACT = "exact"
    CONTAINS_NORMALIZED = "contains"


@dataclass(frozen=True)
class CharTiming:
    """A single character of the provider alignment."""

    char: str
    start: float
    end: float


@dataclass(frozen=True)
class Word:
    """A word assembled from consecutive non-whitespace characters.

    RULES:
    - text: non-empty, no whitespace, exactly as it appeared in the script
    - start: start time of the first character
    - end: end time of the last character
    """

    text: str
    start: float
    end: float


@dataclass(frozen=True)
class CueSpec:
    """A named semantic anchor in the script that must map to a timestamp.

    RULES:
    - id: unique within a topic; used as the key in persisted output
    - match_text: compared after normalization (see resolver.normalize_token)
    - search_after: words starting before this time are skipped
    """

    id: str
    match_text: str
    mode: MatchMode = MatchMode.EXACT
    search_after: float = 0.0


@dataclass
class CueGroup:
    """Cue specs resolved together.

    WHY: A linear narration mentions some cues in a fixed order (options
    A to E, then the reveal). Resolving those as an ordered group stops a
    common token used earlier in the prose from being matched instead of
    the intended later occurrence.

    RULES:
    - ordered=True: each cue searches after the last resolved timestamp
      in the group, so resolved timestamps are non-decreasing
    - ordered=False: each cue is resolved independently
    """

    name: str
    cues: List[CueSpec] = field(default_factory=list)
    ordered: bool = False


@dataclass(frozen=True)
class ResolvedCue:
    """A cue id paired with its timestamp, or None when unresolved."""

    id: str
    timestamp: Optional[float]

    @property
    def resolved(self) -> bool:
        return self.timestamp is not None


@dataclass
class Resolution:
    """Every resolved cue for a topic, with group names preserved.

    RULES:
    - groups maps group name → ResolvedCues in the group's cue order
    - as_map() keeps topic order, unresolved cues map to None
    """

    groups: Dict[str, List[ResolvedCue]] = field(default_factory=dict)

    @property
    def cues(self) -> List[ResolvedCue]:
        return [cue for group in self.groups.values() for cue in group]

    @property
    def unresolved(self) -> List[str]:
        return [cue.id for cue in self.cues if not cue.resolved]

    def get(self, cue_id: str) -> Optional[float]:
        """Return the timestamp for cue_id (None if unresolved or unknown)."""
        for cue in self.cues:
            if cue.id == cue_id:
                return cue.timestamp
        return None

    def as_map(self) -> Dict[str, Optional[float]]:
        return {cue.id: cue.timestamp for cue in self.cues}
