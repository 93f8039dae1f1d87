"""Cue resolution: map named script cues onto word timestamps.

WHY: Every visual effect in a video (option markers, answer reveal,
vignette highlights, teaching bullets, the meme cutaway) is triggered by
a word in the narration. A wrong match does not crash anything, it just
fires a meme two seconds early, so the matching rules must be explicit,
deterministic and visible when they fail.

HOW: Both the cue's match text and every candidate word are normalized
(lower-case, ASCII letters and digits only). Words starting before the
cue's search bound are skipped; the first word that equals (EXACT) or
contains (CONTAINS_NORMALIZED) the normalized match text wins, and its
start time is the cue's timestamp. Ordered groups carry the last
resolved timestamp forward as the next cue's search bound.

RULES:
- Empty or punctuation-only match text is a CueConfigError, raised
  before any scanning
- Duplicate cue ids across the groups of one topic are a CueConfigError
- No match → timestamp None (unresolved), never 0.0 or a neighbour's time
- A search bound past the last word simply leaves the cue unresolved
- The search bound is inclusive: a word starting exactly at it is eligible
- Inputs are never mutated; no I/O, no retries
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from narration_cues.core.ir import (
    CueGroup,
    CueSpec,
    MatchMode,
    Resolution,
    ResolvedCue,
    Word,
)

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


class CueConfigError(ValueError):
    """Raised when a cue spec cannot be matched against anything.

    WHY: An empty match text would match the first word of every
    narration (or nothing, depending on mode). Either way the cue lands
    somewhere arbitrary, so it is rejected up front.

    RULES:
    - Raised before scanning; no partial Resolution is returned
    - Message names the cue id
    """


def normalize_token(text: str) -> str:
    """Lower-case text and drop everything but ASCII letters and digits.

    >>> normalize_token("FROTHY,")
    'frothy'
    >>> normalize_token("B?")
    'b'
    """
    return _NON_ALNUM_RE.sub("", text.lower())


def _validate_spec(spec: CueSpec) -> str:
    """Return the normalized match text, raising CueConfigError if unusable."""
    if not spec.match_text or not spec.match_text.strip():
        raise CueConfigError("Cue '{}' has an empty match text".format(spec.id))
    target = normalize_token(spec.match_text)
    if not target:
        raise CueConfigError(
            "Cue '{}' match text {!r} has no letters or digits to match".format(
                spec.id, spec.match_text
            )
        )
    return target


def _matches(candidate: str, target: str, mode: MatchMode) -> bool:
    if mode is MatchMode.EXACT:
        return candidate == target
    return target in candidate


def find_word_start(
    words: Sequence[Word],
    match_text: str,
    mode: MatchMode = MatchMode.EXACT,
    search_after: float = 0.0,
) -> Optional[float]:
    """Return the start of the first word matching match_text, or None.

    Args:
        words: Word sequence in spoken order.
        match_text: Text to look for; normalized before comparison.
        mode: EXACT (normalized equality) or CONTAINS_NORMALIZED
              (normalized substring).
        search_after: Words starting before this time are skipped.

    Returns:
        The matched word's start time, or None when nothing matches.
    """
    spec = CueSpec(id=match_text, match_text=match_text, mode=mode, search_after=search_after)
    return resolve_cue(words, spec).timestamp


def resolve_cue(
    words: Sequence[Word],
    spec: CueSpec,
    search_after: Optional[float] = None,
) -> ResolvedCue:
    """Resolve a single cue spec against the word sequence.

    HOW: The effective bound is the later of the spec's own search_after
    and the search_after argument (used by ordered groups).

    RULES:
    - Raises CueConfigError for empty / punctuation-only match text
    - Returns ResolvedCue(id, None) when nothing matches
    """
    target = _validate_spec(spec)
    bound = spec.search_after
    if search_after is not None and search_after > bound:
        bound = search_after

    for word in words:
        if word.start < bound:
            continue
        if _matches(normalize_token(word.text), target, spec.mode):
            logger.debug(
                "Cue %s matched %r at %.3fs (search after %.3fs)",
                spec.id, word.text, word.start, bound,
            )
            return ResolvedCue(id=spec.id, timestamp=word.start)

    logger.debug(
        "Cue %s (%r, %s) unresolved after %.3fs",
        spec.id, spec.match_text, spec.mode.value, bound,
    )
    return ResolvedCue(id=spec.id, timestamp=None)


def resolve_group(words: Sequence[Word], group: CueGroup) -> List[ResolvedCue]:
    """Resolve every cue in a group, honouring the group's ordering.

    WHY: Options A to E are read in order. Without carrying the previous
    match forward, "A" in unrelated prose earlier in the script would be
    picked instead of the option marker.

    HOW: For ordered groups the last resolved timestamp becomes the
    minimum search bound for the next cue. An unresolved cue does not
    reset the bound; the next cue still searches after the last cue that
    did resolve.

    RULES:
    - All specs are validated before any is resolved
    - Ordered groups: resolved timestamps are non-decreasing in cue order
    - Unordered groups: each cue only uses its own search_after
    """
    for spec in group.cues:
        _validate_spec(spec)

    resolved: List[ResolvedCue] = []
    floor: Optional[float] = None
    for spec in group.cues:
        cue = resolve_cue(words, spec, search_after=floor if group.ordered else None)
        if group.ordered and cue.timestamp is not None:
            floor = cue.timestamp
        resolved.append(cue)
    return resolved


def resolve_cues(words: Sequence[Word], groups: Sequence[CueGroup]) -> Resolution:
    """Resolve all cue groups for a topic.

    Args:
        words: The topic's word sequence.
        groups: Cue groups in the order they should appear in output.

    Returns:
        A Resolution with one entry per group, in input order.

    Raises:
        CueConfigError: on an invalid spec, a duplicate cue id, or a
            duplicate group name.
    """
    seen_ids = set()
    seen_groups = set()
    for group in groups:
        if group.name in seen_groups:
            raise CueConfigError("Duplicate cue group '{}'".format(group.name))
        seen_groups.add(group.name)
        for spec in group.cues:
            if spec.id in seen_ids:
                raise CueConfigError("Duplicate cue id '{}'".format(spec.id))
            seen_ids.add(spec.id)
            _validate_spec(spec)

    resolution = Resolution()
    for group in groups:
        resolution.groups[group.name] = resolve_group(words, group)

    unresolved = resolution.unresolved
    if unresolved:
        logger.info("%d of %d cue(s) unresolved: %s",
                    len(unresolved), len(seen_ids), ", ".join(unresolved))
    return resolution
