"""Narration cue timing: word timing and cue resolution for narrated shorts.

WHY: Each medical-education short is driven by one narration track. Captions,
meme cutaways, vignette highlights and teaching bullets all have to fire on
the exact spoken word. The text-to-speech provider only gives per-character
timing, and the topic script only names trigger words, so something has to
turn both into a flat map of timestamps the renderer can trust.

HOW: Three-stage pipeline: synthesize (API client), segment + resolve
(core), write (pluggable formatters). Each stage is independently testable.

RULES:
- The core (segmenter, resolver) is pure: no I/O, no retries, no guessing
- An unresolved cue is reported as None, never defaulted to 0.0
- All formatters consume the same TopicTiming container
"""

__version__ = "0.1.0"
