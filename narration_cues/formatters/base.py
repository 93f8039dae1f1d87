"""Abstract base formatter, its input container, and output container.

WHY: The renderer, the persisted timing artifacts and the human review
report all derive from the same resolved timing but need different
files. This base class enforces a consistent interface so the CLI can
run any formatter generically.

HOW: TopicTiming bundles everything a formatter may need. BaseFormatter
is an ABC with a ``name`` property and a ``format()`` method.
FormatterOutput bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``format()`` returns a list of outputs (usually one)
- ``suffix`` starts with a hyphen, e.g. ``"-cues.json"``
- The caller prepends the topic name
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from narration_cues.core.checks import Issue
from narration_cues.core.ir import Resolution, Word
from narration_cues.core.topic import TopicDefinition


@dataclass
class TopicTiming:
    """All timing data produced for one topic.

    Attributes:
        topic: Topic name, used for output naming.
        words: The segmented word sequence.
        duration: Narration length in seconds (end of last word).
        resolution: Resolved cues, or None when only words exist yet.
        definition: The topic definition the cues came from, if any.
        issues: Check findings to carry into reports.
    """

    topic: str
    words: List[Word]
    duration: float
    resolution: Optional[Resolution] = None
    definition: Optional[TopicDefinition] = None
    issues: List[Issue] = field(default_factory=list)


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the topic name,
                e.g. ``"-cues.json"`` → ``"dka-potassium-cues.json"``.
        content: The file content as a string or bytes.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str | bytes
    media_type: str


class FormatterInputError(ValueError):
    """Raised when a formatter lacks the data it needs (e.g. no resolution)."""


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Cue map JSON'."""

    @abstractmethod
    def format(self, timing: TopicTiming) -> list[FormatterOutput]:
        """Convert the topic timing into one or more output files."""
