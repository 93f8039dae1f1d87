"""Output formatter registry.

WHY: The CLI needs a single lookup to find the right formatter by name.
A central dict makes it trivial to add new formats: create the
formatter class, import it here, add one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["cue_map"]()``.

RULES:
- Keys are snake_case identifiers (used in the --formats CLI flag)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from narration_cues.formatters.cue_map import CueMapFormatter
from narration_cues.formatters.detection_report import DetectionReportFormatter
from narration_cues.formatters.word_timestamps import WordTimestampsFormatter

if TYPE_CHECKING:
    from narration_cues.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "timestamps": WordTimestampsFormatter,
    "cue_map": CueMapFormatter,
    "detection": DetectionReportFormatter,
}
