"""Command-line interface for the narration cue pipeline.

WHY: A topic goes through the same steps every time: lint the topic
definition, synthesize the narration once, turn the alignment into
words, resolve the script's cues, and write the files the video
composition reads. The CLI wires those steps behind four subcommands so
nobody has to copy a one-off script per topic again.

HOW: argparse subcommands (synthesize, segment, resolve, check). The
synthesis step runs the async client via asyncio.run(). Status messages
go to stderr; output files are saved to --output-dir (default: the
configured audio directory) as {topic}{suffix}.

RULES:
- Input malformation (bad alignment, bad cue config, invalid topic file)
  prints "Error: ..." and exits 1 before any output is written
- Unresolved cues are listed separately and flagged; they fail the run
  only with --strict
- Output naming: {topic}{suffix}, numeric suffix for conflicts
  (-cues-2.json)
- Status output goes to stderr (not stdout)
- One synthesis request per run, never retried
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from narration_cues.api.client import ElevenLabsClient, SpeechAPIError
from narration_cues.config import AUDIO_DIR
from narration_cues.core.checks import (
    ERROR,
    Issue,
    check_timing,
    check_topic_input,
    has_errors,
)
from narration_cues.core.documents import load_alignment, load_words_document
from narration_cues.core.resolver import resolve_cues
from narration_cues.core.segmenter import segment_words, words_duration
from narration_cues.core.topic import build_cue_groups, load_topic
from narration_cues.formatters import FORMATTERS
from narration_cues.formatters.base import BaseFormatter, FormatterOutput, TopicTiming
from narration_cues.formatters.word_timestamps import WordTimestampsFormatter


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _report_issues(issues: List[Issue]) -> None:
    for issue in issues:
        marker = "ERROR" if issue.severity == ERROR else "WARNING"
        _status("  [{}] {}".format(marker, issue.message))


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. dka-cues.json)
    - Conflict: split suffix at last dot, insert counter before extension
      (e.g. dka-cues-2.json)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    # e.g. "-cues.json" → ("-cues", ".json")
    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Save a single formatter output to disk, returning its path."""
    path = _resolve_output_path(stem, output.suffix, output_dir)

    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")

    return path


def _output_dir(args: argparse.Namespace) -> Path:
    output_dir = Path(args.output_dir or AUDIO_DIR).resolve()
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))
    return output_dir


def _make_formatter(key: str, args: argparse.Namespace) -> BaseFormatter:
    if key == "timestamps":
        return WordTimestampsFormatter(text_key=args.text_key)
    return FORMATTERS[key]()


def _parse_formats(value: Optional[str]) -> List[str]:
    if not value:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in value.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return keys


def _write_outputs(
    timing: TopicTiming,
    format_keys: List[str],
    args: argparse.Namespace,
    output_dir: Path,
) -> List[Path]:
    """Format everything in memory first, then write, so errors leave no partial output."""
    outputs: List[FormatterOutput] = []
    for key in format_keys:
        formatter = _make_formatter(key, args)
        _status("  Running {} formatter...".format(formatter.name))
        outputs.extend(formatter.format(timing))

    saved: List[Path] = []
    for output in outputs:
        path = _save_output(output, timing.topic, output_dir)
        saved.append(path)
        _status("  Saved: {}".format(path.name))
    return saved


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_check(args: argparse.Namespace) -> int:
    topic = load_topic(args.topic_file)
    _status("Checking topic '{}'...".format(topic.topic))
    issues = check_topic_input(topic)
    _report_issues(issues)
    if has_errors(issues):
        _status("Input check FAILED.")
        return 1
    _status("Input check passed.")
    return 0


async def _synthesize(args: argparse.Namespace) -> int:
    topic = load_topic(args.topic_file)
    output_dir = _output_dir(args)

    _status("Checking topic '{}'...".format(topic.topic))
    issues = check_topic_input(topic)
    _report_issues(issues)
    if has_errors(issues) and not args.skip_checks:
        _status("Input check failed; fix the topic file or pass --skip-checks.")
        return 1

    async with ElevenLabsClient() as client:
        result = await client.synthesize(
            topic.script,
            voice_id=args.voice_id or topic.voice.voice_id,
            model_id=topic.voice.model_id,
            voice_settings=topic.voice.settings,
            on_status=_status,
        )

    # Segment before writing anything so a bad alignment leaves no files
    words = segment_words(result.best_alignment())
    timing = TopicTiming(topic=topic.topic, words=words, duration=words_duration(words))

    outputs = [FormatterOutput(
        suffix="-narration.mp3",
        content=result.audio_bytes,
        media_type="audio/mpeg",
    )]
    if args.save_response:
        outputs.append(FormatterOutput(
            suffix="-tts-response.json",
            content=json.dumps(dataclasses.asdict(result), indent=2),
            media_type="application/json",
        ))
    outputs.extend(WordTimestampsFormatter(text_key=args.text_key).format(timing))

    for output in outputs:
        path = _save_output(output, topic.topic, output_dir)
        _status("  Saved: {}".format(path.name))

    _status("")
    _status("Done! {} words, {:.2f}s of narration.".format(len(words), timing.duration))
    return 0


def _cmd_synthesize(args: argparse.Namespace) -> int:
    return asyncio.run(_synthesize(args))


def _cmd_segment(args: argparse.Namespace) -> int:
    alignment = load_alignment(args.response_file)
    output_dir = _output_dir(args)
    _status("Segmenting {} characters...".format(len(alignment)))

    words = segment_words(alignment)
    timing = TopicTiming(topic=args.topic, words=words, duration=words_duration(words))
    _write_outputs(timing, ["timestamps"], args, output_dir)

    _status("Done! {} words, {:.2f}s of narration.".format(len(words), timing.duration))
    return 0


def _cmd_resolve(args: argparse.Namespace) -> int:
    format_keys = _parse_formats(args.formats)
    topic = load_topic(args.topic_file)
    document = load_words_document(args.timestamps_file)
    output_dir = _output_dir(args)

    _status("Resolving cues for '{}' ({} words, {:.2f}s)...".format(
        topic.topic, len(document.words), document.duration
    ))
    groups = build_cue_groups(topic)
    resolution = resolve_cues(document.words, groups)

    for group_name, cues in resolution.groups.items():
        if not cues:
            continue
        _status("  {}:".format(group_name))
        for cue in cues:
            if cue.resolved:
                _status("    {:<20} {:.3f}s".format(cue.id, cue.timestamp))
            else:
                _status("    {:<20} UNRESOLVED".format(cue.id))

    issues = check_timing(topic, resolution)
    if issues:
        _status("Timing checks:")
        _report_issues(issues)

    unresolved = resolution.unresolved
    if unresolved:
        _status("")
        _status("UNRESOLVED CUES ({}):".format(len(unresolved)))
        for cue_id in unresolved:
            _status("  - {}".format(cue_id))

    timing = TopicTiming(
        topic=topic.topic,
        words=document.words,
        duration=document.duration,
        resolution=resolution,
        definition=topic,
        issues=issues,
    )
    _status("Formatting output...")
    saved = _write_outputs(timing, format_keys, args, output_dir)

    total = len(resolution.cues)
    _status("")
    _status("Done! {}/{} cues resolved, saved {} file(s) to {}".format(
        total - len(unresolved), total, len(saved), output_dir
    ))

    if args.strict and (unresolved or has_errors(issues)):
        _status("Strict mode: failing because of unresolved cues or check errors.")
        return 1
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    RULES:
    - Subcommands: synthesize, segment, resolve, check
    - Global: --verbose
    - Writers share --output-dir and --text-key
    """
    parser = argparse.ArgumentParser(
        prog="narration_cues",
        description="Generate narration timing and resolve script cues "
                    "for narrated medical-education shorts.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    def _add_output_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--output-dir",
            default=None,
            help="Directory to save output files (default: {}).".format(AUDIO_DIR),
        )
        p.add_argument(
            "--text-key",
            choices=("word", "text"),
            default="word",
            help="Field name for word text in the timestamps file (default: %(default)s).",
        )

    p_check = sub.add_parser("check", help="Lint a topic definition against its script.")
    p_check.add_argument("topic_file", help="Path to the topic definition JSON.")
    p_check.set_defaults(func=_cmd_check)

    p_synth = sub.add_parser(
        "synthesize",
        help="Synthesize narration audio and write the words document.",
    )
    p_synth.add_argument("topic_file", help="Path to the topic definition JSON.")
    p_synth.add_argument("--voice-id", default=None, help="Override the topic's voice ID.")
    p_synth.add_argument(
        "--save-response",
        action="store_true",
        help="Also save the raw provider response (for offline re-segmentation).",
    )
    p_synth.add_argument(
        "--skip-checks",
        action="store_true",
        help="Synthesize even if the input check reports errors.",
    )
    _add_output_args(p_synth)
    p_synth.set_defaults(func=_cmd_synthesize)

    p_seg = sub.add_parser(
        "segment",
        help="Rebuild the words document from a saved provider response.",
    )
    p_seg.add_argument("response_file", help="Saved provider response or alignment JSON.")
    p_seg.add_argument("--topic", required=True, help="Topic name for the output document.")
    _add_output_args(p_seg)
    p_seg.set_defaults(func=_cmd_segment)

    p_res = sub.add_parser("resolve", help="Resolve a topic's cues against its words document.")
    p_res.add_argument("topic_file", help="Path to the topic definition JSON.")
    p_res.add_argument("timestamps_file", help="Path to the {topic}-timestamps.json document.")
    p_res.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )
    p_res.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any cue is unresolved or a timing check fails.",
    )
    _add_output_args(p_res)
    p_res.set_defaults(func=_cmd_resolve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Exits with the subcommand's status code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    try:
        code = args.func(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except SpeechAPIError as e:
        _fail(str(e))
    except httpx.HTTPError as e:
        _fail("Network error talking to the speech API: {}".format(e))
    except ValueError as e:
        # Malformed input: alignment, cue config, topic or words document
        _fail(str(e))
    else:
        sys.exit(code)


if __name__ == "__main__":
    main()
