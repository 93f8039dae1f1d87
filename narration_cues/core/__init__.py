"""Core segmentation, cue resolution and topic modules.

WHY: The core package holds the only logic whose bugs silently break a
video instead of crashing: turning character timing into words and
mapping script cues onto those words. Everything here is pure and
format-agnostic so it can be tested without the provider or renderer.

HOW: ir.py defines the data structures, segmenter.py builds words from a
character alignment, resolver.py maps cue specs onto words, topic.py
turns a topic definition into cue groups, checks.py runs sanity checks,
documents.py reads the persisted JSON artifacts back.

RULES:
- IR dataclasses are the contract, change with care
- segmenter.py and resolver.py never perform I/O
- Malformed input raises a ValueError subclass; unresolved cues do not
"""
