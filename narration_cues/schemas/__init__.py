"""Packaged JSON schemas for topic definitions and words documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

_SCHEMA_DIR = Path(__file__).resolve().parent

_CACHED_SCHEMAS: Dict[str, dict] = {}


def load_schema(name: str) -> dict:
    """Load and cache a schema by file stem, e.g. ``"topic"``."""
    if name not in _CACHED_SCHEMAS:
        with open(_SCHEMA_DIR / "{}.schema.json".format(name), encoding="utf-8") as f:
            _CACHED_SCHEMAS[name] = json.load(f)
    return _CACHED_SCHEMAS[name]
