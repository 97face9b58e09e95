# src/builder/parsing.py - v1
"""Parsers for feature-list and help output.

Feature lists come in several shapes depending on the tool release:

  JSON  ["a", "b"]
        [{"name": "a", "stage": "beta", "enabled": true}, ...]
        {"features": <any of the above>}
        {"a": true, "b": "disabled", "c": {"enabled": true}}
  text  one feature per line, or a "name stage enabled" table
"""

from __future__ import annotations

import json
import re
from typing import Any

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_SEPARATOR_ROW = re.compile(r"^[-=+*|\s]+$")
_TRUE_WORDS = {"true", "yes", "y", "on", "1", "enabled"}
_FALSE_WORDS = {"false", "no", "n", "off", "0", "disabled"}


def normalize_feature_name(name: str) -> str:
    """Lowercase, collapse non-alphanumerics to underscores."""
    return _NON_ALNUM.sub("_", name.strip().lower()).strip("_")


def parse_enabled(value: Any) -> bool | None:
    """Interpret a bool-ish JSON value or word; None if it is neither."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def _row_from_object(name_hint: str | None, obj: dict[str, Any]) -> tuple[str, bool] | None:
    name = obj.get("name") if isinstance(obj.get("name"), str) else name_hint
    if not name:
        return None
    enabled = parse_enabled(obj.get("enabled"))
    if enabled is None:
        enabled = parse_enabled(obj.get("value"))
    if enabled is None:
        return None
    return name, enabled


def _rows_from_value(value: Any) -> list[tuple[str, bool]] | None:
    if isinstance(value, list):
        rows: list[tuple[str, bool]] = []
        for item in value:
            if isinstance(item, str) and item.strip():
                rows.append((item, True))
            elif isinstance(item, dict):
                row = _row_from_object(None, item)
                if row is not None:
                    rows.append(row)
        return rows

    if isinstance(value, dict):
        if "features" in value:
            return _rows_from_value(value["features"])
        if "name" in value and ("enabled" in value or "value" in value):
            row = _row_from_object(None, value)
            return [row] if row is not None else []
        rows = []
        for name, inner in value.items():
            if isinstance(inner, dict):
                row = _row_from_object(name, inner)
                if row is not None:
                    rows.append(row)
                continue
            enabled = parse_enabled(inner)
            if enabled is not None:
                rows.append((name, enabled))
            elif isinstance(inner, str):
                # A bare stage label ("beta", "experimental") means present
                rows.append((name, True))
        return rows

    return None


def parse_feature_list_json(output: str) -> dict[str, bool] | None:
    """Parse JSON feature-list output into normalized name -> enabled."""
    try:
        rows = _rows_from_value(json.loads(output))
    except (json.JSONDecodeError, ValueError, RecursionError):
        # Deeply nested output exceeds the recursion limit
        return None
    if not rows:
        return None
    return {normalize_feature_name(name): enabled for name, enabled in rows}


def parse_feature_list_text(output: str) -> dict[str, bool] | None:
    """Parse plain-text feature-list output into normalized name -> enabled."""
    features: dict[str, bool] = {}
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped or _SEPARATOR_ROW.match(stripped):
            continue
        tokens = stripped.split()
        if len(tokens) == 1:
            features[normalize_feature_name(tokens[0])] = True
            continue
        if len(tokens) < 3:
            continue
        if [t.lower() for t in tokens[:3]] == ["feature", "stage", "enabled"]:
            continue
        enabled = parse_enabled(tokens[-1])
        if enabled is None:
            continue
        name = " ".join(tokens[:-2])
        if name:
            features[normalize_feature_name(name)] = enabled
    features.pop("", None)
    return features or None


def feature_mentions(feature: str) -> list[str]:
    """Spellings of a feature name that may appear in help text."""
    base = normalize_feature_name(feature)
    return sorted({base, base.replace("_", "-"), base.replace("_", " ")})


def parse_help_output(output: str, known_features: list[str]) -> set[str]:
    """Known features whose name is mentioned in help output."""
    lower = output.lower()
    found: set[str] = set()
    for feature in known_features:
        if any(mention in lower for mention in feature_mentions(feature)):
            found.add(feature)
    return found
