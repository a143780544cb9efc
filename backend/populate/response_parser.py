"""
Tolerant parsing of LLM responses.

The service is asked for JSON only but does not enforce a schema, so answers
may arrive wrapped in Markdown fences, surrounded by prose, or shaped slightly
differently than requested. Everything here fails closed: unusable input
becomes ``None`` or an empty list, never an exception.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from domain.location import Level, normalize_name

from .settings import LEVEL_LABELS

logger = logging.getLogger(__name__)

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```\s*$")

# Give up scanning after this many candidate openings
_MAX_SCAN_CANDIDATES = 50


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    text = _FENCE_START.sub("", text)
    return _FENCE_END.sub("", text).strip()


def _balanced_end(text: str, start: int) -> int:
    """Index of the bracket closing ``text[start]``, or -1. Skips string literals."""
    opener = text[start]
    closer = "}" if opener == "{" else "]"
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
    return -1


def parse(raw: Optional[str]) -> Any:
    """Raw text -> JSON value, or None when nothing parseable is found."""
    if not raw or not raw.strip():
        return None

    cleaned = _strip_code_fence(raw)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    attempts = 0
    for match in re.finditer(r"[\[{]", cleaned):
        attempts += 1
        if attempts > _MAX_SCAN_CANDIDATES:
            break
        end = _balanced_end(cleaned, match.start())
        if end < 0:
            continue
        try:
            return json.loads(cleaned[match.start():end + 1])
        except json.JSONDecodeError:
            continue

    logger.debug("Unparseable response (%d chars)", len(raw))
    return None


# ---------------------------------------------------------------------------
# Child listings
# ---------------------------------------------------------------------------

class ChildEntry(BaseModel):
    """One listed child. Only a name is required; everything else is ignored."""

    model_config = ConfigDict(extra="ignore")

    name: str

    @model_validator(mode="before")
    @classmethod
    def _pick_name(cls, value):
        if isinstance(value, str):
            return {"name": value}
        if isinstance(value, dict):
            for key in ("name", "en", "english"):
                if isinstance(value.get(key), str):
                    return {"name": value[key]}
            # e.g. {"mandalName": "..."} / {"villageName": "..."}
            for key, item in value.items():
                if key.lower().endswith("name") and isinstance(item, str):
                    return {"name": item}
        return value


def _listing_keys(level: Level, labels: dict) -> list[str]:
    keys = ["items", f"{level.value}s", level.value]
    _, plural = labels[level]
    keys.append(plural.strip().lower())
    keys.extend(part.strip().lower() for part in plural.split("/"))
    return keys


def _find_list(obj: Any, level: Level, labels: dict) -> Optional[list]:
    if isinstance(obj, list):
        return obj
    if not isinstance(obj, dict):
        return None
    lowered = {str(k).lower(): v for k, v in obj.items()}
    for key in _listing_keys(level, labels):
        if isinstance(lowered.get(key), list):
            return lowered[key]
    lists = [v for v in obj.values() if isinstance(v, list)]
    if len(lists) == 1:
        return lists[0]
    return None


def parse_child_names(
    raw: Union[str, Any, None],
    level: Level,
    labels: Optional[dict] = None,
) -> list[str]:
    """
    Extract distinct child names from a raw response (or an already-parsed value).

    ``labels`` maps each level to its (singular, plural) wording; the plural is
    also accepted as the listing key.
    """
    obj = parse(raw) if isinstance(raw, str) or raw is None else raw
    entries = _find_list(obj, level, labels or LEVEL_LABELS)
    if entries is None:
        return []

    names: list[str] = []
    seen = set()
    for entry in entries:
        try:
            child = ChildEntry.model_validate(entry)
        except ValidationError:
            continue
        name = " ".join(child.name.split())
        key = normalize_name(name)
        if not name or key in seen:
            continue
        seen.add(key)
        names.append(name)
    return names
