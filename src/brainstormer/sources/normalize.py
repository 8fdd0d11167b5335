"""Normalize raw catalog payloads into Items.

Accepted payload shapes, tried in order:
1. A top-level JSON array
2. An object with an ``items`` array
3. An object with an array under the category's payload key
4. An object whose ``data`` object holds that array
"""

from __future__ import annotations

import json
from typing import Any

from brainstormer.reel.models import Item

LABEL_FIELDS = ("label", "value", "name")


def extract_entries(payload: Any, payload_key: str | None = None) -> list | None:
    """Return the raw entry list from a parsed payload, or None."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return None
    if isinstance(payload.get("items"), list):
        return payload["items"]
    if payload_key and isinstance(payload.get(payload_key), list):
        return payload[payload_key]
    data = payload.get("data")
    if payload_key and isinstance(data, dict) and isinstance(data.get(payload_key), list):
        return data[payload_key]
    return None


def entry_label(entry: Any) -> str:
    """Label from label/value/name (first string wins), else a stringified entry."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        for name in LABEL_FIELDS:
            value = entry.get(name)
            if isinstance(value, str):
                return value
        return json.dumps(entry, ensure_ascii=False, sort_keys=True)
    return str(entry)


def entry_description(entry: Any) -> str | None:
    """Description from ``desc`` (string or list of strings) or ``description``."""
    if not isinstance(entry, dict):
        return None
    desc = entry.get("desc")
    if isinstance(desc, list):
        text = " ".join(str(part) for part in desc)
        return text or None
    if isinstance(desc, str) and desc:
        return desc
    description = entry.get("description")
    if isinstance(description, list):
        text = " ".join(str(part) for part in description)
        return text or None
    if isinstance(description, str) and description:
        return description
    return None


def normalize_entry(entry: Any) -> Item:
    """Coerce one raw entry into an Item."""
    url = entry.get("url") if isinstance(entry, dict) else None
    return Item(
        label=entry_label(entry),
        description=entry_description(entry),
        url=url if isinstance(url, str) and url else None,
    )


def normalize_entries(entries: list) -> list[Item]:
    return [normalize_entry(entry) for entry in entries]
