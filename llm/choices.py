"""Tolerant extraction of completion text from response choices.

Chat-style backends put the text under ``message.content``, streaming
backends under ``delta.content`` and legacy completion backends under
``text``. Some represent content as a list of parts such as
``[{"type": "text", "text": "..."}]``. Every extractor below returns either a
string or ``None`` and never raises.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional

Extractor = Callable[[Any], Optional[str]]


def _field(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    return None


def _content_paths(choice: Any) -> list[Any]:
    return [
        _field(_field(choice, "message"), "content"),
        _field(_field(choice, "delta"), "content"),
        _field(choice, "text"),
        _field(choice, "content"),
    ]


def _first_string(choice: Any) -> str | None:
    for candidate in _content_paths(choice):
        if isinstance(candidate, str):
            return candidate
    return None


def _selected_content(choice: Any) -> Any:
    for candidate in _content_paths(choice):
        if candidate is not None:
            return candidate
    return None


def _joined_parts(choice: Any) -> str | None:
    content = _selected_content(choice)
    if not isinstance(content, list):
        return None
    parts: list[str] = []
    for item in content:
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(_field(item, "text"), str):
            parts.append(item["text"])
        elif isinstance(_field(item, "content"), str):
            parts.append(item["content"])
    joined = "".join(parts)
    return joined or None


def _object_text(choice: Any) -> str | None:
    content = _selected_content(choice)
    text = _field(content, "text")
    return text if isinstance(text, str) else None


EXTRACTORS: tuple[Extractor, ...] = (_first_string, _joined_parts, _object_text)


def extract_choice_text(choice: Any) -> str | None:
    """Return the text of one choice, or ``None`` when none can be found."""

    for extractor in EXTRACTORS:
        text = extractor(choice)
        if text is not None:
            return text
    return None
