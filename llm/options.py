"""Layered request options for chat completion calls."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypedDict


class PostOptions(TypedDict, total=False):
    max_tokens: int
    temperature: float
    top_p: float


OPTION_KEYS: tuple[str, ...] = ("max_tokens", "temperature", "top_p")

DEFAULT_POST_OPTIONS: PostOptions = {
    "max_tokens": 1000,  # maximum number of tokens to return
    "temperature": 0,  # higher values increase diversity
    "top_p": 1,
}


def resolve_options(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Overlay option layers key by key, later layers winning.

    Layers are given lowest priority first (builtin defaults, instance
    options, call options). A key set to ``None`` counts as absent and falls
    through to the next lower layer, so a fully populated lowest layer always
    yields concrete values. Keys outside :data:`OPTION_KEYS` are ignored.
    """

    resolved: dict[str, Any] = {}
    for key in OPTION_KEYS:
        for layer in reversed(layers):
            if not layer:
                continue
            value = layer.get(key)
            if value is not None:
                resolved[key] = value
                break
    return resolved
