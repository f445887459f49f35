from __future__ import annotations

from abc import ABC, abstractmethod


class CompletionModel(ABC):
    """Source of candidate completions for a prompt."""

    @abstractmethod
    async def completions(self, prompt: str, temperature: float) -> set[str]:
        """Return distinct completions; failures yield an empty set."""
