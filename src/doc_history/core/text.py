"""
Line normalization for snapshot content.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..errors import InvalidInputError


@dataclass(frozen=True)
class NormalizedText:
    """Lines of a text without terminators, plus whether it ended with one."""

    lines: Tuple[str, ...]
    trailing_newline: bool = False

    def to_text(self) -> str:
        """Rebuild the exact original text."""
        text = "\n".join(self.lines)
        if self.trailing_newline:
            text += "\n"
        return text

    def __len__(self) -> int:
        return len(self.lines)


def normalize(text: str) -> NormalizedText:
    """
    Split raw text into lines on ``\\n``.

    A trailing terminator does not produce an empty final line; it is recorded
    in ``trailing_newline`` instead, so ``"a\\n"`` and ``"a"`` share the same
    lines but not the same flag.
    """
    if not isinstance(text, str):
        raise InvalidInputError(f"Expected text content, got {type(text).__name__}")

    if not text:
        return NormalizedText(lines=(), trailing_newline=False)

    trailing = text.endswith("\n")
    if trailing:
        text = text[:-1]

    return NormalizedText(lines=tuple(text.split("\n")), trailing_newline=trailing)
