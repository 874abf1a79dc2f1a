"""
Text normalization for OCR output.

Every downstream component reasons about line indices, so normalization
never drops or merges lines:
- "  Odometer    82,114  " -> "Odometer 82,114"
- blank lines are kept as "" so indices stay stable
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Iterator, Tuple
import re

_LINE_BREAK = re.compile(r'\r\n|\r|\n')
_INLINE_SPACE = re.compile(r'\s+')


@dataclass(frozen=True)
class NormalizedLines:
    """Immutable, index-stable view of a document's lines."""
    lines: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index):
        return self.lines[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    @cached_property
    def text(self) -> str:
        """Lines joined with newlines; offsets map back through line_at()."""
        return '\n'.join(self.lines)

    def line_at(self, offset: int) -> int:
        """Line index containing character offset in self.text."""
        return self.text.count('\n', 0, max(0, offset))

    def window(self, start: int, size: int) -> Iterator[Tuple[int, str]]:
        """Yield (index, line) for at most size lines beginning at start."""
        end = min(len(self.lines), start + size)
        for index in range(max(0, start), end):
            yield index, self.lines[index]


def normalize_line(line: str) -> str:
    return _INLINE_SPACE.sub(' ', line).strip()


def normalize_text(raw: str) -> NormalizedLines:
    """
    Split raw OCR text into trimmed, space-collapsed lines.

    Args:
        raw: Full OCR output, pages concatenated in reading order

    Returns:
        NormalizedLines (empty for empty input)

    Raises:
        TypeError: if raw is not a string
    """
    if not isinstance(raw, str):
        raise TypeError(f"OCR text must be str, got {type(raw).__name__}")

    if not raw:
        return NormalizedLines(lines=())

    return NormalizedLines(lines=tuple(normalize_line(line) for line in _LINE_BREAK.split(raw)))
