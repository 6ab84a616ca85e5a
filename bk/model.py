"""Reflowed chapters, the document that holds them, and the reading cursor.

A chapter keeps its source text together with the reflowed lines and the
offset at which each line starts, so a text position found by search can be
mapped back to a line.
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import NamedTuple, Sequence

from .reflow import reflow


class Cursor(NamedTuple):
    """Top visible line: a chapter index and a line index within it.

    Cursors compare in reading order (chapter first, then line).
    """
    chapter: int = 0
    line: int = 0


@dataclass(frozen=True)
class Chapter:
    text: str
    lines: tuple[str, ...]
    offsets: tuple[int, ...]

    @classmethod
    def from_text(cls, text: str, width: int) -> "Chapter":
        """Reflow ``text`` at ``width`` and keep lines and offsets side by side."""
        pairs = reflow(text, width)
        offsets = tuple(offset for offset, _ in pairs)
        lines = tuple(line for _, line in pairs)
        return cls(text=text, lines=lines, offsets=offsets)

    def __len__(self) -> int:
        return len(self.lines)

    def offset_of(self, line: int) -> int:
        """Offset in ``text`` where ``line`` starts.

        A line index one past the end maps to the end of the text.
        """
        if line >= len(self.offsets):
            return len(self.text)
        return self.offsets[line]

    def line_at(self, offset: int) -> int:
        """Index of the line whose span contains ``offset``.

        Binary search over the offsets: an exact hit is that line, otherwise
        the line before the insertion point.
        """
        p = bisect_left(self.offsets, offset)
        if p < len(self.offsets) and self.offsets[p] == offset:
            return p
        # p == 0 would mean offset < offsets[0] == 0
        return max(p - 1, 0)


@dataclass(frozen=True)
class Document:
    chapters: tuple[Chapter, ...]
    toc: tuple[str, ...]

    @classmethod
    def from_texts(cls, texts: Sequence[str], toc: Sequence[str], width: int) -> "Document":
        """Build a document, reflowing every chapter once at ``width``."""
        chapters = tuple(Chapter.from_text(text, width) for text in texts)
        return cls(chapters=chapters, toc=tuple(toc))

    def __len__(self) -> int:
        return len(self.chapters)

    def clamp(self, cursor: Cursor) -> Cursor:
        """Pull a cursor (e.g. one restored from disk) inside the document."""
        chapter = min(max(cursor.chapter, 0), len(self.chapters) - 1)
        line = min(max(cursor.line, 0), len(self.chapters[chapter]))
        return Cursor(chapter, line)
