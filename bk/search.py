"""Substring search across chapters."""

from enum import Enum
from typing import Optional

from .model import Cursor, Document


class Direction(Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


def search(document: Document, cursor: Cursor, query: str,
           direction: Direction) -> Optional[Cursor]:
    """Find ``query`` starting at ``cursor`` and return the line it is on.

    Forward search starts at the top line of the cursor (so that line may
    match) and continues through the following chapters. Backward search
    looks only at the text before the top line, taking the last match, and
    continues through the preceding chapters. Neither direction wraps
    around the document.

    The two directions scan different ranges, so searching forward and then
    backward from the result need not return to ``cursor``.

    Returns None when nothing matches; the cursor is never modified here.
    """
    if not query:
        return None

    chapters = document.chapters
    current = chapters[cursor.chapter]
    offset = current.offset_of(cursor.line)

    if direction is Direction.FORWARD:
        # (chapter index, start offset) for each range scanned
        ranges = [(cursor.chapter, offset)]
        ranges += [(c, 0) for c in range(cursor.chapter + 1, len(chapters))]
        for c, start in ranges:
            found = chapters[c].text.find(query, start)
            if found != -1:
                return Cursor(c, chapters[c].line_at(found))
    else:
        # (chapter index, end offset)
        ranges = [(cursor.chapter, offset)]
        ranges += [(c, len(chapters[c].text)) for c in range(cursor.chapter - 1, -1, -1)]
        for c, end in ranges:
            found = chapters[c].text.rfind(query, 0, end)
            if found != -1:
                return Cursor(c, chapters[c].line_at(found))
    return None
