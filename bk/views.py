"""Reader modes: key handling and frame rendering.

The reader is always in exactly one ``Mode``. ``handle`` applies a key
event to the session (possibly switching mode) and ``render`` produces the
lines of the next frame. Both dispatch on the session's current mode.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Callable, Optional

from .constants import ReaderConstants
from .keyboard import KeyEvent, KeyType
from .model import Cursor, Document
from .search import Direction, search

logger = logging.getLogger(__name__)

HIGHLIGHT_ON = ReaderConstants.HIGHLIGHT_ON
HIGHLIGHT_OFF = ReaderConstants.HIGHLIGHT_OFF


class Mode(Enum):
    READING = "reading"
    CONTENTS = "contents"
    SEARCH = "search"
    HELP = "help"
    CLOSED = "closed"


@dataclass
class Session:
    """Everything the key handlers may change."""
    rows: int
    cols: int
    mode: Mode = Mode.READING
    cursor: Cursor = Cursor()
    saved_jump: Cursor = Cursor()
    search_query: str = ""
    contents_selection: int = 0
    contents_top: int = 0

    @property
    def running(self) -> bool:
        return self.mode is not Mode.CLOSED


HELP_TEXT = [
    "",
    "                   Esc q  Quit",
    "                    F1 ?  Help",
    "                       /  Search",
    "                     Tab  Table of Contents",
    "",
    "PageDown Right Space f l  Page Down",
    "         PageUp Left b h  Page Up",
    "                       d  Half Page Down",
    "                       u  Half Page Up",
    "                  Down j  Line Down",
    "                    Up k  Line Up",
    "                  Home g  Chapter Start",
    "                   End G  Chapter End",
    "                       [  Previous Chapter",
    "                       ]  Next Chapter",
    "                       n  Search Forward",
    "                       N  Search Backward",
    "                       '  Jump to previous position",
]


# --- Reading: cursor movement ---

def _line_count(session: Session, document: Document) -> int:
    return len(document.chapters[session.cursor.chapter])


def next_chapter(session: Session, document: Document) -> None:
    if session.cursor.chapter < len(document) - 1:
        session.cursor = Cursor(session.cursor.chapter + 1, 0)


def prev_chapter(session: Session, document: Document) -> None:
    if session.cursor.chapter > 0:
        session.cursor = Cursor(session.cursor.chapter - 1, 0)


def scroll_down(session: Session, document: Document, n: int) -> None:
    """Scroll ``n`` lines, or move to the next chapter once the rest fits."""
    chapter, line = session.cursor
    count = _line_count(session, document)
    if line + session.rows >= count:
        next_chapter(session, document)
    else:
        session.cursor = Cursor(chapter, min(line + n, count))


def scroll_up(session: Session, document: Document, n: int) -> None:
    """Scroll ``n`` lines, or move to the end of the previous chapter from the top."""
    chapter, line = session.cursor
    if line > 0:
        session.cursor = Cursor(chapter, max(0, line - n))
    elif chapter > 0:
        count = len(document.chapters[chapter - 1])
        session.cursor = Cursor(chapter - 1, max(0, count - session.rows))


def _page_down(session, document, event):
    scroll_down(session, document, session.rows)


def _page_up(session, document, event):
    scroll_up(session, document, session.rows)


def _half_page_down(session, document, event):
    scroll_down(session, document, session.rows // 2)


def _half_page_up(session, document, event):
    scroll_up(session, document, session.rows // 2)


def _line_down(session, document, event):
    scroll_down(session, document, 1)


def _line_up(session, document, event):
    scroll_up(session, document, 1)


def _chapter_start(session, document, event):
    session.cursor = Cursor(session.cursor.chapter, 0)


def _chapter_end(session, document, event):
    count = _line_count(session, document)
    session.cursor = Cursor(session.cursor.chapter, max(0, count - session.rows))


def _prev_chapter(session, document, event):
    prev_chapter(session, document)


def _next_chapter(session, document, event):
    next_chapter(session, document)


def _swap_jump(session, document, event):
    session.cursor, session.saved_jump = session.saved_jump, session.cursor


def _search_next(session, document, event):
    """Find the next match below the top line."""
    chapter, line = session.cursor
    if line + 1 < len(document.chapters[chapter]):
        start = Cursor(chapter, line + 1)
    elif chapter + 1 < len(document):
        start = Cursor(chapter + 1, 0)
    else:
        return
    found = search(document, start, session.search_query, Direction.FORWARD)
    if found is not None:
        session.cursor = found


def _search_prev(session, document, event):
    found = search(document, session.cursor, session.search_query, Direction.BACKWARD)
    if found is not None:
        session.cursor = found


# --- Reading: mode switches ---

def _close(session, document, event):
    session.mode = Mode.CLOSED


def _open_help(session, document, event):
    session.mode = Mode.HELP


def _open_search(session, document, event):
    session.saved_jump = session.cursor
    session.search_query = ""
    session.mode = Mode.SEARCH


def _open_contents(session, document, event):
    last = max(len(document.toc) - 1, 0)
    session.contents_selection = min(session.cursor.chapter, last)
    session.contents_top = max(0, session.contents_selection - (session.rows - 1))
    session.mode = Mode.CONTENTS


Handler = Callable[[Session, Document, KeyEvent], None]

READING_KEYS: dict[str, Handler] = {
    'escape': _close, 'q': _close,
    'f1': _open_help, '?': _open_help,
    '/': _open_search,
    'tab': _open_contents,
    "'": _swap_jump,
    'n': _search_next,
    'N': _search_prev,
    'page_down': _page_down, 'right': _page_down, ' ': _page_down, 'f': _page_down, 'l': _page_down,
    'page_up': _page_up, 'left': _page_up, 'b': _page_up, 'h': _page_up,
    'd': _half_page_down,
    'u': _half_page_up,
    'down': _line_down, 'j': _line_down,
    'up': _line_up, 'k': _line_up,
    'home': _chapter_start, 'g': _chapter_start,
    'end': _chapter_end, 'G': _chapter_end,
    '[': _prev_chapter,
    ']': _next_chapter,
}


# --- Contents ---

def _contents_down(session, document, event):
    if session.contents_selection < len(document.toc) - 1:
        session.contents_selection += 1
        if session.contents_selection == session.contents_top + session.rows:
            session.contents_top += 1


def _contents_up(session, document, event):
    if session.contents_selection > 0:
        if session.contents_selection == session.contents_top:
            session.contents_top -= 1
        session.contents_selection -= 1


def _contents_first(session, document, event):
    session.contents_selection = 0
    session.contents_top = 0


def _contents_last(session, document, event):
    session.contents_selection = max(len(document.toc) - 1, 0)
    session.contents_top = max(0, len(document.toc) - session.rows)


def _contents_commit(session, document, event):
    if document.toc:
        chapter = min(session.contents_selection, len(document) - 1)
        session.saved_jump = session.cursor
        session.cursor = Cursor(chapter, 0)
    session.mode = Mode.READING


def _back_to_reading(session, document, event):
    session.mode = Mode.READING


CONTENTS_KEYS: dict[str, Handler] = {
    'escape': _back_to_reading, 'left': _back_to_reading,
    'h': _back_to_reading, 'q': _back_to_reading,
    'enter': _contents_commit, 'tab': _contents_commit,
    'right': _contents_commit, 'l': _contents_commit,
    'down': _contents_down, 'j': _contents_down,
    'up': _contents_up, 'k': _contents_up,
    'home': _contents_first, 'g': _contents_first,
    'end': _contents_last, 'G': _contents_last,
}


# --- Search ---

def _rerun_search(session: Session, document: Document) -> None:
    found = search(document, session.cursor, session.search_query, Direction.FORWARD)
    if found is not None:
        session.cursor = found


def _search_cancel(session, document, event):
    session.cursor = session.saved_jump
    session.mode = Mode.READING


def _search_backspace(session, document, event):
    session.search_query = session.search_query[:-1]
    session.cursor = session.saved_jump
    _rerun_search(session, document)


def _search_type(session: Session, document: Document, event: KeyEvent) -> None:
    """Extend the query; the search continues from the current match."""
    session.search_query += event.value
    _rerun_search(session, document)


SEARCH_KEYS: dict[str, Handler] = {
    'escape': _search_cancel,
    'enter': _back_to_reading,
    'backspace': _search_backspace,
}


def _dispatch(keys: dict[str, Handler], fallback: Optional[Handler],
              session: Session, document: Document, event: KeyEvent) -> None:
    handler = keys.get(event.name)
    if handler is None:
        handler = fallback
    if handler is not None:
        handler(session, document, event)


def _search_fallback(session, document, event):
    if event.key_type == KeyType.REGULAR and event.value.isprintable():
        _search_type(session, document, event)


_HANDLERS: dict[Mode, Callable[[Session, Document, KeyEvent], None]] = {
    Mode.READING: partial(_dispatch, READING_KEYS, None),
    Mode.CONTENTS: partial(_dispatch, CONTENTS_KEYS, None),
    Mode.SEARCH: partial(_dispatch, SEARCH_KEYS, _search_fallback),
    Mode.HELP: partial(_dispatch, {}, _back_to_reading),
}


def handle(session: Session, document: Document, event: KeyEvent) -> None:
    """Apply one key event to the session."""
    before = session.mode
    handler = _HANDLERS.get(before)
    if handler is None:
        return
    handler(session, document, event)
    if session.mode is not before:
        logger.debug("mode %s -> %s at %s", before.value, session.mode.value, session.cursor)


# --- Rendering ---

def _highlight(line: str, query: str) -> str:
    """Wrap the first occurrence of ``query`` in highlight markers."""
    if not query:
        return line
    i = line.find(query)
    if i == -1:
        return line
    end = i + len(query)
    return line[:i] + HIGHLIGHT_ON + line[i:end] + HIGHLIGHT_OFF + line[end:]


def _render_reading(session: Session, document: Document) -> list[str]:
    chapter, line = session.cursor
    lines = document.chapters[chapter].lines[line:line + session.rows]
    return [text[:session.cols] for text in lines]


def _render_contents(session: Session, document: Document) -> list[str]:
    top = session.contents_top
    out = []
    for i, label in enumerate(document.toc[top:top + session.rows]):
        label = label[:session.cols]
        if top + i == session.contents_selection:
            label = HIGHLIGHT_ON + label + HIGHLIGHT_OFF
        out.append(label)
    return out


def _render_search(session: Session, document: Document) -> list[str]:
    chapter, line = session.cursor
    visible = max(session.rows - 1, 0)
    lines = document.chapters[chapter].lines[line:line + visible]
    out = [_highlight(text[:session.cols], session.search_query) for text in lines]
    out.extend("" for _ in range(visible - len(out)))
    out.append(("/" + session.search_query)[:session.cols])
    return out[:session.rows]


def _render_help(session: Session, document: Document) -> list[str]:
    return [text[:session.cols] for text in HELP_TEXT[:session.rows]]


_RENDERERS: dict[Mode, Callable[[Session, Document], list[str]]] = {
    Mode.READING: _render_reading,
    Mode.CONTENTS: _render_contents,
    Mode.SEARCH: _render_search,
    Mode.HELP: _render_help,
}


def render(session: Session, document: Document) -> list[str]:
    """Lines of the next frame, at most ``rows`` lines of at most ``cols`` columns."""
    renderer = _RENDERERS.get(session.mode)
    if renderer is None:
        return []
    return renderer(session, document)
