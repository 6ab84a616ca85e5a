"""Main reader controller: event loop between the terminal and the views."""

import logging
import os
import select
import signal
from typing import Optional

from . import views
from .constants import ReaderConstants
from .epub import LoadedBook
from .keyboard import KeyboardHandler
from .model import Cursor, Document
from .terminal import TerminalInterface
from .views import Session

logger = logging.getLogger(__name__)


class Reader:
    """Reader application controller.

    The layout is computed once from the terminal size at startup; resizes
    trigger a redraw but no reflow.
    """

    def __init__(self, book: LoadedBook, start: Cursor = Cursor(),
                 max_width: int = ReaderConstants.MAX_WIDTH,
                 terminal: Optional[TerminalInterface] = None):
        """Reflow the book for the current terminal and place the cursor."""
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.max_width = max_width
        self.screen_cols = self.terminal.width
        # One spare column for a dash left hanging past the reflow width
        self.width = max(1, min(max_width, self.screen_cols - 1))
        self.document = Document.from_texts(book.chapters, book.toc, self.width)
        self.session = Session(
            rows=self.terminal.height,
            # Visible columns right of the margin
            cols=self.screen_cols - self.left_margin,
            cursor=self.document.clamp(start),
        )
        logger.debug(f"Reflowed {len(self.document)} chapters at width {self.width}")
        # Create pipe for resize signaling
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()

    @property
    def cursor(self) -> Cursor:
        return self.session.cursor

    @property
    def left_margin(self) -> int:
        """Pad that centers the text column on the screen."""
        return (self.screen_cols - min(self.screen_cols, self.max_width)) // 2

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        # Write to pipe to wake up select()
        os.write(self._resize_pipe_w, ReaderConstants.RESIZE_PIPE_MARKER)

    def run(self):
        """Run the main reader loop until the reader is closed."""
        self.terminal.setup()
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)

        try:
            with self.terminal.term.cbreak():
                need_draw = True
                while self.session.running:
                    if need_draw:
                        self._draw()
                        need_draw = False

                    # Wait for input on stdin or resize pipe
                    ready, _, _ = select.select([0, self._resize_pipe_r], [], [])

                    if self._resize_pipe_r in ready:
                        os.read(self._resize_pipe_r, 1024)
                        # Layout stays as computed at startup
                        logger.debug("Terminal resized; keeping startup layout")
                        need_draw = True
                    elif 0 in ready:
                        key_event = self.keyboard.get_key_event(timeout=0)
                        if key_event:
                            views.handle(self.session, self.document, key_event)
                            need_draw = True
        except KeyboardInterrupt:
            # Ctrl-C quits; the position is still saved by the caller
            pass
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self.terminal.cleanup()

    def _draw(self):
        """Draw the current frame."""
        lines = views.render(self.session, self.document)
        self.terminal.draw_lines(lines, left_margin=self.left_margin)
