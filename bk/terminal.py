"""Terminal interface using Blessed for display and Curtsies for input."""

import blessed
from typing import Optional
import sys
import select

from .constants import ReaderConstants


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None
        self._curtsies_active: bool = False

    def setup(self):
        """Enter fullscreen mode, hide the cursor and start reading keys."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.hide_cursor, end='')
        print(self.term.clear, end='', flush=True)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            try:
                from curtsies import Input  # type: ignore
                # Enter raw mode immediately so reads work
                self._curtsies_input = Input(keynames='curtsies')  # type: ignore
                self._curtsies_input.__enter__()
                self._curtsies_active = True
            except Exception:
                # Justification: curtsies can fail to initialize without a
                # real tty (CI, pipes). The reader then gets no key events
                # instead of crashing half-way into fullscreen mode.
                self._curtsies_input = None
                self._curtsies_active = False

    def cleanup(self):
        """Exit fullscreen mode and restore terminal."""
        if self.is_fullscreen:
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False
        if self._curtsies_input is not None:
            try:
                if self._curtsies_active:
                    self._curtsies_input.__exit__(None, None, None)  # type: ignore
            except Exception:
                # Justification: teardown should never crash the app; the
                # position still has to be saved after this.
                pass
            finally:
                self._curtsies_input = None
                self._curtsies_active = False

    def styled(self, line: str) -> str:
        """Turn highlight markers into reverse video."""
        return (line
                .replace(ReaderConstants.HIGHLIGHT_ON, self.term.reverse)
                .replace(ReaderConstants.HIGHLIGHT_OFF, self.term.normal))

    def draw_lines(self, lines: list[str], left_margin: int = 0):
        """Clear the screen and draw ``lines`` from the top row.

        Args:
            lines: Display lines, possibly containing highlight markers
            left_margin: Column where every line starts
        """
        print(self.term.home + self.term.clear, end='')
        for y, line in enumerate(lines):
            print(self.term.move(y, left_margin) + self.styled(line), end='')
        print('', end='', flush=True)

    def get_key(self, timeout=None):
        """Get a single keypress from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies key name, or None if no key arrived.
        """
        if self._curtsies_input is not None:
            if timeout is None:
                evt = next(self._curtsies_input)  # blocks
                return str(evt)
            t = 0.0 if timeout == 0 else float(timeout)
            r, _, _ = select.select([sys.stdin], [], [], t)
            if not r:
                return None
            evt = next(self._curtsies_input)
            return str(evt)
        # Curtsies is required; if not initialized, return None
        return None

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows."""
        return self.term.height
