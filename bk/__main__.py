"""bk CLI entry point.

Allows running via `python -m bk` and provides the console script
defined in `pyproject.toml`.

Usage:
    bk [--width N] [--log FILE] [PATH]
    bk --version
    bk --keytest
"""

from __future__ import annotations

import logging
import sys
from typing import NamedTuple, Optional

from .constants import ReaderConstants
from .version import get_version_string


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    return s.encode('unicode_escape').decode('ascii')


def run_keyboard_test() -> None:
    """Show the parsed key events the reader would receive. Quit with ESC."""
    from .terminal import TerminalInterface
    from .keyboard import KeyboardHandler, KeyEvent, KeyType

    print("Keyboard test mode: press keys to see parsed events.")
    print("Quit with ESC.")

    term = TerminalInterface()
    term.setup()
    kb = KeyboardHandler(term)
    try:
        while True:
            ev: KeyEvent | None = kb.get_key_event(timeout=None)
            if not ev:
                continue
            if ev.key_type == KeyType.SPECIAL and ev.value == 'escape':
                break
            raw = _escape_bytes(ev.raw)
            print(f"type={ev.key_type.value} value={ev.value} name={ev.name} raw='{raw}'")
    finally:
        term.cleanup()


class UsageError(Exception):
    pass


class Options(NamedTuple):
    path: Optional[str] = None
    width: int = ReaderConstants.MAX_WIDTH
    log: Optional[str] = None
    version: bool = False
    keytest: bool = False


def parse_args(args: list[str]) -> Options:
    """Small hand-rolled parser for the handful of options bk takes."""
    options = Options()
    args = list(args)
    while args:
        arg = args.pop(0)
        if arg in ("--version", "-V"):
            options = options._replace(version=True)
        elif arg in ("--keytest", "--keyboard-test"):
            options = options._replace(keytest=True)
        elif arg in ("--width", "--log"):
            if not args:
                raise UsageError(f"{arg} needs a value")
            value = args.pop(0)
            if arg == "--log":
                options = options._replace(log=value)
                continue
            try:
                width = int(value)
            except ValueError:
                raise UsageError(f"--width needs a number, got {value!r}") from None
            if width < 1:
                raise UsageError("--width must be at least 1")
            options = options._replace(width=width)
        elif arg.startswith("-") and arg != "-":
            raise UsageError(f"unknown option {arg}")
        elif options.path is None:
            options = options._replace(path=arg)
        else:
            raise UsageError("only one book at a time")
    return options


def _configure_logging(log_file: Optional[str]) -> None:
    # Nothing may be written to the terminal while the reader owns it
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


def main(argv: Optional[list[str]] = None) -> None:
    try:
        options = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError as e:
        print(f"bk: {e}", file=sys.stderr)
        print(ReaderConstants.USAGE_MESSAGE, file=sys.stderr)
        sys.exit(1)

    if options.version:
        print(get_version_string())
        return
    if options.keytest:
        run_keyboard_test()
        return

    _configure_logging(options.log)

    # Lazy import to avoid importing UI deps for --version
    from .epub import EpubError, load_epub
    from .model import Cursor
    from .position import Position, PositionError, get_store
    from .reader import Reader

    store = get_store()
    position = store.restore(options.path)
    if position is None:
        print(ReaderConstants.USAGE_MESSAGE, file=sys.stderr)
        sys.exit(1)

    try:
        book = load_epub(position.path)
    except EpubError as e:
        print(ReaderConstants.LOAD_ERROR_MESSAGE.format(e), file=sys.stderr)
        sys.exit(1)

    reader = Reader(book, Cursor(position.chapter, position.line), max_width=options.width)
    reader.run()

    try:
        store.save(Position(position.path, *reader.cursor))
    except PositionError as e:
        print(ReaderConstants.SAVE_ERROR_MESSAGE.format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
