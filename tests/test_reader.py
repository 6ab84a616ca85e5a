"""Tests for the reader controller and its event loop."""

import os
import signal
from unittest.mock import MagicMock, patch

import pytest
from bk.epub import LoadedBook
from bk.keyboard import KeyEvent, KeyType
from bk.model import Cursor
from bk.reader import Reader
from bk.views import Mode

QUIT = KeyEvent(key_type=KeyType.REGULAR, value='q', raw='q')
PAGE_DOWN = KeyEvent(key_type=KeyType.REGULAR, value=' ', raw=' ')


def make_book(chapters=3, lines=30):
    texts = ["".join(f"chapter {c} line {i}\n" for i in range(lines)) for c in range(chapters)]
    return LoadedBook(chapters=texts, toc=[f"Chapter {c}" for c in range(chapters)])


def make_terminal(width=100, height=10):
    terminal = MagicMock()
    terminal.width = width
    terminal.height = height
    return terminal


@pytest.fixture
def terminal():
    return make_terminal()


def test_layout_uses_capped_width_and_full_height(terminal):
    reader = Reader(make_book(), terminal=terminal)
    assert reader.width == 75
    assert reader.session.cols == 88
    assert reader.session.rows == 10
    assert reader.left_margin == 12


def test_narrow_terminal_keeps_a_column_for_hanging_dash():
    reader = Reader(make_book(), terminal=make_terminal(width=40))
    assert reader.width == 39
    assert reader.session.cols == 40
    assert reader.left_margin == 0


def test_custom_max_width(terminal):
    reader = Reader(make_book(), max_width=60, terminal=terminal)
    assert reader.width == 60
    assert reader.session.cols == 80
    assert reader.left_margin == 20


def test_start_position_is_clamped(terminal):
    reader = Reader(make_book(), start=Cursor(9, 500), terminal=terminal)
    assert reader.cursor == Cursor(2, 30)


def test_start_position_kept_when_valid(terminal):
    reader = Reader(make_book(), start=Cursor(1, 4), terminal=terminal)
    assert reader.cursor == Cursor(1, 4)


def test_draw_renders_current_frame(terminal):
    reader = Reader(make_book(), start=Cursor(1, 4), terminal=terminal)
    reader._draw()
    lines = terminal.draw_lines.call_args.args[0]
    assert lines[0] == "chapter 1 line 4"
    assert len(lines) == 10
    assert terminal.draw_lines.call_args.kwargs == {"left_margin": 12}


def test_run_until_quit(terminal):
    reader = Reader(make_book(), terminal=terminal)
    with patch.object(reader.keyboard, 'get_key_event') as mock_get_key_event:
        with patch('bk.reader.select.select') as mock_select:
            mock_select.return_value = ([0], [], [])
            mock_get_key_event.side_effect = [PAGE_DOWN, QUIT]
            reader.run()

    assert reader.session.mode is Mode.CLOSED
    assert reader.cursor == Cursor(0, 10)
    # Key reads never block once select reported input
    mock_get_key_event.assert_called_with(timeout=0)
    terminal.setup.assert_called_once()
    terminal.cleanup.assert_called_once()
    # Initial frame plus one after the page down
    assert terminal.draw_lines.call_count == 2


def test_resize_redraws_without_reflow(terminal):
    reader = Reader(make_book(), terminal=terminal)
    document = reader.document
    with patch.object(reader.keyboard, 'get_key_event', return_value=QUIT):
        with patch('bk.reader.select.select') as mock_select:
            mock_select.side_effect = [
                ([reader._resize_pipe_r], [], []),
                ([0], [], []),
            ]
            os.write(reader._resize_pipe_w, b'R')
            terminal.width = 50
            reader.run()

    assert terminal.draw_lines.call_count == 2
    assert reader.document is document
    assert reader.width == 75
    assert reader.session.cols == 88


def test_empty_read_does_not_redraw(terminal):
    reader = Reader(make_book(), terminal=terminal)
    with patch.object(reader.keyboard, 'get_key_event', side_effect=[None, QUIT]):
        with patch('bk.reader.select.select', return_value=([0], [], [])):
            reader.run()
    assert terminal.draw_lines.call_count == 1


def test_keyboard_interrupt_ends_loop_and_restores_terminal(terminal):
    reader = Reader(make_book(), start=Cursor(1, 3), terminal=terminal)
    with patch('bk.reader.select.select', side_effect=KeyboardInterrupt):
        reader.run()
    terminal.cleanup.assert_called_once()
    assert reader.cursor == Cursor(1, 3)


def test_sigwinch_handler_restored(terminal):
    reader = Reader(make_book(), terminal=terminal)
    before = signal.getsignal(signal.SIGWINCH)
    with patch.object(reader.keyboard, 'get_key_event', return_value=QUIT):
        with patch('bk.reader.select.select', return_value=([0], [], [])):
            reader.run()
    assert signal.getsignal(signal.SIGWINCH) == before


def test_resize_handler_wakes_loop(terminal):
    reader = Reader(make_book(), terminal=terminal)
    try:
        reader._handle_resize(signal.SIGWINCH, None)
        assert os.read(reader._resize_pipe_r, 16) == b'R'
    finally:
        os.close(reader._resize_pipe_r)
        os.close(reader._resize_pipe_w)


@pytest.mark.parametrize("screen_width", [10, 11, 30, 100])
def test_hanging_dash_is_drawn(screen_width):
    book = LoadedBook(chapters=["It was a well-known fact that half-truths spread."], toc=["One"])
    terminal = make_terminal(width=screen_width)
    reader = Reader(book, max_width=10, terminal=terminal)
    reader._draw()
    drawn = terminal.draw_lines.call_args.args[0]
    assert drawn == list(reader.document.chapters[0].lines[:10])
    assert "".join(drawn).count("-") == 2
