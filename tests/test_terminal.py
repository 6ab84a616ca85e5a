"""Tests for terminal drawing."""

from unittest.mock import MagicMock, Mock, patch

from bk.constants import ReaderConstants
from bk.terminal import TerminalInterface

ON = ReaderConstants.HIGHLIGHT_ON
OFF = ReaderConstants.HIGHLIGHT_OFF


def make_terminal():
    term = MagicMock()
    term.home = '[HOME]'
    term.clear = '[CLEAR]'
    term.reverse = '[REV]'
    term.normal = '[NORM]'
    term.enter_fullscreen = '[FS]'
    term.exit_fullscreen = '[/FS]'
    term.hide_cursor = '[HIDE]'
    term.normal_cursor = '[SHOW]'
    term.move = Mock(side_effect=lambda y, x: f'[MOVE:{y},{x}]')
    term.width = 120
    term.height = 40
    return TerminalInterface(term)


def printed(mock_print):
    return ''.join(str(call.args[0]) for call in mock_print.call_args_list if call.args)


def test_styled_turns_markers_into_reverse_video():
    terminal = make_terminal()
    assert terminal.styled(f"a {ON}match{OFF} here") == "a [REV]match[NORM] here"
    assert terminal.styled("plain") == "plain"


def test_draw_lines_places_each_line_at_margin():
    terminal = make_terminal()
    with patch('builtins.print') as mock_print:
        terminal.draw_lines(["first", f"{ON}second{OFF}"], left_margin=5)
    assert printed(mock_print) == (
        '[HOME][CLEAR]'
        '[MOVE:0,5]first'
        '[MOVE:1,5][REV]second[NORM]'
    )
    # The frame is flushed once, at the end
    assert mock_print.call_args.kwargs.get('flush') is True


def test_draw_empty_frame_only_clears():
    terminal = make_terminal()
    with patch('builtins.print') as mock_print:
        terminal.draw_lines([])
    assert printed(mock_print) == '[HOME][CLEAR]'


def test_size_comes_from_terminal():
    terminal = make_terminal()
    assert terminal.width == 120
    assert terminal.height == 40


def test_setup_and_cleanup_toggle_fullscreen():
    terminal = make_terminal()
    with patch('builtins.print') as mock_print, patch('curtsies.Input') as mock_input:
        terminal.setup()
        assert terminal.is_fullscreen
        mock_input.assert_called_once_with(keynames='curtsies')
        terminal.cleanup()
    assert not terminal.is_fullscreen
    output = printed(mock_print)
    assert output.startswith('[FS][HIDE][CLEAR]')
    assert output.endswith('[/FS][SHOW]')
    mock_input.return_value.__exit__.assert_called_once()


def test_cleanup_without_setup_prints_nothing():
    terminal = make_terminal()
    with patch('builtins.print') as mock_print:
        terminal.cleanup()
    mock_print.assert_not_called()


def test_get_key_without_input_returns_none():
    terminal = make_terminal()
    assert terminal.get_key(timeout=0) is None
