"""Tests for the greedy reflow engine."""

import pytest
from bk.reflow import reflow, DASHES


def test_words_break_at_space():
    assert reflow("hello world", 5) == [(0, "hello"), (6, "world")]


def test_hyphen_is_break_point_after_itself():
    # The second hyphen overflows the line but still ends it
    assert reflow("a-b-c", 3) == [(0, "a-b-"), (4, "c")]


def test_newline_always_breaks():
    assert reflow("line1\nline2", 10) == [(0, "line1"), (6, "line2")]


def test_em_dash_breaks_after_dash():
    assert reflow("one—two three", 5) == [(0, "one—"), (4, "two"), (8, "three")]


def test_unbroken_run_is_cut_at_width():
    assert reflow("abcdefghij", 4) == [(0, "abcd"), (4, "efgh"), (8, "ij")]


def test_run_carried_to_next_line_then_cut():
    assert reflow("ab cdefg", 4) == [(0, "ab"), (3, "cdef"), (7, "g")]


def test_blank_lines_are_kept():
    assert reflow("a\n\nb", 10) == [(0, "a"), (2, ""), (3, "b")]


def test_trailing_newline_adds_no_line():
    assert reflow("abc\n", 10) == [(0, "abc")]


def test_last_line_without_newline_is_flushed():
    assert reflow("hello world foo", 11) == [(0, "hello world"), (12, "foo")]


def test_text_that_fits_is_one_line():
    assert reflow("short", 80) == [(0, "short")]


def test_empty_text():
    assert reflow("", 10) == []


def test_width_must_be_positive():
    with pytest.raises(ValueError):
        reflow("abc", 0)


SAMPLES = [
    "It was the best of times, it was the worst of times, it was the age of wisdom.",
    "A well-known, semi-automatic re-entry—so to speak—of self-referential text.",
    "Short\n\nparagraphs\nwith  double  spaces and a verylongunbrokenwordthatneverends here.",
    "trailing newline at the end of the paragraph\n",
    "---- dashes---everywhere -- and — em — dashes——",
    "   leading spaces and trailing spaces   ",
    "x",
]


@pytest.mark.parametrize("text", SAMPLES)
@pytest.mark.parametrize("width", [1, 2, 3, 5, 8, 13, 40])
def test_offsets_increase_from_zero(text, width):
    offsets = [offset for offset, _ in reflow(text, width)]
    assert offsets[0] == 0
    assert all(a < b for a, b in zip(offsets, offsets[1:]))


@pytest.mark.parametrize("text", SAMPLES)
@pytest.mark.parametrize("width", [1, 2, 3, 5, 8, 13, 40])
def test_spans_reconstruct_text(text, width):
    """Each span is its line plus at most one elided space or newline."""
    pairs = reflow(text, width)
    ends = [offset for offset, _ in pairs[1:]] + [len(text)]
    for (offset, line), end in zip(pairs, ends):
        span = text[offset:end]
        assert span.startswith(line)
        assert span[len(line):] in ("", " ", "\n")
    assert "".join(text[o:e] for (o, _), e in zip(pairs, ends)) == text


@pytest.mark.parametrize("text", SAMPLES)
@pytest.mark.parametrize("width", [1, 2, 3, 5, 8, 13, 40])
def test_lines_fit_width(text, width):
    for _, line in reflow(text, width):
        assert "\n" not in line
        if len(line) > width:
            # Only a dash that overflowed the line may hang into the margin
            assert len(line) == width + 1
            assert line[-1] in DASHES


def test_hard_break_line_is_exactly_width():
    for _, line in reflow("x" * 23, 7)[:-1]:
        assert len(line) == 7
