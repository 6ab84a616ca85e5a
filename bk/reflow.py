"""Greedy line reflow that remembers where each line starts in the text."""

# Characters that may end a line, with the break placed after them
DASHES = ("-", "—")


def char_width(ch: str) -> int:
    """Display columns occupied by ``ch``.

    Every character is treated as one column wide; wide glyphs and
    combining marks are not measured.
    """
    return 1


def reflow(text: str, width: int) -> list[tuple[int, str]]:
    """Wrap ``text`` into lines of at most ``width`` columns.

    Returns a list of (offset, line) pairs, where offset is the index in
    ``text`` at which the line starts. Offsets are strictly increasing.

    Lines break before a space (the space is dropped) or after a hyphen or
    em-dash (the dash stays on the line). A newline always ends the line and
    is never part of the output. A run with no break point that is longer
    than ``width`` is cut hard at exactly ``width`` characters.

    A dash that is itself the character overflowing the line still counts
    as a break point, so such a line is ``width + 1`` long, ending in the
    dash.
    """
    if width < 1:
        raise ValueError(f"width must be at least 1, got {width}")

    lines: list[tuple[int, str]] = []
    start = 0  # offset where the current line begins
    last_break = 0  # offset of the most recent break point
    skip = 0  # characters dropped at last_break (1 for a space)
    line_len = 0  # columns since start
    run_len = 0  # columns since the last break point

    for i, ch in enumerate(text):
        if ch == " ":
            last_break = i
            skip = 1
            run_len = 0
        elif ch in DASHES:
            # line_len <= width here: an overflow always breaks at once
            last_break = i + 1
            skip = 0
            run_len = 0
        else:
            run_len += char_width(ch)
        line_len += char_width(ch)

        if ch == "\n":
            lines.append((start, text[start:i]))
            start = i + 1
            line_len = 0
            run_len = 0
        elif line_len > width:
            if run_len == line_len:
                # No break point on this line: cut before the current char
                lines.append((start, text[start:i]))
                start = i
                line_len = run_len = char_width(ch)
            else:
                lines.append((start, text[start:last_break]))
                start = last_break + skip
                line_len = run_len

    # Flush the last line when the text does not end in a newline
    if start < len(text):
        lines.append((start, text[start:]))

    return lines
