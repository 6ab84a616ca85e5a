"""Constants and configuration for the bk reader."""

class ReaderConstants:
    """Central configuration constants for the reader."""

    # Layout
    MAX_WIDTH = 75  # Widest reflow width regardless of terminal size

    # Highlighting. Views wrap highlighted text in these markers; the
    # terminal swaps them for reverse video when drawing.
    HIGHLIGHT_ON = "\x0e"  # ASCII shift-out, never present in reflowed text
    HIGHLIGHT_OFF = "\x0f"  # ASCII shift-in

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Position persistence
    APP_NAME = "bk"
    POSITION_FILE = "position"

    # Messages
    USAGE_MESSAGE = "usage: bk path"
    LOAD_ERROR_MESSAGE = "error reading epub: {}"
    SAVE_ERROR_MESSAGE = "error saving position: {}"
