"""Persistence of the last-read position.

The position is a three-line record (document path, chapter, line) kept in
the user's data directory, so the next run can reopen the same book at the
same place.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import NamedTuple, Optional

import platformdirs

from .constants import ReaderConstants

logger = logging.getLogger(__name__)


class PositionError(Exception):
    """The position could not be written back."""


class Position(NamedTuple):
    path: str
    chapter: int = 0
    line: int = 0


class PositionStore:
    """Reads and writes the last-read position record."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize the store in ``data_dir`` or the platform data directory."""
        if data_dir is None:
            data_dir = Path(platformdirs.user_data_dir(ReaderConstants.APP_NAME))
        self._data_dir = Path(data_dir)
        self._position_file = self._data_dir / ReaderConstants.POSITION_FILE

    def load(self) -> Optional[Position]:
        """Load the saved record.

        Returns:
            The saved Position, or None if there is no usable record.
            A corrupt record is logged and treated as missing.
        """
        if not self._position_file.exists():
            return None
        try:
            text = self._position_file.read_text(encoding='utf-8')
        except OSError as e:
            logger.warning(f"Could not read position from {self._position_file}: {e}")
            return None

        fields = text.split('\n')
        try:
            path, chapter, line = fields[0], int(fields[1]), int(fields[2])
        except (IndexError, ValueError):
            logger.warning(f"Position file {self._position_file} is corrupt, ignoring")
            return None
        if not path or chapter < 0 or line < 0:
            logger.warning(f"Position file {self._position_file} is corrupt, ignoring")
            return None
        return Position(path, chapter, line)

    def restore(self, document_path: Optional[str]) -> Optional[Position]:
        """Decide where to start reading.

        Args:
            document_path: The book asked for on the command line, if any.

        Returns:
            The saved position when it belongs to ``document_path`` (or when no
            path was given), the start of ``document_path`` otherwise, and None
            when there is neither a path nor a saved record.
        """
        saved = self.load()
        if document_path is None:
            return saved
        requested = os.path.abspath(document_path)
        if saved is not None and saved.path == requested:
            logger.info(f"Restoring {requested} at chapter {saved.chapter}, line {saved.line}")
            return saved
        return Position(requested)

    def save(self, position: Position) -> None:
        """Write the record atomically (temp file + rename).

        Raises:
            PositionError: if the record could not be written.
        """
        temp_file = self._position_file.with_suffix('.tmp')
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(f"{position.path}\n{position.chapter}\n{position.line}")
            temp_file.replace(self._position_file)
        except OSError as e:
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            raise PositionError(str(e)) from e
        logger.info(f"Saved position {position.chapter}:{position.line} for {position.path}")


# Global instance
_store: Optional[PositionStore] = None


def get_store() -> PositionStore:
    """Get the global position store instance."""
    global _store
    if _store is None:
        _store = PositionStore()
    return _store
