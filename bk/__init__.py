"""bk - A terminal EPUB reader."""

from .model import Chapter, Cursor, Document
from .reflow import reflow
from .search import Direction, search
from .views import Mode, Session, handle, render

__all__ = [
    'Chapter',
    'Cursor',
    'Document',
    'reflow',
    'Direction',
    'search',
    'Mode',
    'Session',
    'handle',
    'render',
]
