"""Data models for music sorter."""

from .track import CommentFrame, Picture, TrackMetadata
from .config import SortConfig

__all__ = ["CommentFrame", "Picture", "TrackMetadata", "SortConfig"]
