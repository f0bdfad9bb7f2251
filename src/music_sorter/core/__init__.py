"""Core music sorter modules."""

from .metadata import MetadataReader
from .mover import FileMover, build_destination
from .sorter import LibrarySorter, SortReport

__all__ = [
    'MetadataReader',
    'FileMover',
    'build_destination',
    'LibrarySorter',
    'SortReport',
]
