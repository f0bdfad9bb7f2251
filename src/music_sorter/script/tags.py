"""Resolution of script tag names against track metadata."""

import logging
from enum import Enum
from typing import Optional

from ..models.track import CommentFrame, TrackMetadata

logger = logging.getLogger(__name__)

CUSTOM_PREFIXES = ("CUSTOM:", "TXXX:")


class StandardTag(Enum):
    """Tags with a dedicated metadata field."""
    ARTIST = "ARTIST"
    ALBUM = "ALBUM"
    TITLE = "TITLE"
    ALBUMARTIST = "ALBUMARTIST"
    COMPOSER = "COMPOSER"
    YEAR = "YEAR"
    GENRE = "GENRE"
    TRACK = "TRACK"
    DISC = "DISC"
    PICTURE = "PICTURE"
    LYRICS = "LYRICS"
    COMMENT = "COMMENT"

    @classmethod
    def lookup(cls, name: str) -> Optional["StandardTag"]:
        """Find a standard tag by (case-insensitive) name."""
        try:
            return cls(name.strip().upper())
        except ValueError:
            return None


def _number(value: Optional[int]) -> str:
    return "" if value is None else str(value)


_GETTERS = {
    StandardTag.ARTIST: lambda m: m.artist,
    StandardTag.ALBUM: lambda m: m.album,
    StandardTag.TITLE: lambda m: m.title,
    StandardTag.ALBUMARTIST: lambda m: m.album_artist,
    StandardTag.COMPOSER: lambda m: m.composer,
    StandardTag.YEAR: lambda m: _number(m.year),
    StandardTag.GENRE: lambda m: m.genre,
    StandardTag.TRACK: lambda m: _number(m.track_number),
    StandardTag.DISC: lambda m: _number(m.disc_number),
    StandardTag.PICTURE: lambda m: str(m.picture) if m.picture is not None else "",
    StandardTag.LYRICS: lambda m: m.lyrics,
    StandardTag.COMMENT: lambda m: m.comment,
}


def _lookup_flat(metadata: TrackMetadata, key: str) -> str:
    value = metadata.custom.get(key)
    return value if isinstance(value, str) else ""


def resolve_custom(name: str, metadata: TrackMetadata) -> str:
    """Resolve a free-form tag.

    Formats disagree on how custom tags are stored: Vorbis comments keep flat
    keys whose case depends on the tagging software (ID3v2.3 writers often
    upper-case ``group`` to ``GROUP``), while ID3v2.4 and MP4 keep
    (description, text) pairs. Flat keys are probed as written, upper-cased
    and lower-cased before descriptions are compared.
    """
    for key in (name, name.upper(), name.lower()):
        value = _lookup_flat(metadata, key)
        if value:
            return value

    for value in metadata.custom.values():
        if isinstance(value, CommentFrame) and value.description == name:
            return value.text
    return ""


def resolve(tag_name: str, metadata: TrackMetadata) -> str:
    """Resolve a tag name to its string value for one file.

    An empty string means the tag is absent or unknown; resolution never
    fails.
    """
    for prefix in CUSTOM_PREFIXES:
        if tag_name.startswith(prefix):
            return resolve_custom(tag_name[len(prefix):].strip(), metadata)

    tag = StandardTag.lookup(tag_name)
    if tag is None:
        logger.debug(f"Unknown tag: {tag_name.strip().upper()}")
        return ""
    return _GETTERS[tag](metadata)
