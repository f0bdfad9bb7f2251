"""Track metadata model exposed to sort scripts."""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union


@dataclass(frozen=True, slots=True)
class CommentFrame:
    """A free-form field stored as a (description, text) pair.

    ID3 ``TXXX``/``COMM`` frames and MP4 freeform atoms persist custom tags
    this way instead of as a flat key.
    """
    description: str
    text: str


@dataclass(frozen=True, slots=True)
class Picture:
    """Embedded artwork information."""
    mime_type: str = ""
    picture_type: str = "Cover (front)"
    description: str = ""
    size: int = 0

    @property
    def extension(self) -> str:
        """Get the image extension derived from the MIME type."""
        if "/" in self.mime_type:
            subtype = self.mime_type.split("/", 1)[1].lower()
            return "jpg" if subtype == "jpeg" else subtype
        return ""

    def __str__(self) -> str:
        return (
            f"Picture{{Ext: {self.extension}, MIMEType: {self.mime_type}, "
            f"Type: {self.picture_type}, Description: {self.description}, "
            f"Data.Size: {self.size}}}"
        )


CustomValue = Union[str, CommentFrame]


@dataclass(frozen=True, slots=True)
class TrackMetadata:
    """Read-only view over the tags of one audio file."""

    artist: str = ""
    album: str = ""
    title: str = ""
    album_artist: str = ""
    composer: str = ""
    year: Optional[int] = None
    genre: str = ""
    track_number: Optional[int] = None
    disc_number: Optional[int] = None
    picture: Optional[Picture] = None
    lyrics: str = ""
    comment: str = ""
    custom: Dict[str, CustomValue] = field(default_factory=dict)
    file_type: str = "UNKNOWN"

    @property
    def has_picture(self) -> bool:
        return self.picture is not None
