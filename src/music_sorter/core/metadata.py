"""Metadata reading for audio files using mutagen."""

import base64
import re
from collections import OrderedDict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from mutagen import File as MutagenFile
from mutagen.flac import FLAC, Picture as FLACPicture
from mutagen.id3 import ID3
from mutagen.mp4 import MP4, MP4Cover

from ..exceptions import MetadataError
from ..models.track import CommentFrame, CustomValue, Picture, TrackMetadata

FILE_TYPES = {
    '.flac': 'FLAC',
    '.mp3': 'MP3',
    '.wav': 'WAV',
    '.ogg': 'OGG',
    '.opus': 'OPUS',
    '.m4a': 'MP4',
    '.mp4': 'MP4',
    '.aac': 'MP4',
    '.aiff': 'AIFF',
    '.aif': 'AIFF',
}

PICTURE_TYPES = {
    0: "Other",
    1: "File icon",
    2: "Other file icon",
    3: "Cover (front)",
    4: "Cover (back)",
    5: "Leaflet page",
    6: "Media (e.g. label side of CD)",
    7: "Lead artist/lead performer/soloist",
    8: "Artist/performer",
}

MP4_FREEFORM_PREFIX = "----:"
VORBIS_PICTURE_KEY = "METADATA_BLOCK_PICTURE"


class MetadataReader:
    """Read the tags of an audio file into a TrackMetadata view."""

    @staticmethod
    def read(file_path: Path) -> TrackMetadata:
        """Read metadata from an audio file.

        Raises:
            MetadataError: If the file cannot be opened or parsed
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise MetadataError(f"File does not exist: {file_path}")

        file_type = FILE_TYPES.get(file_path.suffix.lower(), 'UNKNOWN')

        try:
            mutagen_file = MutagenFile(file_path)
        except Exception as e:
            raise MetadataError(f"Failed to read metadata from {file_path}: {e}")

        if mutagen_file is None:
            raise MetadataError(f"Unsupported file format: {file_path}")

        try:
            if mutagen_file.tags is None:
                return TrackMetadata(file_type=file_type)
            if isinstance(mutagen_file.tags, ID3):
                fields = MetadataReader._read_id3(mutagen_file.tags)
            elif isinstance(mutagen_file, MP4):
                fields = MetadataReader._read_mp4(mutagen_file.tags)
            else:
                fields = MetadataReader._read_vorbis(mutagen_file.tags)
                if isinstance(mutagen_file, FLAC) and mutagen_file.pictures:
                    fields['picture'] = MetadataReader._picture_from_flac(mutagen_file.pictures[0])
                else:
                    fields['picture'] = MetadataReader._picture_from_vorbis(mutagen_file.tags)
        except Exception as e:
            raise MetadataError(f"Failed to read metadata from {file_path}: {e}")

        return TrackMetadata(file_type=file_type, **fields)

    @staticmethod
    def _read_vorbis(tags) -> Dict:
        """Read Vorbis comments (FLAC, Ogg Vorbis, Ogg Opus).

        Keys are kept with the case they were written in.
        """
        grouped: Dict[str, List[str]] = OrderedDict()
        for key, value in tags:
            grouped.setdefault(key, []).append(str(value))

        def first(*keys: str) -> str:
            for key in keys:
                values = tags.get(key)
                if values:
                    return str(values[0])
            return ""

        return {
            'artist': first('ARTIST'),
            'album': first('ALBUM'),
            'title': first('TITLE'),
            'album_artist': first('ALBUMARTIST', 'ALBUM ARTIST'),
            'composer': first('COMPOSER'),
            'year': MetadataReader._parse_year(first('DATE', 'YEAR')),
            'genre': first('GENRE'),
            'track_number': MetadataReader._parse_number(first('TRACKNUMBER')),
            'disc_number': MetadataReader._parse_number(first('DISCNUMBER')),
            'lyrics': first('LYRICS', 'UNSYNCEDLYRICS'),
            'comment': first('COMMENT', 'DESCRIPTION'),
            'custom': {key: "; ".join(values) for key, values in grouped.items()},
        }

    @staticmethod
    def _read_id3(tags: ID3) -> Dict:
        """Read ID3 frames (MP3, WAV, AIFF)."""
        def text(frame_id: str) -> str:
            frame = tags.get(frame_id)
            if frame is not None and getattr(frame, 'text', None):
                return str(frame.text[0])
            return ""

        custom: Dict[str, CustomValue] = {}
        picture = None
        lyrics = ""
        comment = ""

        for key, frame in tags.items():
            frame_id = frame.FrameID
            if frame_id == 'TXXX':
                custom[key] = CommentFrame(frame.desc, "; ".join(str(t) for t in frame.text))
            elif frame_id == 'COMM':
                frame_text = "; ".join(str(t) for t in frame.text)
                custom[key] = CommentFrame(frame.desc, frame_text)
                if not comment:
                    comment = frame_text
            elif frame_id == 'USLT':
                if not lyrics:
                    lyrics = str(frame.text)
            elif frame_id == 'APIC':
                if picture is None:
                    picture = Picture(
                        mime_type=frame.mime,
                        picture_type=PICTURE_TYPES.get(int(frame.type), f"Type {int(frame.type)}"),
                        description=frame.desc,
                        size=len(frame.data),
                    )
            elif getattr(frame, 'text', None):
                custom[frame_id] = "; ".join(str(t) for t in frame.text)

        return {
            'artist': text('TPE1'),
            'album': text('TALB'),
            'title': text('TIT2'),
            'album_artist': text('TPE2'),
            'composer': text('TCOM'),
            'year': MetadataReader._parse_year(text('TDRC') or text('TYER')),
            'genre': text('TCON'),
            'track_number': MetadataReader._parse_number(text('TRCK')),
            'disc_number': MetadataReader._parse_number(text('TPOS')),
            'picture': picture,
            'lyrics': lyrics,
            'comment': comment,
            'custom': custom,
        }

    @staticmethod
    def _read_mp4(tags) -> Dict:
        """Read MP4 atoms (M4A, AAC)."""
        def first(key: str) -> str:
            values = tags.get(key)
            if values:
                return str(values[0])
            return ""

        def pair_number(key: str) -> Optional[int]:
            values = tags.get(key)
            if values and isinstance(values[0], tuple) and values[0][0]:
                return int(values[0][0])
            return None

        custom: Dict[str, CustomValue] = {}
        for key, values in tags.items():
            if key.startswith(MP4_FREEFORM_PREFIX):
                description = key.split(":", 2)[-1]
                custom[key] = CommentFrame(description, "; ".join(MetadataReader._decode(values)))

        picture = None
        covers = tags.get('covr')
        if covers:
            cover = covers[0]
            mime = 'image/png' if cover.imageformat == MP4Cover.FORMAT_PNG else 'image/jpeg'
            picture = Picture(mime_type=mime, size=len(cover))

        return {
            'artist': first('\xa9ART'),
            'album': first('\xa9alb'),
            'title': first('\xa9nam'),
            'album_artist': first('aART'),
            'composer': first('\xa9wrt'),
            'year': MetadataReader._parse_year(first('\xa9day')),
            'genre': first('\xa9gen'),
            'track_number': pair_number('trkn'),
            'disc_number': pair_number('disk'),
            'picture': picture,
            'lyrics': first('\xa9lyr'),
            'comment': first('\xa9cmt'),
            'custom': custom,
        }

    @staticmethod
    def _picture_from_flac(flac_picture) -> Picture:
        return Picture(
            mime_type=flac_picture.mime,
            picture_type=PICTURE_TYPES.get(int(flac_picture.type), f"Type {int(flac_picture.type)}"),
            description=flac_picture.desc,
            size=len(flac_picture.data),
        )

    @staticmethod
    def _picture_from_vorbis(tags) -> Optional[Picture]:
        """Read the first base64 ``METADATA_BLOCK_PICTURE`` of an Ogg stream."""
        blocks = tags.get(VORBIS_PICTURE_KEY)
        if not blocks:
            return None
        return MetadataReader._picture_from_flac(FLACPicture(base64.b64decode(blocks[0])))

    @staticmethod
    def _decode(values: Iterable) -> List[str]:
        decoded = []
        for value in values:
            if isinstance(value, bytes):
                decoded.append(value.decode('utf-8', errors='replace'))
            else:
                decoded.append(str(value))
        return decoded

    @staticmethod
    def _parse_year(date: str) -> Optional[int]:
        """Extract the year from a date string like ``2001-03-12``."""
        year_match = re.match(r'\s*(\d{4})', date or "")
        if year_match:
            return int(year_match.group(1))
        return None

    @staticmethod
    def _parse_number(value: str) -> Optional[int]:
        """Extract the number from strings like ``5`` or ``5/12``."""
        number_match = re.match(r'\s*(\d+)', value or "")
        if number_match:
            return int(number_match.group(1))
        return None
