"""Tests for the library sorter."""

import logging
import pytest
from pathlib import Path
from unittest.mock import Mock, patch

from music_sorter.core.mover import FileMover
from music_sorter.core.sorter import LibrarySorter, SortReport
from music_sorter.exceptions import EnumerationError, FileOperationError, MetadataError, ScriptReadError
from music_sorter.models.config import SortConfig
from music_sorter.models.track import TrackMetadata

SCRIPT = """\
# sort by artist and album
ADD FOLDER
ARTIST
ADD FOLDER
IF(YEAR is number)
    "["
    YEAR
    "] "
ALBUM
ADD FOLDER
TITLE
"""

TRACKS = {
    "a.mp3": TrackMetadata(artist="Daft Punk", album="Discovery", title="One More Time", year=2001),
    "b.flac": TrackMetadata(artist="Air", album="Moon Safari", title="La femme d'argent"),
    "sub/c.ogg": TrackMetadata(artist="Justice", album="Cross", title="Genesis", year=2007),
}


class FakeReader:
    """Metadata reader keyed by path relative to the source directory."""

    def __init__(self, source: Path, tracks):
        self.source = source
        self.tracks = tracks

    def read(self, file_path):
        relative = Path(file_path).relative_to(self.source).as_posix()
        value = self.tracks[relative]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def library(tmp_path):
    """Create a source tree of fake audio files."""
    source = tmp_path / "source"
    for name in ["a.mp3", "b.flac", "sub/c.ogg", "cover.jpg", "notes.txt"]:
        path = source / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"fake audio data")
    return source


def make_sorter(tmp_path, library, tracks=None, **options):
    config = SortConfig(library, tmp_path / "dest", **options)
    return LibrarySorter(config, metadata_reader=FakeReader(library, tracks or TRACKS))


class TestScanDirectory:
    """Test enumeration of audio files."""

    def test_lexical_order_and_filter(self, tmp_path, library):
        """Test that only audio files are listed, in sorted walk order."""
        sorter = make_sorter(tmp_path, library)

        files = sorter.scan_directory(library)

        assert files == [Path("a.mp3"), Path("b.flac"), Path("sub/c.ogg")]

    def test_subdirectories_visited_in_place(self, tmp_path):
        source = tmp_path / "source"
        for name in ["b.mp3", "a/z.mp3", "c/a.mp3"]:
            path = source / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x")

        files = make_sorter(tmp_path, source).scan_directory(source)

        assert files == [Path("a/z.mp3"), Path("b.mp3"), Path("c/a.mp3")]

    def test_custom_extensions(self, tmp_path, library):
        sorter = make_sorter(tmp_path, library, audio_extensions=[".JPG"])

        assert sorter.scan_directory(library) == [Path("cover.jpg")]

    def test_missing_directory(self, tmp_path):
        sorter = make_sorter(tmp_path, tmp_path / "missing")

        with pytest.raises(EnumerationError, match="Error walking through directory"):
            sorter.scan_directory(tmp_path / "missing")


class TestSortRun:
    """Test complete sort runs."""

    def test_preview(self, tmp_path, library):
        """Test that preview computes destinations without touching files."""
        report = make_sorter(tmp_path, library).run(SCRIPT)
        dest = tmp_path / "dest"

        assert report.processed == 3
        assert report.completed == 3
        assert report.errors == 0
        assert report.destinations["a.mp3"] == dest / "Daft Punk" / "[2001] Discovery" / "One More Time.mp3"
        assert report.destinations["b.flac"] == dest / "Air" / "Moon Safari" / "La femme d'argent.flac"
        assert not dest.exists()
        assert (library / "a.mp3").exists()

    def test_transcript(self, tmp_path, library):
        """Test the order and wording of log lines."""
        report = make_sorter(tmp_path, library).run(SCRIPT)
        dest = tmp_path / "dest"

        assert report.logs[0] == (
            f"Starting sort process. Source: {library}, Destination: {dest}, Mode: preview"
        )
        assert report.logs[1] == f"Found 3 audio files in {library}"
        assert report.logs[2].startswith("Processing: a.mp3 -> ")
        assert report.logs[3].startswith("Preview: Would move/copy a.mp3 -> ")
        assert report.logs[-1] == (
            "Sort process finished. Processed: 3, Completed (previewed): 3, Errors: 0"
        )

    def test_move(self, tmp_path, library):
        report = make_sorter(tmp_path, library, mode="move").run(SCRIPT)
        target = tmp_path / "dest" / "Justice" / "[2007] Cross" / "Genesis.ogg"

        assert target.exists()
        assert not (library / "sub" / "c.ogg").exists()
        assert any(line.startswith("Moved: ") for line in report.logs)
        assert report.logs[-1].endswith("Completed (moved): 3, Errors: 0")

    def test_copy(self, tmp_path, library):
        report = make_sorter(tmp_path, library, mode="copy").run(SCRIPT)

        assert (tmp_path / "dest" / "Air" / "Moon Safari" / "La femme d'argent.flac").exists()
        assert (library / "b.flac").exists()
        assert report.completed == 3

    def test_stop_skips_file(self, tmp_path, library):
        """Test that a skipped file is neither processed nor an error."""
        script = 'IF(ARTIST == "Air")\n\tSTOP\n' + SCRIPT

        report = make_sorter(tmp_path, library).run(script)

        assert "Skipping file b.flac based on script rules (STOP or no path generated)." in report.logs
        assert report.processed == 2
        assert report.errors == 0
        assert "b.flac" not in report.destinations

    def test_metadata_error_counted(self, tmp_path, library):
        tracks = dict(TRACKS, **{"b.flac": MetadataError("corrupt header")})

        report = make_sorter(tmp_path, library, tracks=tracks).run(SCRIPT)

        assert "Error reading metadata from b.flac: corrupt header" in report.logs
        assert report.errors == 1
        assert report.processed == 2

    def test_invalid_destination_counted(self, tmp_path, library):
        """Test that a path escaping the destination is an error, not processed."""
        tracks = dict(TRACKS, **{"a.mp3": TrackMetadata(artist="..", album="..", title="x")})

        report = make_sorter(tmp_path, library, tracks=tracks).run(SCRIPT)

        assert any(line.startswith("Error building destination for a.mp3") for line in report.logs)
        assert report.errors == 1
        assert report.processed == 2

    def test_file_operation_error_counted(self, tmp_path, library):
        """Test that a failed move is processed but not completed."""
        mover = Mock(spec=FileMover)
        mover.mode = "move"
        mover.place.side_effect = [None, FileOperationError("Error moving file"), None]
        config = SortConfig(library, tmp_path / "dest", mode="move")
        sorter = LibrarySorter(config, metadata_reader=FakeReader(library, TRACKS), file_mover=mover)

        report = sorter.run(SCRIPT)

        assert "Error moving file" in report.logs
        assert report.processed == 3
        assert report.completed == 2
        assert report.errors == 1

    def test_injected_mover_mode_used_throughout(self, tmp_path, library):
        """Test that start, per-file and summary lines agree with the mover."""
        config = SortConfig(library, tmp_path / "dest", mode="preview")
        sorter = LibrarySorter(
            config,
            metadata_reader=FakeReader(library, TRACKS),
            file_mover=FileMover("copy"),
        )

        report = sorter.run(SCRIPT)

        assert report.logs[0].endswith("Mode: copy")
        assert any(line.startswith("Copied: a.mp3 -> ") for line in report.logs)
        assert report.logs[-1] == "Sort process finished. Processed: 3, Completed (copied): 3, Errors: 0"

    def test_unreachable_lines_logged(self, tmp_path, library, caplog):
        script = '"Music"\n\t"never"\n'

        with caplog.at_level(logging.WARNING, logger="music_sorter.core.sorter"):
            report = make_sorter(tmp_path, library).run(script)

        assert 'Ignoring unreachable script line: \t"never"' in report.logs
        assert "Ignoring unreachable script line" in caplog.text

    def test_workers_keep_order(self, tmp_path, library):
        """Test that parallel reads give the same transcript as serial reads."""
        serial = make_sorter(tmp_path, library).run(SCRIPT)
        parallel = make_sorter(tmp_path, library, workers=4).run(SCRIPT)

        assert parallel.logs == serial.logs

    def test_legacy_syntax(self, tmp_path, library):
        script = '"Vol. #1"\nADD FOLDER\nTITLE'

        report = make_sorter(tmp_path, library, legacy_syntax=True).run(script)

        assert report.destinations["a.mp3"] == tmp_path / "dest" / "Vol." / "One More Time.mp3"


class TestFatalErrors:
    """Test errors that abort a run."""

    def test_missing_script_file(self, tmp_path, library):
        sorter = make_sorter(tmp_path, library)

        with pytest.raises(ScriptReadError) as exc_info:
            sorter.run_script_file(tmp_path / "missing.script")

        report = exc_info.value.report
        assert isinstance(report, SortReport)
        assert report.logs[0].startswith("Starting sort process.")
        assert report.logs[1].startswith("Error reading script file")

    def test_script_file(self, tmp_path, library):
        script_path = tmp_path / "library.script"
        script_path.write_text(SCRIPT)

        report = make_sorter(tmp_path, library).run_script_file(script_path)

        assert report.logs[1] == f"Successfully read script file: {script_path}"
        assert report.completed == 3

    def test_missing_source_directory(self, tmp_path):
        sorter = make_sorter(tmp_path, tmp_path / "missing")

        with pytest.raises(EnumerationError) as exc_info:
            sorter.run(SCRIPT)

        logs = exc_info.value.report.logs
        assert logs[-1].startswith(f"Error getting audio files from {tmp_path / 'missing'}")

    def test_enumeration_error_from_subdirectory(self, tmp_path, library):
        """Test that a walk error in a subdirectory aborts the run."""
        sorter = make_sorter(tmp_path, library)

        with patch("music_sorter.core.sorter.os.scandir", side_effect=PermissionError("denied")):
            with pytest.raises(EnumerationError):
                sorter.run(SCRIPT)
