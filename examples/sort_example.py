#!/usr/bin/env python3
"""Example demonstrating a preview sort run."""

from pathlib import Path

from music_sorter.core.sorter import LibrarySorter
from music_sorter.exceptions import SortAbortedError
from music_sorter.models.config import SortConfig


def main():
    """Preview where each file of a library would go."""
    # Setup paths
    source_dir = Path("/path/to/your/music")
    target_dir = Path("/path/to/sorted/music")
    script_path = Path(__file__).parent / "artist_album.script"

    # Preview only; use "move" or "copy" to touch files
    config = SortConfig(
        source_directory=source_dir,
        destination_directory=target_dir,
        mode="preview",
        workers=4,
    )

    sorter = LibrarySorter(config)
    try:
        report = sorter.run_script_file(script_path)
    except SortAbortedError as e:
        for line in e.report.logs if e.report else []:
            print(line)
        print(f"\nSort aborted: {e}")
        return

    for line in report.logs:
        print(line)

    print(f"\nWould place {report.completed} files, {report.errors} errors")


if __name__ == "__main__":
    main()
