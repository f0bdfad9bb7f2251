"""File operations for placing sorted music files."""

import shutil
from pathlib import Path
from typing import List, Optional

from ..exceptions import FileOperationError
from ..models.config import normalize_mode
from ..utils.security import PathValidationError, SecurityUtils

FOLDER_SEPARATOR = "/"


def build_destination(root: Path, fragment: str, extension: str) -> Path:
    """Join a script path fragment onto the destination root.

    The fragment uses ``/`` between folders. Empty segments are dropped, so a
    leading or doubled separator has no effect, and the original extension is
    appended to the last segment.

    Raises:
        FileOperationError: If the fragment names no file or escapes the root
    """
    parts = [part for part in fragment.split(FOLDER_SEPARATOR) if part]
    if not parts:
        raise FileOperationError(f"Path fragment {fragment!r} does not name a file")

    parts[-1] = parts[-1] + extension
    destination = Path(root).joinpath(*parts)
    try:
        SecurityUtils.validate_destination(destination, Path(root))
    except PathValidationError as e:
        raise FileOperationError(str(e))
    return destination


class FileMover:
    """Move, copy or preview files into the sorted library."""

    def __init__(self, mode: str = "preview"):
        self.mode = normalize_mode(mode)
        self.operations: List[dict] = []

    @property
    def dry_run(self) -> bool:
        return self.mode == "preview"

    def place(self, source: Path, destination: Path) -> Optional[Path]:
        """Place one file at its destination according to the mode.

        Returns:
            The destination path, or None in preview mode

        Raises:
            FileOperationError: If a directory cannot be created or the file
                cannot be moved or copied
        """
        if self.dry_run:
            return None

        destination_dir = destination.parent
        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Error creating directory {destination_dir}: {e}")

        if self.mode == "move":
            self.move_file(source, destination)
        else:
            self.copy_file(source, destination)

        self.operations.append({
            'type': self.mode,
            'original': str(source),
            'target': str(destination),
        })
        return destination

    def move_file(self, source: Path, destination: Path) -> None:
        try:
            shutil.move(str(source), str(destination))
        except (OSError, shutil.Error) as e:
            raise FileOperationError(f"Error moving file {source} to {destination}: {e}")

    def copy_file(self, source: Path, destination: Path) -> None:
        if not source.is_file():
            raise FileOperationError(f"{source} is not a regular file")
        try:
            shutil.copy2(str(source), str(destination))
        except (OSError, shutil.Error) as e:
            raise FileOperationError(f"Error copying file {source} to {destination}: {e}")
