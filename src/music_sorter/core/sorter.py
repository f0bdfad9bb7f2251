"""Main orchestration logic for sorting a music library with a script."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..exceptions import EnumerationError, FileOperationError, MetadataError, ScriptReadError
from ..models.config import SUMMARY_MODES, SortConfig
from ..script.evaluator import PathEvaluator
from ..script.preprocessor import normalize
from ..utils.security import SecurityUtils
from .metadata import MetadataReader
from .mover import FileMover, build_destination

logger = logging.getLogger(__name__)


@dataclass
class SortReport:
    """Log transcript and counters of one sort run."""
    logs: List[str] = field(default_factory=list)
    processed: int = 0
    completed: int = 0
    errors: int = 0
    destinations: Dict[str, Path] = field(default_factory=dict)

    def log(self, message: str, level: int = logging.INFO) -> None:
        self.logs.append(message)
        logger.log(level, message)


@dataclass
class _PreparedFile:
    relative_path: Path
    full_path: Path
    fragment: str = ""
    error: Optional[MetadataError] = None


class LibrarySorter:
    """Sort the audio files of a source directory into a destination tree."""

    def __init__(
        self,
        config: SortConfig,
        metadata_reader: Optional[MetadataReader] = None,
        file_mover: Optional[FileMover] = None,
    ):
        self.config = config
        self.metadata_reader = metadata_reader or MetadataReader()
        self.file_mover = file_mover or FileMover(config.mode)

    def run_script_file(self, script_path: Path) -> SortReport:
        """Sort using the script stored at ``script_path``.

        Raises:
            ScriptReadError: If the script cannot be read
            EnumerationError: If the source directory cannot be walked
        """
        report = SortReport()
        self._log_start(report)
        try:
            script_text = Path(script_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            report.log(f"Error reading script file {script_path}: {e}", logging.ERROR)
            raise ScriptReadError(f"Cannot read script file {script_path}: {e}", report)
        report.log(f"Successfully read script file: {script_path}")
        return self._sort(script_text, report)

    def run(self, script_text: str) -> SortReport:
        """Sort using a script given as text.

        Raises:
            EnumerationError: If the source directory cannot be walked
        """
        report = SortReport()
        self._log_start(report)
        return self._sort(script_text, report)

    def scan_directory(self, directory: Path) -> List[Path]:
        """List audio files below ``directory`` as relative paths.

        Files come in lexical walk order: the entries of each directory are
        sorted by name and subdirectories are visited where they sort.

        Raises:
            EnumerationError: If the directory or one of its subdirectories
                cannot be listed
        """
        directory = Path(directory)
        try:
            return [path.relative_to(directory) for path in self._walk(directory)]
        except OSError as e:
            raise EnumerationError(f"Error walking through directory {directory}: {e}")

    def _walk(self, directory: Path) -> Iterator[Path]:
        with os.scandir(directory) as entries:
            ordered = sorted(entries, key=lambda entry: entry.name)
        for entry in ordered:
            if entry.is_dir(follow_symlinks=False):
                yield from self._walk(Path(entry.path))
            elif entry.is_file() and SecurityUtils.is_allowed_file_type(entry.name, self.config.audio_extensions):
                yield Path(entry.path)

    def _log_start(self, report: SortReport) -> None:
        report.log(
            f"Starting sort process. Source: {self.config.source_directory}, "
            f"Destination: {self.config.destination_directory}, Mode: {self.file_mover.mode}"
        )

    def _sort(self, script_text: str, report: SortReport) -> SortReport:
        script = normalize(script_text, legacy=self.config.legacy_syntax)
        evaluator = PathEvaluator(script)
        for instruction in evaluator.unreachable:
            report.log(f"Ignoring unreachable script line: {instruction.render()}", logging.WARNING)

        source = self.config.source_directory
        try:
            audio_files = self.scan_directory(source)
        except EnumerationError as e:
            report.log(f"Error getting audio files from {source}: {e}", logging.ERROR)
            e.report = report
            raise
        report.log(f"Found {len(audio_files)} audio files in {source}")

        for prepared in self._prepare_all(audio_files, evaluator):
            self._place(prepared, report)

        summary_mode = SUMMARY_MODES[self.file_mover.mode]
        report.log(
            f"Sort process finished. Processed: {report.processed}, "
            f"Completed ({summary_mode}): {report.completed}, Errors: {report.errors}"
        )
        return report

    def _prepare_all(self, audio_files: List[Path], evaluator: PathEvaluator) -> Iterator[_PreparedFile]:
        """Read metadata and evaluate paths, keeping enumeration order."""
        if self.config.workers <= 1 or len(audio_files) <= 1:
            for relative_path in audio_files:
                yield self._prepare(relative_path, evaluator)
            return

        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            yield from executor.map(lambda path: self._prepare(path, evaluator), audio_files)

    def _prepare(self, relative_path: Path, evaluator: PathEvaluator) -> _PreparedFile:
        prepared = _PreparedFile(relative_path, self.config.source_directory / relative_path)
        try:
            metadata = self.metadata_reader.read(prepared.full_path)
        except MetadataError as e:
            prepared.error = e
            return prepared
        prepared.fragment = evaluator.evaluate(metadata)
        return prepared

    def _place(self, prepared: _PreparedFile, report: SortReport) -> None:
        name = str(prepared.relative_path)
        if prepared.error is not None:
            report.log(f"Error reading metadata from {name}: {prepared.error}", logging.ERROR)
            report.errors += 1
            return

        if not prepared.fragment:
            report.log(f"Skipping file {name} based on script rules (STOP or no path generated).")
            return

        try:
            destination = build_destination(
                self.config.destination_directory,
                prepared.fragment,
                prepared.full_path.suffix,
            )
        except FileOperationError as e:
            report.log(f"Error building destination for {name}: {e}", logging.ERROR)
            report.errors += 1
            return

        report.log(f"Processing: {name} -> {destination}")
        report.processed += 1

        try:
            self.file_mover.place(prepared.full_path, destination)
        except FileOperationError as e:
            report.log(str(e), logging.ERROR)
            report.errors += 1
            return

        if self.file_mover.mode == "move":
            report.log(f"Moved: {name} -> {destination}")
        elif self.file_mover.mode == "copy":
            report.log(f"Copied: {name} -> {destination}")
        else:
            report.log(f"Preview: Would move/copy {name} -> {destination}")
        report.completed += 1
        report.destinations[name] = destination
