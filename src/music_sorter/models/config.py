"""Configuration model for music sorter."""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List

from ..exceptions import ConfigurationError

FILE_OPERATION_MODES = ("preview", "move", "copy")
DEFAULT_AUDIO_EXTENSIONS = ["mp3", "ogg", "flac", "wav", "opus"]
SUMMARY_MODES = {"preview": "previewed", "move": "moved", "copy": "copied"}


def normalize_mode(mode: str) -> str:
    """Return a valid file operation mode, falling back to preview."""
    mode = (mode or "").strip().lower()
    return mode if mode in FILE_OPERATION_MODES else "preview"


@dataclass
class SortConfig:
    """Main configuration model."""
    source_directory: Path
    destination_directory: Path
    mode: str = "preview"
    audio_extensions: List[str] = field(default_factory=lambda: list(DEFAULT_AUDIO_EXTENSIONS))
    legacy_syntax: bool = False
    workers: int = 1

    def __post_init__(self):
        self.source_directory = Path(self.source_directory)
        self.destination_directory = Path(self.destination_directory)
        self.mode = normalize_mode(self.mode)
        self.audio_extensions = [ext.lower().lstrip(".") for ext in self.audio_extensions]
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")

    @property
    def summary_mode(self) -> str:
        """Past-tense mode name used in the run summary."""
        return SUMMARY_MODES[self.mode]


def _config_to_dict(config: SortConfig) -> Dict[str, Any]:
    """Convert config to a JSON-serializable dict."""
    result = {}
    for key, value in asdict(config).items():
        result[key] = str(value) if isinstance(value, Path) else value
    return result


def load_config(config_path: Path, **overrides: Any) -> SortConfig:
    """Load configuration from JSON file.

    Keyword overrides replace values from the file, so a caller that already
    knows the directories does not need them repeated in the file.
    """
    try:
        with open(config_path, 'r') as f:
            config_data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot load configuration from {config_path}: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration root must be an object: {config_path}")

    known = {f.name for f in fields(SortConfig)}
    unknown = set(config_data) - known
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    try:
        return SortConfig(**{**config_data, **overrides})
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def save_config(config: SortConfig, config_path: Path) -> None:
    """Save configuration to JSON file."""
    with open(config_path, 'w') as f:
        json.dump(_config_to_dict(config), f, indent=2)
