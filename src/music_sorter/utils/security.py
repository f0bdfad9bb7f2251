"""
Security utilities for file operations.

Validates destinations computed from tag values, which are untrusted input:
a tag holding ``../..`` must not place a file outside the destination root.
"""

from pathlib import Path
from typing import Iterable


class PathValidationError(ValueError):
    """Raised when path validation fails."""
    pass


class SecurityUtils:
    """Security utilities for file operations."""

    @staticmethod
    def validate_destination(path: Path, base_path: Path) -> bool:
        """
        Ensure a destination stays within the base directory.

        Args:
            path: Destination to validate
            base_path: Directory the destination must stay in

        Returns:
            True if the destination is safe

        Raises:
            PathValidationError: If the destination contains suspicious
                segments or escapes the base directory
        """
        path_str = str(path)

        # Check for null bytes (potential exploit)
        if '\x00' in path_str:
            raise PathValidationError("Path contains null bytes")

        relative = path.relative_to(base_path) if path.is_relative_to(base_path) else None
        if relative is None or '..' in relative.parts:
            raise PathValidationError(f"Path escapes destination directory: {path}")

        return True

    @staticmethod
    def is_allowed_file_type(file_name: str, extensions: Iterable[str]) -> bool:
        """
        Check if a file name carries one of the allowed audio extensions.

        Args:
            file_name: Name to check
            extensions: Allowed extensions without the leading dot

        Returns:
            True if file type is allowed
        """
        parts = file_name.split('.')
        if len(parts) < 2:
            return False
        return parts[-1].lower() in {ext.lower() for ext in extensions}
