"""File output manager for site artifacts.

Every filesystem mutation of a build goes through OutputManager. In compose
mode all of its methods are no-ops, so the same pipeline code runs in both
modes and only the writes differ.
"""

import logging
import os
import shutil
import tempfile
from enum import Enum
from pathlib import Path

from podsite.utils.errors import SecurityError

logger = logging.getLogger(__name__)


class WriteMode(str, Enum):
    """Execution mode, fixed for a whole run."""

    COMPOSE = "compose"
    PUBLISH = "publish"


class OutputManager:
    """Write site artifacts under an output directory.

    Handles:
    - Write gating (compose mode never touches disk)
    - Path confinement (no writes outside the output directory)
    - Atomic file writes (write to temp, then move)
    - Clearing generated directories before a publish

    Example:
        >>> manager = OutputManager(Path("docs"), WriteMode.PUBLISH)
        >>> manager.write_text("chapters/s1e1.json", "{}\\n")
        PosixPath('docs/chapters/s1e1.json')
    """

    def __init__(self, output_dir: Path, mode: WriteMode = WriteMode.COMPOSE):
        """Initialize output manager.

        Args:
            output_dir: Base output directory
            mode: Execution mode
        """
        self.output_dir = output_dir
        self.mode = mode
        self.written: list[Path] = []

    @property
    def writes_enabled(self) -> bool:
        """Whether this run may modify the filesystem."""
        return self.mode is WriteMode.PUBLISH

    def resolve(self, relative_path: str | Path) -> Path:
        """Map a relative artifact path into the output directory.

        Raises:
            SecurityError: If the path resolves outside the output directory
        """
        relative = str(relative_path).replace("\0", "").lstrip("/")
        if not relative.strip():
            raise SecurityError("Empty output path")

        target = self.output_dir / relative

        try:
            target.resolve().relative_to(self.output_dir.resolve())
        except ValueError:
            raise SecurityError(
                f"Invalid output path: {relative_path}. "
                f"It resolves outside {self.output_dir}."
            )

        return target

    def exists(self, relative_path: str | Path) -> bool:
        """Whether an artifact already exists."""
        return self.resolve(relative_path).exists()

    def reset_directory(self, relative_path: str | Path) -> Path | None:
        """Delete and recreate a generated directory.

        Returns:
            The directory path, or None in compose mode

        Raises:
            SecurityError: If the path is outside, or is, the output directory
        """
        target = self.resolve(relative_path)
        if target.resolve() == self.output_dir.resolve():
            raise SecurityError("Refusing to reset the output directory itself")

        if not self.writes_enabled:
            logger.debug(f"Compose mode: not resetting {target}")
            return None

        if target.is_symlink():
            raise SecurityError(
                f"{target} is a symlink. Refusing to delete it."
            )
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True, exist_ok=True)
        return target

    def write_text(
        self, relative_path: str | Path, content: str, overwrite: bool = True
    ) -> Path | None:
        """Write a text artifact.

        Args:
            relative_path: Path relative to the output directory
            content: File content
            overwrite: If False, an existing file is kept as is

        Returns:
            The written path, or None if nothing was written

        Raises:
            SecurityError: If the path escapes the output directory
            OSError: If the write fails
        """
        target = self.resolve(relative_path)

        if not self.writes_enabled:
            logger.debug(f"Compose mode: not writing {target}")
            return None

        if not overwrite and target.exists():
            logger.debug(f"Keeping existing {target}")
            return None

        target.parent.mkdir(parents=True, exist_ok=True)
        self._write_file_atomic(target, content)
        self.written.append(target)
        return target

    def _write_file_atomic(self, file_path: Path, content: str) -> None:
        """Write file atomically.

        Content goes to a temp file in the same directory, is synced to disk,
        then renamed over the target.

        Args:
            file_path: Target file path
            content: File content

        Raises:
            OSError: If write or sync fails
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=file_path.parent, prefix=".tmp_", suffix=file_path.suffix
        )

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            # mkstemp creates 0600 files; published pages must be world-readable
            os.chmod(temp_path, 0o644)
            Path(temp_path).replace(file_path)
        except Exception:
            Path(temp_path).unlink(missing_ok=True)
            raise
