"""
Provides the discovery of candidate files for a run.

The scan happens once at startup; the resulting list is a snapshot. Files that
disappear before their turn are detected later by the pipeline.
"""

from pathlib import Path
from typing import Tuple

from loguru import logger

from ..config.video import PROCESSED_NAME_MARKER, VIDEO_EXTENSIONS
from ..utils.format_utils import formatted_size


def is_candidate(path: Path) -> bool:
    """True for a video container that this tool did not write itself."""
    if path.suffix.lower() not in VIDEO_EXTENSIONS:
        return False
    return PROCESSED_NAME_MARKER not in path.name.lower()


class VideoFileScanner:
    """
    Finds the video files to process under a path.

    Attributes:
        source_dir (Path | None): The directory scanned, or None if the input path is invalid.
        files (Tuple[Path, ...]): The sorted candidate files.
    """

    files: Tuple[Path, ...] = tuple()
    source_dir: Path | None = None

    def __init__(self, path: Path, recursive: bool = False):
        """
        Scans `path` for candidates.

        Args:
            path: A directory to scan, or a single file to process on its own.
            recursive: Descend into subdirectories.
        """
        self.recursive = recursive
        resolved_path = path.expanduser().resolve()

        if not resolved_path.exists():
            logger.error(f"Input path does not exist: {resolved_path}")
            return

        if resolved_path.is_file():
            self.source_dir = resolved_path.parent
            if is_candidate(resolved_path):
                self.files = (resolved_path,)
            else:
                logger.warning(f"{resolved_path.name} is not a video container this tool processes.")
            return

        self.source_dir = resolved_path
        self.files = self._scan()

    def _scan(self) -> Tuple[Path, ...]:
        pattern_iter = self.source_dir.rglob("*") if self.recursive else self.source_dir.iterdir()
        found = sorted(p for p in pattern_iter if p.is_file() and is_candidate(p))

        total_size = sum(p.stat().st_size for p in found)
        logger.info(
            f"Found {len(found)} video file(s) in {self.source_dir} "
            f"({formatted_size(total_size)}{', recursive' if self.recursive else ''})"
        )
        return tuple(found)
