"""
This module provides the ToolLocator class to find the external tools the
pipeline drives, ffmpeg and ffprobe, and to report their versions.
"""
import shutil
import subprocess
import sys
from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger

from ..domain.exceptions import ToolNotFoundError

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"


@lru_cache(maxsize=None)
def tool_version(executable: str) -> Optional[str]:
    """
    Returns the first line of `<executable> -version`, or None if it cannot run.

    The result is cached per executable for the lifetime of the process.
    """
    try:
        result = subprocess.run(
            [executable, "-version"],
            check=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"'{executable} -version' failed (return code {e.returncode}):\n{e.stderr}")
        return None
    except OSError as e:
        logger.error(f"Could not run '{executable}': {e}")
        return None

    lines = result.stdout.splitlines()
    return lines[0] if lines else ""


class ToolLocator:
    """
    Resolves the ffmpeg and ffprobe executables.

    A directory given in the user config (`paths.ffmpeg_dir`), the
    `ARCHIVAL_FFMPEG_DIR` environment variable or `--ffmpeg-dir` takes
    priority. Otherwise the executables are looked up on the system PATH.
    """

    def __init__(self, tool_dir: Optional[Path] = None):
        self.tool_dir = tool_dir

    @staticmethod
    def executable_name(tool: str) -> str:
        return f"{tool}.exe" if sys.platform == "win32" else tool

    def resolve(self, tool: str) -> str:
        """
        Determines the path of an executable.

        Args:
            tool: The bare tool name, "ffmpeg" or "ffprobe".

        Returns:
            The absolute path to the executable.

        Raises:
            ToolNotFoundError: If the tool is neither in the configured directory
                               nor on the PATH.
        """
        exe_name = self.executable_name(tool)

        if self.tool_dir:
            configured_path = Path(self.tool_dir) / exe_name
            if configured_path.is_file():
                logger.debug(f"Using {tool} from configured path: '{configured_path}'")
                return str(configured_path)
            logger.warning(
                f"ffmpeg_dir is configured, but '{exe_name}' was not found in '{self.tool_dir}'. Falling back to system PATH."
            )

        found = shutil.which(tool)
        if found:
            return found

        raise ToolNotFoundError(
            f"{tool} not found. Install FFmpeg and add it to your PATH, "
            f"or set 'paths.ffmpeg_dir' in config.user.yaml."
        )

    @property
    def ffmpeg(self) -> str:
        return self.resolve(FFMPEG)

    @property
    def ffprobe(self) -> str:
        return self.resolve(FFPROBE)

    def verify(self):
        """
        Checks that both tools resolve and can run, logging their versions.

        Raises:
            ToolNotFoundError: If either tool is missing or does not run.
        """
        for executable in (self.ffmpeg, self.ffprobe):
            version = tool_version(executable)
            if version is None:
                raise ToolNotFoundError(f"'{executable}' was found but could not be executed.")
            logger.info(f"Using {version} ({executable})")
