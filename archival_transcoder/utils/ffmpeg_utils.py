"""
This module provides utility functions for running external tools like FFmpeg.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from loguru import logger


def display_command(cmd_list: List[str]) -> str:
    """Quotes and joins a command list the way the current platform's shell would read it."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def run_cmd(
    cmd_list: List[str],
    show_cmd: bool = False,
    cmd_log_file_path: Optional[Path] = None,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and captures its output.

    A wrapper around `subprocess.run` that adds logging. The call blocks until
    the process exits; there is no timeout.

    Args:
        cmd_list: The command to execute as a list of arguments.
        show_cmd: If True, the command is logged at the DEBUG level before execution.
        cmd_log_file_path: If provided, the command line is appended to this file.

    Returns:
        A `subprocess.CompletedProcess` with the return code, stdout and stderr.
        Returns `None` if the process could not be started (e.g., the
        executable does not exist).
    """
    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = display_command(cmd_list)
    if show_cmd:
        logger.debug(f"Executing: {display_cmd_str}")

    if cmd_log_file_path:
        try:
            cmd_log_file_path.parent.mkdir(parents=True, exist_ok=True)
            with cmd_log_file_path.open("a", encoding="utf-8") as cmd_f:
                cmd_f.write(display_cmd_str + "\n")
        except OSError as e:
            logger.error(f"Failed to write command to log file {cmd_log_file_path}: {e}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
        )
    except FileNotFoundError:
        logger.error(
            f"Command not found: '{cmd_list[0]}'. Ensure it's in your system's PATH or configured correctly."
        )
        return None
    except OSError as e:
        logger.error(f"Could not start '{cmd_list[0]}': {e}")
        return None

    if result.stdout:
        logger.trace(f"Command stdout: {result.stdout[:500]}")

    # ffmpeg writes progress and warnings to stderr even on success.
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (rc={result.returncode}): {result.stderr[-2000:]}")
    elif result.stderr:
        logger.trace(f"Command stderr (rc={result.returncode}): {result.stderr[-500:]}")

    return result
