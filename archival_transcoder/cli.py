"""
Command-Line Interface (CLI) setup for the Archival Transcoder.

This module uses Python's `argparse` to define and parse the command-line
arguments. Transcode options left unset fall back to the environment, the
YAML user config and finally the built-in defaults (see `config.settings`).
"""
import argparse
from typing import List, Optional

from .config.common import DEFAULT_LOG_LEVEL, LOG_LEVELS


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the Archival Transcoder.

    Args:
        argv: The arguments to parse; defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments. Transcode options that were
                            not given are None.
    """
    parser = argparse.ArgumentParser(
        prog="archival-transcoder",
        description="Transcode videos to a target resolution and replace the originals once the output checks out.",
    )
    parser.add_argument(
        "target_dir", nargs="?", default=None,
        help="Directory to scan, or a single video file (default: current directory).",
    )
    parser.add_argument(
        "--resolution", type=int, default=None,
        help="Target video height in pixels (default: 720).",
    )
    parser.add_argument(
        "--crf", type=int, default=None, help="Constant rate factor for the encoder (default: 25)."
    )
    parser.add_argument(
        "--encoder", type=str, default=None, help="ffmpeg video encoder (default: libx265)."
    )
    parser.add_argument(
        "--preset", type=str, default=None, help="Encoder preset (default: faster)."
    )
    parser.add_argument(
        "--keep-original", action="store_true",
        help="Keep the original next to the transcoded file instead of replacing it.",
    )
    parser.add_argument(
        "--recursive", action="store_true", help="Also scan subdirectories."
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Probe and plan every file, but do not encode anything.",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="YAML user config to read instead of config.user.yaml.",
    )
    parser.add_argument(
        "--ffmpeg-dir", type=str, default=None,
        help="Directory containing the ffmpeg and ffprobe executables.",
    )
    parser.add_argument(
        "--report-dir", type=str, default=None,
        help="Write transcode_log.yaml, transcode_errors.txt and cmd.txt to this directory.",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default=DEFAULT_LOG_LEVEL, choices=LOG_LEVELS,
        help="Set the logging level.",
    )

    return parser.parse_args(argv)
