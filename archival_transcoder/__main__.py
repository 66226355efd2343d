"""
Main entry point for the Archival Transcoder.

Parses the command line, configures logging and settings, checks the external
tools, scans the target and runs the transcode pipeline. The process exit
status is 1 if any file failed, 0 otherwise.
"""

import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .cli import get_args
from .config.common import LOGGER_FORMAT
from .config.settings import load_settings
from .domain.exceptions import ConfigurationError, ToolNotFoundError
from .pipeline.transcode_pipeline import build_pipeline, exit_status, summarize
from .services.file_processing_service import VideoFileScanner
from .utils.tool_locator import ToolLocator

EXIT_STARTUP_ERROR = 2


def configure_logger(level: str):
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs one transcode pass.

    Returns:
        0 when every file was transcoded or skipped, 1 when any file failed,
        2 when the run could not start (bad settings or missing tools).
    """
    args = get_args(argv)
    configure_logger(args.log_level)
    logger.debug(f"Parsed arguments: {args}")

    try:
        settings = load_settings(args)
        tools = ToolLocator(settings.tool_dir)
        tools.verify()
    except (ConfigurationError, ToolNotFoundError) as e:
        logger.error(str(e))
        return EXIT_STARTUP_ERROR

    target = Path(args.target_dir).resolve() if args.target_dir else Path.cwd().resolve()
    logger.info(
        f"Transcoding {target} to {settings.target_height}p with {settings.encoder} "
        f"(crf {settings.crf}, preset {settings.preset}"
        f"{', keeping originals' if not settings.remove_original else ''}"
        f"{', dry run' if settings.dry_run else ''})"
    )

    scanner = VideoFileScanner(target, recursive=settings.recursive)
    if scanner.source_dir is None:
        return EXIT_STARTUP_ERROR

    pipeline = build_pipeline(settings, tools)
    try:
        reports = pipeline.run(scanner.files)
    except KeyboardInterrupt:
        logger.warning(
            "Interrupted by user. The original being processed is untouched; "
            "a partial *.archival.mkv output may remain next to it."
        )
        return 130

    summarize(reports)
    return exit_status(reports)


if __name__ == "__main__":
    sys.exit(main())
