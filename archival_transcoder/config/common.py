"""
Common configuration settings used throughout the application.

Shared constants for logging, per-file state tracking and the run reports.
"""
from pathlib import Path

# --- Project Paths ---

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Optional YAML file holding user-specific paths and transcode defaults.
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL = "INFO"


# --- Report Files ---

# Structured YAML record of every processed file, appended run after run.
RUN_REPORT_FILE_NAME = "transcode_log.yaml"

# Plain-text record of failures, for manual follow-up.
ERROR_LOG_FILE_NAME = "transcode_errors.txt"

# Appended with every encoder command line when a report directory is set.
COMMAND_TEXT = "cmd.txt"

MIB = 1024 * 1024


# --- File States ---
# A file moves through these states exactly once per run. The last seven are
# terminal; every path through the pipeline ends in one of them.

STATE_DISCOVERED = "discovered"
STATE_PROBED = "probed"
STATE_PLANNED = "planned"
STATE_ENCODING = "encoding"
STATE_ENCODED = "encoded"
STATE_VALIDATING = "validating"
STATE_SKIPPED = "skipped"
STATE_ENCODE_FAILED = "encode_failed"
STATE_VALIDATION_FAILED = "validation_failed"
STATE_COMMITTED = "committed"
STATE_COMMIT_FAILED = "commit_failed"
STATE_FILE_MISSING = "file_missing"
STATE_ERRORED = "errored"

TERMINAL_STATES = frozenset(
    {
        STATE_SKIPPED,
        STATE_ENCODE_FAILED,
        STATE_VALIDATION_FAILED,
        STATE_COMMITTED,
        STATE_COMMIT_FAILED,
        STATE_FILE_MISSING,
        STATE_ERRORED,
    }
)


# --- Outcome Statuses ---

STATUS_SKIPPED = "skipped"
STATUS_ALREADY_PROCESSED = "already_processed"
STATUS_TRANSCODED = "transcoded"
STATUS_FAILED = "failed"
STATUS_FILE_MISSING = "file_missing"
