"""
This module provides classes for writing run reports to disk.

Console logging is done with loguru. These classes add two files that outlive
the run: a YAML record of every file's outcome (`RunReport`) and a plain-text
log of failures (`ErrorLog`) for manual follow-up.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Dict, Union

import yaml
from loguru import logger

from ..config.common import ERROR_LOG_FILE_NAME, RUN_REPORT_FILE_NAME
from ..domain.models import FileReport


class Log:
    """
    A base class for the report files.

    Handles the setup of the log directory shared by the subclasses.
    """

    # A decorative separator line used in text-based logs for better readability.
    linesep_marker: str = "=" * 50

    def __init__(self, log_dir: Path):
        self.log_file_path: Path  # Set by the subclass.
        self.log_dir: Path = log_dir.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, log_content: Union[dict, list, str]):
        raise NotImplementedError("Subclasses must implement the write() method.")


class ErrorLog(Log):
    """
    Appends human-readable error records to a text file.
    """

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        """
        Appends the given lines, followed by a separator line.

        Args:
            *error_messages: The parts of one error record, one per line.
        """
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"

        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            # Keep the message in the console log at least.
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class RunReport(Log):
    """
    Structured record of processed files in YAML format.

    Every call to `write` appends one entry to `transcode_log.yaml`, keeping
    the file a valid YAML list with a running `index`.
    """

    def __init__(self, report_dir: Path, filename: str = RUN_REPORT_FILE_NAME):
        super().__init__(report_dir)
        self.log_file_path = self.log_dir / filename
        self.error_log = ErrorLog(report_dir)

    def _load_entries(self) -> List[Dict]:
        if not self.log_file_path.is_file():
            return []
        try:
            with self.log_file_path.open("r", encoding="utf-8") as f:
                loaded_entries = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error reading run report {self.log_file_path}: {e}. Starting a new report.")
            return []
        if isinstance(loaded_entries, list):
            return loaded_entries
        if loaded_entries is not None:
            logger.warning(f"Run report {self.log_file_path} contained unexpected data. Starting a new report.")
        return []

    @staticmethod
    def entry_for(file_report: FileReport) -> dict:
        entry = {
            "path": str(file_report.path),
            "states": list(file_report.states),
        }
        if file_report.outcome is not None:
            entry.update(file_report.outcome.as_dict())
        entry["ended_datetime"] = datetime.now().isoformat(timespec="seconds")
        return entry

    def write(self, file_report: FileReport):
        """
        Appends one file's record to the YAML report, and to the error log if it failed.

        Args:
            file_report: A file that reached a terminal state.
        """
        entries = self._load_entries()
        new_entry = self.entry_for(file_report)
        new_entry["index"] = max(
            (e.get("index", 0) for e in entries if isinstance(e, dict)), default=0
        ) + 1
        entries.append(new_entry)

        try:
            with self.log_file_path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    entries,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=4,
                    width=220,
                )
        except OSError as e:
            logger.error(f"Failed to write run report {self.log_file_path}: {e}")

        if file_report.outcome is not None and file_report.outcome.failed:
            self.error_log.write(
                f"File: {file_report.path}",
                f"Outcome: {file_report.outcome.describe()}",
                f"States: {' -> '.join(file_report.states)}",
                f"Time: {new_entry['ended_datetime']}",
            )
