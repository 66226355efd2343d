"""
Records passed between the pipeline stages, and the per-file outcomes.

Each stage returns one of these instead of mutating shared state:
the policy returns a `TranscodePlan`, the transcoder an `EncodeResult`, the
validator a `ValidationResult` and the committer an `Outcome`. The pipeline
collects the states a file went through in a `FileReport`.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.common import (
    STATUS_ALREADY_PROCESSED,
    STATUS_FAILED,
    STATUS_FILE_MISSING,
    STATUS_SKIPPED,
    STATUS_TRANSCODED,
    TERMINAL_STATES,
)
from .media import MediaProbe


@dataclass(frozen=True)
class TranscodePlan:
    source_path: Path
    output_path: Path
    target_height: int
    resize: bool
    encode: bool
    archived: bool = False
    video_stream_index: Optional[int] = None


@dataclass(frozen=True)
class EncodeOptions:
    target_height: int
    resize: bool
    crf: int
    encoder: str
    preset: str
    video_stream_index: Optional[int] = None


@dataclass(frozen=True)
class EncodeResult:
    succeeded: bool
    elapsed_seconds: float
    output_path: Path
    return_code: Optional[int] = None


@dataclass(frozen=True)
class ValidationResult:
    healthy: bool
    new_probe: Optional[MediaProbe] = None
    reason: str = ""


# --- Outcomes ---


@dataclass(frozen=True)
class Outcome:
    """Base class of the terminal result of one file."""

    status = ""

    @property
    def failed(self) -> bool:
        return False

    def describe(self) -> str:
        return self.status.replace("_", " ")

    def as_dict(self) -> dict:
        return {"status": self.status}


@dataclass(frozen=True)
class Skipped(Outcome):
    reason: str = ""
    status = STATUS_SKIPPED

    def describe(self) -> str:
        return f"skipped ({self.reason})" if self.reason else "skipped"

    def as_dict(self) -> dict:
        return {"status": self.status, "reason": self.reason}


@dataclass(frozen=True)
class AlreadyProcessed(Outcome):
    status = STATUS_ALREADY_PROCESSED

    def describe(self) -> str:
        return "already processed"


@dataclass(frozen=True)
class Transcoded(Outcome):
    size_delta_mb: int = 0
    percent_saved: int = 0
    elapsed_seconds: float = 0.0
    status = STATUS_TRANSCODED

    def describe(self) -> str:
        return (
            f"transcoded, saved {self.size_delta_mb} MB ({self.percent_saved}%) "
            f"in {self.elapsed_seconds / 60:.1f} min"
        )

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "size_delta_mb": self.size_delta_mb,
            "percent_saved": self.percent_saved,
            "elapsed_seconds": round(self.elapsed_seconds, 1),
        }


@dataclass(frozen=True)
class Failed(Outcome):
    reason: str = ""
    status = STATUS_FAILED

    @property
    def failed(self) -> bool:
        return True

    def describe(self) -> str:
        return f"failed ({self.reason})"

    def as_dict(self) -> dict:
        return {"status": self.status, "reason": self.reason}


@dataclass(frozen=True)
class FileMissing(Outcome):
    status = STATUS_FILE_MISSING

    def describe(self) -> str:
        return "file missing"


@dataclass
class FileReport:
    """
    The walk of one file through the pipeline states.

    `states` starts at `discovered` and grows by one entry per transition.
    `outcome` is set together with the terminal state.
    """

    path: Path
    states: List[str] = field(default_factory=list)
    outcome: Optional[Outcome] = None

    @property
    def state(self) -> Optional[str]:
        return self.states[-1] if self.states else None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, state: str):
        if self.finished:
            raise RuntimeError(f"{self.path.name} already ended in state '{self.state}'")
        self.states.append(state)

    def finish(self, state: str, outcome: Outcome) -> "FileReport":
        if state not in TERMINAL_STATES:
            raise ValueError(f"'{state}' is not a terminal state")
        self.advance(state)
        self.outcome = outcome
        return self
