from collections import Counter
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger

from ..config.common import (
    MIB,
    STATE_COMMIT_FAILED,
    STATE_COMMITTED,
    STATE_DISCOVERED,
    STATE_ENCODE_FAILED,
    STATE_ENCODED,
    STATE_ENCODING,
    STATE_ERRORED,
    STATE_FILE_MISSING,
    STATE_PLANNED,
    STATE_PROBED,
    STATE_SKIPPED,
    STATE_VALIDATING,
    STATE_VALIDATION_FAILED,
    STATUS_TRANSCODED,
)
from ..config.settings import TranscodeSettings
from ..domain.exceptions import (
    CommitError,
    EncodeError,
    FileMissingError,
    NoVideoStream,
    ProbeError,
)
from ..domain.models import (
    EncodeResult,
    Failed,
    FileMissing,
    FileReport,
    Outcome,
    Skipped,
    Transcoded,
)
from ..services.committer import Committer, discard_output
from ..services.logging_service import RunReport
from ..services.policy import PolicyEngine, output_path_for
from ..services.prober import FFprobeRunner, Prober
from ..services.transcoder import FFmpegEncoder, Transcoder
from ..services.validator import Validator
from ..utils.format_utils import format_timedelta, formatted_size
from ..utils.tool_locator import ToolLocator


class TranscodePipeline:
    """
    Carries files one at a time through probe, plan, encode, validate and commit.

    Every error is confined to the file it happened on: the file ends in a
    terminal state with an `Outcome` and the loop moves on. There are no
    retries; a failed file is left as it was found.
    """

    def __init__(
        self,
        settings: TranscodeSettings,
        prober: Prober,
        policy: PolicyEngine,
        transcoder: Transcoder,
        validator: Validator,
        committer: Committer,
        report: Optional[RunReport] = None,
    ):
        self.settings = settings
        self.prober = prober
        self.policy = policy
        self.transcoder = transcoder
        self.validator = validator
        self.committer = committer
        self.report = report

    def process_single_file(self, path: Path) -> FileReport:
        """
        Takes one file to a terminal state.

        Errors the stages do not turn into an outcome themselves end the file as
        `Failed("unexpected: ...")`, so one file can never stop the run.
        """
        file_report = FileReport(path=path)
        try:
            return self._walk(file_report)
        except Exception as e:
            logger.exception(f"Unexpected error while processing {path.name}: {e}")
            if STATE_ENCODING in file_report.states:
                discard_output(output_path_for(path))
            return file_report.finish(STATE_ERRORED, Failed(f"unexpected: {type(e).__name__}: {e}"))

    def _walk(self, file_report: FileReport) -> FileReport:
        path = file_report.path
        file_report.advance(STATE_DISCOVERED)

        if not path.exists():
            return file_report.finish(STATE_FILE_MISSING, FileMissing())

        try:
            probe = self.prober.probe(path)
        except FileMissingError:
            return file_report.finish(STATE_FILE_MISSING, FileMissing())
        except ProbeError as e:
            if not path.exists():
                return file_report.finish(STATE_FILE_MISSING, FileMissing())
            logger.debug(f"Probe error for {path.name}: {e}")
            return file_report.finish(STATE_SKIPPED, Skipped(f"probe error: {e}"))
        file_report.advance(STATE_PROBED)

        try:
            plan = self.policy.decide(probe)
        except NoVideoStream:
            return file_report.finish(STATE_SKIPPED, Skipped("no video stream"))
        file_report.advance(STATE_PLANNED)

        if not plan.encode:
            outcome = self.committer.commit(plan, None, None, self.settings.remove_original)
            return file_report.finish(STATE_SKIPPED, outcome)

        if self.settings.dry_run:
            action = f"resize to {plan.target_height}p and encode" if plan.resize else "encode"
            return file_report.finish(STATE_SKIPPED, Skipped(f"dry run, would {action}"))

        file_report.advance(STATE_ENCODING)
        try:
            encode_result = self.transcoder.encode(plan)
        except EncodeError as e:
            logger.error(f"Encode of {path.name} not started: {e}")
            encode_result = EncodeResult(succeeded=False, elapsed_seconds=0.0, output_path=plan.output_path)

        if not encode_result.succeeded:
            outcome = self.committer.commit(plan, encode_result, None, self.settings.remove_original)
            return file_report.finish(STATE_ENCODE_FAILED, outcome)
        file_report.advance(STATE_ENCODED)

        file_report.advance(STATE_VALIDATING)
        validation = self.validator.validate(probe, encode_result.output_path)
        if not validation.healthy:
            outcome = self.committer.commit(plan, encode_result, validation, self.settings.remove_original)
            return file_report.finish(STATE_VALIDATION_FAILED, outcome)

        if not path.exists():
            logger.warning(f"{path.name} disappeared while it was being encoded")
            discard_output(encode_result.output_path)
            return file_report.finish(STATE_FILE_MISSING, FileMissing())

        try:
            outcome = self.committer.commit(plan, encode_result, validation, self.settings.remove_original)
        except CommitError as e:
            logger.error(f"Commit of {path.name} failed: {e}")
            discard_output(plan.output_path)
            return file_report.finish(STATE_COMMIT_FAILED, Failed(f"commit: {e}"))

        if outcome.failed:
            return file_report.finish(STATE_COMMIT_FAILED, outcome)
        return file_report.finish(STATE_COMMITTED, outcome)

    def run(self, paths: Iterable[Path]) -> List[FileReport]:
        """
        Processes the files in order, each one to completion before the next.

        Args:
            paths: The candidate files, as scanned at startup.

        Returns:
            One `FileReport` per path, in the same order.
        """
        paths = list(paths)
        reports = []
        for position, path in enumerate(paths, start=1):
            logger.info(f"[{position}/{len(paths)}] {path.name}")
            file_report = self.process_single_file(path)
            log_outcome(path, file_report.outcome)
            if self.report is not None:
                self.report.write(file_report)
            reports.append(file_report)
        return reports


def log_outcome(path: Path, outcome: Outcome):
    line = f"{path.name}: {outcome.describe()}"
    if isinstance(outcome, Transcoded):
        logger.success(line)
    elif outcome.failed:
        logger.error(line)
    elif isinstance(outcome, (Skipped, FileMissing)):
        logger.warning(line)
    else:
        logger.info(line)


def exit_status(reports: Iterable[FileReport]) -> int:
    """1 if any file ended in a failed outcome, else 0."""
    return 1 if any(r.outcome is not None and r.outcome.failed for r in reports) else 0


def summarize(reports: List[FileReport]) -> Counter:
    """Logs the count per outcome status and the space saved. Returns the counts."""
    counts = Counter(r.outcome.status for r in reports if r.outcome is not None)
    transcoded = [r.outcome for r in reports if r.outcome is not None and r.outcome.status == STATUS_TRANSCODED]
    saved_bytes = sum(o.size_delta_mb for o in transcoded) * MIB
    encode_seconds = sum(o.elapsed_seconds for o in transcoded)

    summary = ", ".join(f"{status.replace('_', ' ')}: {count}" for status, count in sorted(counts.items()))
    logger.info(f"Processed {len(reports)} file(s) -> {summary or 'nothing to do'}")
    if transcoded:
        logger.info(
            f"Saved about {formatted_size(saved_bytes)} in {format_timedelta(encode_seconds)} of encoding"
        )
    return counts


def build_pipeline(settings: TranscodeSettings, tools: ToolLocator) -> TranscodePipeline:
    """Wires the ffprobe/ffmpeg-backed services into a pipeline."""
    prober = Prober(FFprobeRunner(tools.ffprobe))
    report = RunReport(settings.report_dir) if settings.report_dir else None
    return TranscodePipeline(
        settings=settings,
        prober=prober,
        policy=PolicyEngine(settings),
        transcoder=Transcoder(FFmpegEncoder(tools.ffmpeg, cmd_log_dir=settings.report_dir), settings),
        validator=Validator(prober, settings.duration_tolerance),
        committer=Committer(),
        report=report,
    )
