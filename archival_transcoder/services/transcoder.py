"""
This module runs the external encoder for a `TranscodePlan`.

`Encoder` is the seam to ffmpeg: given input, output and `EncodeOptions` it
returns the process exit status. `FFmpegEncoder` builds the ffmpeg command
line and runs it. `Transcoder` turns a plan into options, times the encode and
reports an `EncodeResult`.

The output is always a new Matroska file next to the source, stamped with
`ARCHIVAL=yes`. On failure the output may be partial; deleting it is the
committer's job.
"""

import time
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config.common import COMMAND_TEXT
from ..config.settings import TranscodeSettings
from ..config.video import ARCHIVAL_TAG, ARCHIVAL_TAG_VALUE, OUTPUT_FORMAT, SUBTITLE_CODEC
from ..domain.exceptions import EncodeError
from ..domain.models import EncodeOptions, EncodeResult, TranscodePlan
from ..utils.ffmpeg_utils import run_cmd
from ..utils.format_utils import format_timedelta


class Encoder:
    """Base class for encode invocations."""

    def run_encode(self, input_path: Path, output_path: Path, options: EncodeOptions) -> int:
        """Encodes `input_path` into `output_path` and returns the exit status."""
        raise NotImplementedError("Subclasses must implement run_encode().")


class FFmpegEncoder(Encoder):
    """
    Encodes with ffmpeg.

    Video is re-encoded with the configured encoder, CRF and preset, optionally
    scaled down to the plan's height with the width following the aspect ratio.
    Audio is copied as is. Subtitles are converted to SRT, the text subtitle
    codec Matroska players handle best.
    """

    def __init__(self, ffmpeg_cmd: str = "ffmpeg", cmd_log_dir: Optional[Path] = None):
        self.ffmpeg_cmd = ffmpeg_cmd
        self.cmd_log_dir = cmd_log_dir

    def build_command(self, input_path: Path, output_path: Path, options: EncodeOptions) -> List[str]:
        video_map = (
            f"0:{options.video_stream_index}"
            if options.video_stream_index is not None
            else "0:v:0"
        )
        cmd_list = [
            self.ffmpeg_cmd,
            "-hide_banner",
            "-nostdin",
            "-y",
            "-i", str(input_path),
            "-map", video_map,
            "-map", "0:a?",
            "-map", "0:s?",
            "-metadata", f"{ARCHIVAL_TAG}={ARCHIVAL_TAG_VALUE}",
        ]
        if options.resize:
            cmd_list.extend(["-vf", f"scale=-2:{options.target_height}"])
        cmd_list.extend(
            [
                "-c:v", options.encoder,
                "-crf", str(options.crf),
                "-preset", options.preset,
                "-c:a", "copy",
                "-c:s", SUBTITLE_CODEC,
                "-f", OUTPUT_FORMAT,
                str(output_path),
            ]
        )
        return cmd_list

    def run_encode(self, input_path: Path, output_path: Path, options: EncodeOptions) -> int:
        cmd_list = self.build_command(input_path, output_path, options)
        cmd_log_file_path = self.cmd_log_dir / COMMAND_TEXT if self.cmd_log_dir else None
        res = run_cmd(cmd_list, show_cmd=True, cmd_log_file_path=cmd_log_file_path)
        if res is None:
            return -1
        if res.returncode != 0:
            tail = "\n".join(res.stderr.strip().splitlines()[-5:]) if res.stderr else ""
            logger.error(f"ffmpeg failed for {input_path.name} (rc={res.returncode}):\n{tail}")
        return res.returncode


class Transcoder:
    def __init__(self, encoder: Encoder, settings: TranscodeSettings):
        self.encoder = encoder
        self.settings = settings

    def options_for(self, plan: TranscodePlan) -> EncodeOptions:
        return EncodeOptions(
            target_height=plan.target_height,
            resize=plan.resize,
            crf=self.settings.crf,
            encoder=self.settings.encoder,
            preset=self.settings.preset,
            video_stream_index=plan.video_stream_index,
        )

    def encode(self, plan: TranscodePlan) -> EncodeResult:
        """
        Runs the encoder for one plan and times it.

        Args:
            plan: A plan with `encode=True`.

        Returns:
            An `EncodeResult`; `succeeded` is False for any non-zero exit status.

        Raises:
            EncodeError: If the plan asks for no encode or would overwrite its source.
        """
        if not plan.encode:
            raise EncodeError(f"Plan for {plan.source_path.name} does not call for an encode.")
        if plan.output_path.resolve() == plan.source_path.resolve():
            raise EncodeError(f"Refusing to encode {plan.source_path.name} onto itself.")

        options = self.options_for(plan)
        logger.info(
            f"Encoding {plan.source_path.name} -> {plan.output_path.name} "
            f"({options.encoder}, crf {options.crf}, preset {options.preset}"
            f"{f', scale to {options.target_height}p' if options.resize else ''})"
        )

        start = time.monotonic()
        return_code = self.encoder.run_encode(plan.source_path, plan.output_path, options)
        elapsed = time.monotonic() - start

        succeeded = return_code == 0
        if succeeded:
            logger.debug(f"Encode of {plan.source_path.name} finished in {format_timedelta(elapsed)}")
        else:
            logger.warning(
                f"Encode of {plan.source_path.name} failed with exit status {return_code} "
                f"after {format_timedelta(elapsed)}"
            )
        return EncodeResult(
            succeeded=succeeded,
            elapsed_seconds=elapsed,
            output_path=plan.output_path,
            return_code=return_code,
        )
