"""
Decides, per file, whether to resize and whether to encode at all.

| archived | height <= target | resize | encode |
|----------|------------------|--------|--------|
| no       | yes              | no     | yes    |
| no       | no               | yes    | yes    |
| yes      | yes              | no     | no     |
| yes      | no               | yes    | yes    |

Resolution wins over the archival tag: a file above the target height is
always resized and encoded, even if an earlier run already processed it.
"""
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.settings import TranscodeSettings
from ..config.video import CANONICAL_EXTENSION, PROCESSED_NAME_MARKER
from ..domain.exceptions import NoVideoStream
from ..domain.media import MediaProbe
from ..domain.models import TranscodePlan


def output_path_for(source_path: Path) -> Path:
    """The path the encoder writes to: next to the source, never equal to it."""
    return source_path.with_name(f"{source_path.stem}{PROCESSED_NAME_MARKER}{CANONICAL_EXTENSION}")


class PolicyEngine:
    def __init__(self, settings: TranscodeSettings):
        self.settings = settings

    def decide(self, probe: MediaProbe, target_height: Optional[int] = None) -> TranscodePlan:
        """
        Computes the plan for one probed file.

        Args:
            probe: The file's metadata.
            target_height: Overrides the configured target height.

        Returns:
            The immutable `TranscodePlan`. `encode=False` means nothing to do.

        Raises:
            NoVideoStream: If the file has no real video track.
        """
        if not probe.has_video_stream:
            raise NoVideoStream(f"No usable video stream in {probe.path}")

        target = self.settings.target_height if target_height is None else target_height
        within_target = probe.video_height <= target

        resize = not within_target
        encode = resize or not probe.is_archived
        effective_height = min(probe.video_height, target) if resize else probe.video_height

        plan = TranscodePlan(
            source_path=probe.path,
            output_path=output_path_for(probe.path),
            target_height=effective_height,
            resize=resize,
            encode=encode,
            archived=probe.is_archived,
            video_stream_index=probe.video_stream_index,
        )
        logger.debug(
            f"Plan for {probe.path.name}: height {probe.video_height} -> {effective_height}, "
            f"resize={resize}, encode={encode}, archived={probe.is_archived}"
        )
        return plan
