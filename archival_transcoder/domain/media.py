import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from ..config.video import ARCHIVAL_TAG, ARCHIVAL_TAG_VALUE, THUMBNAIL_CODECS
from .exceptions import ProbeError


def parse_duration(duration_value: Any) -> Optional[float]:
    """
    Parses a duration value into total seconds.

    Handles the two forms ffprobe produces:
    1. A number, or a string holding one (e.g., "3600.5").
    2. A timecode string 'HH:MM:SS.sss' (e.g., "01:00:00.500"). Hours are optional.

    Args:
        duration_value: The raw duration from the probe data.

    Returns:
        The duration in seconds, or None if the value cannot be parsed.
    """
    if duration_value is None or isinstance(duration_value, bool):
        return None
    if isinstance(duration_value, (int, float)):
        return float(duration_value)
    text = str(duration_value).strip()
    try:
        return float(text)
    except ValueError:
        match = re.fullmatch(r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)", text)
        if match:
            hours_str, minutes_str, seconds_str = match.groups()
            hours = int(hours_str) if hours_str else 0
            return float(hours * 3600 + int(minutes_str) * 60 + float(seconds_str))
        logger.warning(f"Could not parse duration string: {text}")
    return None


def is_real_video_stream(stream: dict) -> bool:
    """True for a video stream that is not cover art or a thumbnail."""
    if stream.get("codec_type") != "video":
        return False
    if str(stream.get("codec_name", "")).lower() in THUMBNAIL_CODECS:
        return False
    disposition = stream.get("disposition") or {}
    return not disposition.get("attached_pic")


def read_archival_tag(format_info: dict) -> bool:
    tags = format_info.get("tags") or {}
    for key, value in tags.items():
        if key.upper() == ARCHIVAL_TAG:
            return str(value).strip().lower() == ARCHIVAL_TAG_VALUE
    return False


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class MediaProbe:
    """
    The metadata of one media file, as far as the transcode decision needs it.

    Attributes:
        path: The probed file.
        duration_seconds: Container-level duration.
        video_width: Width of the selected video track, 0 without one.
        video_height: Height of the selected video track, 0 without one.
        video_codec: Codec name of the selected video track, lowercased.
        is_archived: True when the container carries `ARCHIVAL=yes`, i.e. a
                     previous run of this tool produced the file.
        has_video_stream: False when the file only holds cover art, audio or data.
        video_stream_index: Absolute stream index of the selected video track.
        size_bytes: File size when it was probed.
    """

    path: Path
    duration_seconds: float
    video_width: int
    video_height: int
    video_codec: str
    is_archived: bool
    has_video_stream: bool
    video_stream_index: Optional[int] = None
    size_bytes: int = 0

    @classmethod
    def from_probe_data(cls, path: Path, probe_data: dict, size_bytes: int = 0) -> "MediaProbe":
        """
        Builds a `MediaProbe` from the structured output of ffprobe.

        Args:
            path: The file the data was read from.
            probe_data: ffprobe's JSON output (`-show_format -show_streams`).
            size_bytes: The size of the file on disk.

        Raises:
            ProbeError: If the data has no positive container duration.
        """
        if not isinstance(probe_data, dict):
            raise ProbeError(f"Probe data for {path} is not a mapping.")

        format_info = probe_data.get("format") or {}
        duration = parse_duration(format_info.get("duration"))
        if duration is None or duration <= 0:
            raise ProbeError(
                f"No valid duration found for {path} (got {format_info.get('duration')!r})"
            )

        video_stream = next(
            (s for s in probe_data.get("streams") or [] if is_real_video_stream(s)),
            None,
        )
        if video_stream is None:
            logger.debug(f"No real video stream in {path.name}")
            return cls(
                path=path,
                duration_seconds=duration,
                video_width=0,
                video_height=0,
                video_codec="",
                is_archived=read_archival_tag(format_info),
                has_video_stream=False,
                size_bytes=size_bytes,
            )

        index = video_stream.get("index")
        return cls(
            path=path,
            duration_seconds=duration,
            video_width=_as_int(video_stream.get("width")),
            video_height=_as_int(video_stream.get("height")),
            video_codec=str(video_stream.get("codec_name", "")).lower(),
            is_archived=read_archival_tag(format_info),
            has_video_stream=True,
            video_stream_index=index if isinstance(index, int) else None,
            size_bytes=size_bytes,
        )
