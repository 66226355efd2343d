"""
Reads media metadata through ffprobe.

`ProbeRunner` is the seam to the external tool: it returns ffprobe's JSON for
one file. `Prober` turns that JSON into a `MediaProbe`. Tests swap in a runner
that returns canned dictionaries, so no process is launched.
"""
from pathlib import Path
from pprint import pformat

import ffmpeg
from loguru import logger

from ..domain.exceptions import FileMissingError, ProbeError
from ..domain.media import MediaProbe


class ProbeRunner:
    """Base class for anything that can produce ffprobe-style JSON for a file."""

    def run_probe(self, path: Path) -> dict:
        """
        Returns the structured metadata of `path`: a dict with `format` and `streams`.

        Raises:
            ProbeError: If the metadata cannot be read.
        """
        raise NotImplementedError("Subclasses must implement run_probe().")


class FFprobeRunner(ProbeRunner):
    """Runs ffprobe through ffmpeg-python's `ffmpeg.probe`."""

    def __init__(self, ffprobe_cmd: str = "ffprobe"):
        self.ffprobe_cmd = ffprobe_cmd

    def run_probe(self, path: Path) -> dict:
        try:
            probe_data = ffmpeg.probe(str(path), cmd=self.ffprobe_cmd)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if e.stderr else ""
            raise ProbeError(f"ffprobe failed for {path}: {stderr.strip()}") from e
        except FileNotFoundError as e:
            raise ProbeError(f"Could not run '{self.ffprobe_cmd}': {e}") from e
        except ValueError as e:
            # Non-UTF-8 tags or empty output, decoded and parsed inside ffmpeg.probe.
            raise ProbeError(f"Unreadable ffprobe output for {path}: {e}") from e
        logger.trace(f"Probe data for {path.name}:\n{pformat(probe_data)}")
        return probe_data


class Prober:
    """
    Produces a `MediaProbe` for a file.

    Probing is read-only. The first video stream that is not cover art becomes
    the file's video track; the container duration and the `ARCHIVAL` format
    tag are read from the `format` section.
    """

    def __init__(self, runner: ProbeRunner):
        self.runner = runner

    def probe(self, path: Path) -> MediaProbe:
        """
        Probes one file.

        Args:
            path: The media file to read.

        Returns:
            The file's `MediaProbe`.

        Raises:
            FileMissingError: If the file does not exist.
            ProbeError: If the metadata is unreadable or has no usable duration.
        """
        try:
            size_bytes = path.stat().st_size
        except FileNotFoundError as e:
            raise FileMissingError(f"Media file not found: {path}") from e

        probe_data = self.runner.run_probe(path)
        media_probe = MediaProbe.from_probe_data(path, probe_data, size_bytes=size_bytes)
        logger.debug(
            f"Probed {path.name}: {media_probe.video_codec or 'no video'} "
            f"{media_probe.video_width}x{media_probe.video_height}, "
            f"{media_probe.duration_seconds:.1f}s, archived={media_probe.is_archived}"
        )
        return media_probe
