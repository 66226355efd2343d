from collections.abc import Callable, Generator
from pathlib import Path
from typing import Optional

import pytest
from loguru import logger

from archival_transcoder.config.settings import TranscodeSettings
from archival_transcoder.domain.exceptions import ProbeError
from archival_transcoder.services.committer import Committer
from archival_transcoder.services.policy import PolicyEngine
from archival_transcoder.services.prober import Prober, ProbeRunner
from archival_transcoder.services.transcoder import Encoder, Transcoder
from archival_transcoder.services.validator import Validator
from archival_transcoder.pipeline.transcode_pipeline import TranscodePipeline


def make_probe_data(
    duration="600.000000",
    width=1920,
    height=1080,
    codec="h264",
    archived: Optional[str] = None,
    cover_art: bool = False,
    video: bool = True,
) -> dict:
    streams = []
    if cover_art:
        streams.append(
            {
                "index": 0,
                "codec_type": "video",
                "codec_name": "mjpeg",
                "width": 600,
                "height": 600,
                "disposition": {"attached_pic": 1},
            }
        )
    if video:
        streams.append(
            {
                "index": len(streams),
                "codec_type": "video",
                "codec_name": codec,
                "width": width,
                "height": height,
                "disposition": {"attached_pic": 0},
            }
        )
    streams.append({"index": len(streams), "codec_type": "audio", "codec_name": "aac"})
    format_info = {"filename": "x", "format_name": "matroska,webm"}
    if duration is not None:
        format_info["duration"] = duration
    if archived is not None:
        format_info["tags"] = {"ARCHIVAL": archived, "ENCODER": "Lavf60.3.100"}
    return {"streams": streams, "format": format_info}


class FakeProbeRunner(ProbeRunner):
    """Serves canned ffprobe dictionaries keyed by file name."""

    def __init__(self):
        self.data = {}
        self.calls = []

    def run_probe(self, path: Path) -> dict:
        self.calls.append(path)
        if path.name not in self.data:
            raise ProbeError(f"ffprobe failed for {path}: Invalid data found when processing input")
        return self.data[path.name]


class FakeEncoder(Encoder):
    """
    Writes an output file instead of running ffmpeg.

    The output gets `output_size` bytes and is registered with the probe runner
    as an archived file of the plan's height, `duration_offset` seconds off the
    source duration.
    """

    def __init__(self, runner: FakeProbeRunner):
        self.runner = runner
        self.return_code = 0
        self.output_size = 400
        self.duration_offset = 0.0
        self.write_output = True
        self.calls = []

    def run_encode(self, input_path, output_path, options) -> int:
        self.calls.append((input_path, output_path, options))
        if self.write_output:
            output_path.write_bytes(b"\0" * self.output_size)
            source = self.runner.data.get(input_path.name, make_probe_data())
            duration = float(source["format"]["duration"]) + self.duration_offset
            self.runner.data[output_path.name] = make_probe_data(
                duration=str(duration),
                width=1280,
                height=options.target_height,
                codec="hevc",
                archived="yes",
            )
        return self.return_code


@pytest.fixture(autouse=True)
def quiet_logger() -> Generator[None, None, None]:
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def settings() -> TranscodeSettings:
    return TranscodeSettings()


@pytest.fixture
def probe_runner() -> FakeProbeRunner:
    return FakeProbeRunner()


@pytest.fixture
def fake_encoder(probe_runner: FakeProbeRunner) -> FakeEncoder:
    return FakeEncoder(probe_runner)


@pytest.fixture
def probe_data() -> Callable[..., dict]:
    return make_probe_data


@pytest.fixture
def add_video(tmp_path: Path, probe_runner: FakeProbeRunner) -> Callable[..., Path]:
    """Creates a video file on disk and registers its probe data."""

    def _add(name: str = "movie.mp4", size: int = 1000, **probe_kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(b"\1" * size)
        probe_runner.data[name] = make_probe_data(**probe_kwargs)
        return path

    return _add


@pytest.fixture
def make_pipeline(probe_runner: FakeProbeRunner, fake_encoder: FakeEncoder) -> Callable[..., TranscodePipeline]:
    def _make(settings: Optional[TranscodeSettings] = None, **settings_kwargs) -> TranscodePipeline:
        settings = settings or TranscodeSettings(**settings_kwargs)
        prober = Prober(probe_runner)
        return TranscodePipeline(
            settings=settings,
            prober=prober,
            policy=PolicyEngine(settings),
            transcoder=Transcoder(fake_encoder, settings),
            validator=Validator(prober, settings.duration_tolerance),
            committer=Committer(),
        )

    return _make
