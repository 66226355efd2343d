from dataclasses import replace

import pytest

from archival_transcoder.services.prober import Prober
from archival_transcoder.services.validator import (
    REASON_DURATION_MISMATCH,
    REASON_EMPTY_OUTPUT,
    REASON_EMPTY_SOURCE,
    REASON_NO_VIDEO,
    REASON_UNREADABLE_OUTPUT,
    Validator,
)


@pytest.fixture
def prober(probe_runner):
    return Prober(probe_runner)


@pytest.fixture
def original(add_video, prober):
    return prober.probe(add_video("film.mp4", duration="600.0"))


def write_output(tmp_path, probe_runner, probe_data, duration, size=100, **kwargs):
    output = tmp_path / "film.archival.mkv"
    output.write_bytes(b"\0" * size)
    probe_runner.data[output.name] = probe_data(duration=str(duration), archived="yes", **kwargs)
    return output


@pytest.mark.parametrize("duration", [600.0, 595.0, 605.9, 606.0])
def test_durations_within_tolerance_are_healthy(tmp_path, probe_runner, probe_data, prober, original, duration):
    output = write_output(tmp_path, probe_runner, probe_data, duration)

    result = Validator(prober, 6.0).validate(original, output)

    assert result.healthy
    assert result.new_probe.duration_seconds == duration
    assert result.reason == ""


@pytest.mark.parametrize("duration", [570.0, 630.0, 593.9])
def test_duration_mismatch_is_rejected(tmp_path, probe_runner, probe_data, prober, original, duration):
    output = write_output(tmp_path, probe_runner, probe_data, duration)

    result = Validator(prober, 6.0).validate(original, output)

    assert not result.healthy
    assert result.reason == REASON_DURATION_MISMATCH
    assert result.new_probe is not None


def test_missing_output_is_rejected(tmp_path, prober, original):
    result = Validator(prober).validate(original, tmp_path / "film.archival.mkv")

    assert not result.healthy
    assert result.reason == REASON_EMPTY_OUTPUT


def test_zero_byte_output_is_rejected(tmp_path, probe_runner, probe_data, prober, original):
    output = write_output(tmp_path, probe_runner, probe_data, 600.0, size=0)

    assert Validator(prober).validate(original, output).reason == REASON_EMPTY_OUTPUT


def test_zero_byte_source_is_rejected(tmp_path, probe_runner, probe_data, prober, original):
    output = write_output(tmp_path, probe_runner, probe_data, 600.0)

    result = Validator(prober).validate(replace(original, size_bytes=0), output)

    assert not result.healthy
    assert result.reason == REASON_EMPTY_SOURCE


def test_unreadable_output_is_rejected(tmp_path, prober, original):
    output = tmp_path / "film.archival.mkv"
    output.write_bytes(b"garbage")

    result = Validator(prober).validate(original, output)

    assert not result.healthy
    assert result.reason == REASON_UNREADABLE_OUTPUT
    assert result.new_probe is None


def test_output_without_video_is_rejected(tmp_path, probe_runner, probe_data, prober, original):
    output = write_output(tmp_path, probe_runner, probe_data, 600.0, video=False)

    result = Validator(prober).validate(original, output)

    assert not result.healthy
    assert result.reason == REASON_NO_VIDEO


def test_resolution_is_not_rechecked(tmp_path, probe_runner, probe_data, prober, original):
    output = write_output(tmp_path, probe_runner, probe_data, 600.0, height=2160, codec="vp9")

    assert Validator(prober).validate(original, output).healthy
