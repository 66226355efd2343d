from argparse import Namespace
from pathlib import Path

import pytest

from archival_transcoder.cli import get_args
from archival_transcoder.config.settings import (
    TranscodeSettings,
    load_settings,
    read_environment,
    read_user_config,
)
from archival_transcoder.domain.exceptions import ConfigurationError


@pytest.fixture
def no_config(tmp_path) -> Path:
    return tmp_path / "absent.yaml"


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.user.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults(no_config):
    settings = load_settings(environ={}, config_path=no_config)

    assert settings == TranscodeSettings()
    assert (settings.target_height, settings.crf, settings.encoder, settings.preset) == (
        720, 25, "libx265", "faster",
    )
    assert settings.remove_original is True
    assert settings.duration_tolerance == 6.0


def test_yaml_config(tmp_path):
    config = write_config(
        tmp_path,
        "paths:\n"
        "  ffmpeg_dir: /opt/ffmpeg/bin\n"
        "transcode:\n"
        "  target_resolution: 1080\n"
        "  crf: 22\n"
        "  remove_original: no\n"
        "  duration_tolerance: 2.5\n",
    )

    settings = load_settings(environ={}, config_path=config)

    assert settings.target_height == 1080
    assert settings.crf == 22
    assert settings.remove_original is False
    assert settings.duration_tolerance == 2.5
    assert settings.tool_dir == Path("/opt/ffmpeg/bin")


def test_unknown_yaml_keys_are_ignored(tmp_path):
    config = write_config(tmp_path, "transcode:\n  colour: blue\n  preset: slow\n")

    assert read_user_config(config) == {"preset": "slow"}


def test_empty_yaml_file(tmp_path):
    assert read_user_config(write_config(tmp_path, "")) == {}


def test_broken_yaml_is_a_configuration_error(tmp_path):
    config = write_config(tmp_path, "transcode: [unclosed\n")

    with pytest.raises(ConfigurationError):
        read_user_config(config)


def test_environment_overrides_yaml(tmp_path):
    config = write_config(tmp_path, "transcode:\n  target_resolution: 1080\n  encoder: libx264\n")
    environ = {"ARCHIVAL_TARGET_RESOLUTION": "480", "ARCHIVAL_REMOVE_ORIGINAL": "false"}

    settings = load_settings(environ=environ, config_path=config)

    assert settings.target_height == 480
    assert settings.encoder == "libx264"
    assert settings.remove_original is False


def test_read_environment_ignores_empty_and_foreign_variables():
    environ = {"ARCHIVAL_TARGET_CRF": "", "TARGET_CRF": "30", "ARCHIVAL_TARGET_PRESET": "medium"}

    assert read_environment(environ) == {"preset": "medium"}


def test_cli_overrides_environment(no_config):
    args = get_args(["videos", "--resolution", "360", "--crf", "30", "--keep-original", "--dry-run"])
    environ = {"ARCHIVAL_TARGET_RESOLUTION": "480", "ARCHIVAL_TARGET_CRF": "20"}

    settings = load_settings(args, environ=environ, config_path=no_config)

    assert settings.target_height == 360
    assert settings.crf == 30
    assert settings.remove_original is False
    assert settings.dry_run is True


def test_unset_flags_do_not_override(no_config):
    args = Namespace(resolution=None, crf=None, keep_original=False, recursive=False, dry_run=False)

    settings = load_settings(args, environ={"ARCHIVAL_TARGET_CRF": "19"}, config_path=no_config)

    assert settings.crf == 19
    assert settings.remove_original is True


def test_config_flag_selects_yaml_file(tmp_path):
    config = write_config(tmp_path, "transcode:\n  recursive: true\n")

    settings = load_settings(get_args(["--config", str(config)]), environ={})

    assert settings.recursive is True


@pytest.mark.parametrize(
    "environ",
    [
        {"ARCHIVAL_TARGET_RESOLUTION": "tall"},
        {"ARCHIVAL_TARGET_RESOLUTION": "0"},
        {"ARCHIVAL_TARGET_CRF": "99"},
        {"ARCHIVAL_REMOVE_ORIGINAL": "maybe"},
        {"ARCHIVAL_DURATION_TOLERANCE": "-1"},
    ],
)
def test_invalid_values_are_rejected(no_config, environ):
    with pytest.raises(ConfigurationError):
        load_settings(environ=environ, config_path=no_config)


def test_settings_are_immutable():
    settings = TranscodeSettings()

    with pytest.raises(AttributeError):
        settings.crf = 10


@pytest.mark.parametrize(
    "text",
    [
        "paths: /opt/ffmpeg\n",
        "transcode: [crf, 22]\n",
        "transcode: fast\n",
    ],
)
def test_malformed_sections_are_configuration_errors(tmp_path, text):
    with pytest.raises(ConfigurationError, match="must be a mapping"):
        read_user_config(write_config(tmp_path, text))
