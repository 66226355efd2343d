"""
Runtime settings for a transcode run.

`TranscodeSettings` is built once at startup and handed to the services that
need it. Values are layered, later sources winning:

1. the defaults in `config.video`,
2. the YAML user config (`config.user.yaml` or the file given with `--config`),
3. `ARCHIVAL_*` environment variables,
4. command-line flags.

Example `config.user.yaml`::

    paths:
      ffmpeg_dir: /opt/ffmpeg/bin
    transcode:
      target_resolution: 720
      crf: 25
      encoder: libx265
      preset: faster
      remove_original: true
"""
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from loguru import logger

from ..domain.exceptions import ConfigurationError
from .common import USER_CONFIG_PATH
from .video import (
    DEFAULT_CRF,
    DEFAULT_DURATION_TOLERANCE,
    DEFAULT_ENCODER,
    DEFAULT_PRESET,
    DEFAULT_REMOVE_ORIGINAL,
    DEFAULT_TARGET_HEIGHT,
    MAX_CRF,
)

ENV_PREFIX = "ARCHIVAL_"

# Environment variable suffix -> settings field
ENV_FIELDS = {
    "TARGET_RESOLUTION": "target_height",
    "TARGET_CRF": "crf",
    "TARGET_ENCODER": "encoder",
    "TARGET_PRESET": "preset",
    "REMOVE_ORIGINAL": "remove_original",
    "DURATION_TOLERANCE": "duration_tolerance",
    "FFMPEG_DIR": "tool_dir",
}

YAML_FIELDS = {
    "target_resolution": "target_height",
    "crf": "crf",
    "encoder": "encoder",
    "preset": "preset",
    "remove_original": "remove_original",
    "duration_tolerance": "duration_tolerance",
    "recursive": "recursive",
    "report_dir": "report_dir",
}

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class TranscodeSettings:
    target_height: int = DEFAULT_TARGET_HEIGHT
    crf: int = DEFAULT_CRF
    encoder: str = DEFAULT_ENCODER
    preset: str = DEFAULT_PRESET
    remove_original: bool = DEFAULT_REMOVE_ORIGINAL
    duration_tolerance: float = DEFAULT_DURATION_TOLERANCE
    recursive: bool = False
    dry_run: bool = False
    tool_dir: Optional[Path] = None
    report_dir: Optional[Path] = None

    def __post_init__(self):
        if self.target_height <= 0:
            raise ConfigurationError(
                f"Target resolution must be a positive height, got {self.target_height}."
            )
        if not 0 <= self.crf <= MAX_CRF:
            raise ConfigurationError(f"CRF must be between 0 and {MAX_CRF}, got {self.crf}.")
        if not self.encoder:
            raise ConfigurationError("Encoder name must not be empty.")
        if not self.preset:
            raise ConfigurationError("Preset must not be empty.")
        if self.duration_tolerance < 0:
            raise ConfigurationError(
                f"Duration tolerance cannot be negative, got {self.duration_tolerance}."
            )


def _to_bool(value: Any, source: str) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ConfigurationError(f"Cannot read '{value}' from {source} as a boolean.")


def _coerce(field_name: str, value: Any, source: str) -> Any:
    """Converts a raw config value to the type of the given settings field."""
    try:
        if field_name in {"target_height", "crf"}:
            return int(value)
        if field_name == "duration_tolerance":
            return float(value)
        if field_name in {"remove_original", "recursive", "dry_run"}:
            return _to_bool(value, source)
        if field_name in {"tool_dir", "report_dir"}:
            return Path(value).expanduser()
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value '{value}' for {field_name} from {source}: {e}"
        ) from e


def _section(user_config: dict, name: str, config_path: Path) -> dict:
    section = user_config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' in '{config_path}' must be a mapping, got {section!r}.")
    return section


def read_user_config(config_path: Path) -> dict:
    """
    Reads the optional YAML user config and returns the overrides it contains.

    A missing file is not an error. A file that exists but cannot be parsed is.

    Args:
        config_path: Path to the YAML file.

    Returns:
        A dictionary of `TranscodeSettings` field names to coerced values.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using defaults.")
        return {}

    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse '{config_path}': {e}") from e

    if not isinstance(user_config, dict):
        raise ConfigurationError(f"'{config_path}' must contain a mapping at the top level.")

    overrides = {}
    paths_config = _section(user_config, "paths", config_path)
    ffmpeg_dir = paths_config.get("ffmpeg_dir")
    if ffmpeg_dir:
        overrides["tool_dir"] = _coerce("tool_dir", ffmpeg_dir, str(config_path))

    transcode_config = _section(user_config, "transcode", config_path)
    for key, value in transcode_config.items():
        field_name = YAML_FIELDS.get(key)
        if field_name is None:
            logger.warning(f"Ignoring unknown key 'transcode.{key}' in {config_path}")
            continue
        if value is None:
            continue
        overrides[field_name] = _coerce(field_name, value, str(config_path))

    logger.debug(f"Loaded {len(overrides)} setting(s) from {config_path}")
    return overrides


def read_environment(environ: Mapping[str, str]) -> dict:
    overrides = {}
    for suffix, field_name in ENV_FIELDS.items():
        name = ENV_PREFIX + suffix
        value = environ.get(name)
        if value is None or value == "":
            continue
        overrides[field_name] = _coerce(field_name, value, name)
    return overrides


def read_arguments(args: Any) -> dict:
    """Extracts the flags that were actually given on the command line."""
    if args is None:
        return {}
    overrides = {}
    mapping = {
        "resolution": "target_height",
        "crf": "crf",
        "encoder": "encoder",
        "preset": "preset",
        "ffmpeg_dir": "tool_dir",
        "report_dir": "report_dir",
    }
    for attr, field_name in mapping.items():
        value = getattr(args, attr, None)
        if value is not None:
            overrides[field_name] = _coerce(field_name, value, f"--{attr.replace('_', '-')}")
    if getattr(args, "keep_original", False):
        overrides["remove_original"] = False
    if getattr(args, "recursive", False):
        overrides["recursive"] = True
    if getattr(args, "dry_run", False):
        overrides["dry_run"] = True
    return overrides


def load_settings(
    args: Any = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> TranscodeSettings:
    """
    Builds the settings for a run from all configuration sources.

    Args:
        args: Parsed command-line arguments (`argparse.Namespace`), or None.
        environ: Environment mapping; defaults to `os.environ`.
        config_path: YAML user config; defaults to `--config` from `args`, then
                     `config.user.yaml` at the project root.

    Returns:
        The frozen `TranscodeSettings` for this run.

    Raises:
        ConfigurationError: If any source supplies an invalid value.
    """
    if environ is None:
        environ = os.environ
    if config_path is None:
        arg_config = getattr(args, "config", None) if args is not None else None
        config_path = Path(arg_config) if arg_config else USER_CONFIG_PATH

    settings = TranscodeSettings()
    for overrides in (
        read_user_config(config_path),
        read_environment(environ),
        read_arguments(args),
    ):
        if overrides:
            settings = replace(settings, **overrides)

    logger.debug(f"Effective settings: {settings}")
    return settings
