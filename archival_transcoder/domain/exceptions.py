"""
Defines custom exception types for the Archival Transcoder.

Every stage of the per-file pipeline raises one of these instead of a generic
`Exception`, so the pipeline can map each failure to the right outcome and
move on to the next file. None of them stops a run once processing has begun.

All custom exceptions inherit from the base `ArchivalTranscoderException`.
"""


class ArchivalTranscoderException(Exception):
    """Base class for all custom exceptions in the Archival Transcoder."""

    pass


# --- Startup Exceptions ---
class ConfigurationError(ArchivalTranscoderException):
    """
    Raised when a setting from the user config, the environment or the command
    line has an invalid value (e.g. a negative resolution or a CRF out of range).
    """

    pass


class ToolNotFoundError(ArchivalTranscoderException):
    """Raised when an external executable (ffmpeg or ffprobe) cannot be located."""

    pass


# --- Per-file Exceptions ---
class FileMissingError(ArchivalTranscoderException):
    """
    Raised when a file from the scanned list no longer exists.

    The file list is a snapshot taken at startup. A file deleted or moved by
    someone else before its turn comes is reported, not treated as an error.
    """

    pass


class ProbeError(ArchivalTranscoderException):
    """
    Raised when ffprobe cannot read a file or its output lacks a usable duration.

    Duration is the health signal checked after every encode, so a file
    without one can never be validated and is skipped up front.
    """

    pass


class NoVideoStream(ArchivalTranscoderException):
    """
    Raised by the policy when a probed file has no real video track.

    Cover art and thumbnails stored as video streams do not count.
    """

    pass


class EncodeError(ArchivalTranscoderException):
    """Raised when the external encoder exits with a non-zero status."""

    pass


class ValidationError(ArchivalTranscoderException):
    """
    Raised when an encoded output fails its health check.

    This covers duration mismatches against the source as well as zero-byte
    sources or outputs, which would make the size statistics meaningless.
    """

    pass


class CommitError(ArchivalTranscoderException):
    """Raised when swapping a validated output into place fails on the filesystem."""

    pass
