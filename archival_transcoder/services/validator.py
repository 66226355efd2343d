"""
Post-encode health check.

Duration is the only trust signal: an output whose duration differs from the
source by more than the tolerance is treated as truncated or corrupted.
Resolution and codec are not re-checked. The check gates the commit step only;
it never prevents an encode from running.
"""
from pathlib import Path

from loguru import logger

from ..config.video import DEFAULT_DURATION_TOLERANCE
from ..domain.exceptions import FileMissingError, ProbeError, ValidationError
from ..domain.media import MediaProbe
from ..domain.models import ValidationResult
from .prober import Prober

REASON_EMPTY_SOURCE = "validation: empty source"
REASON_EMPTY_OUTPUT = "validation: empty output"
REASON_UNREADABLE_OUTPUT = "validation: unreadable output"
REASON_NO_VIDEO = "validation: no video stream"
REASON_DURATION_MISMATCH = "validation: duration mismatch"


class Validator:
    def __init__(self, prober: Prober, tolerance_seconds: float = DEFAULT_DURATION_TOLERANCE):
        self.prober = prober
        self.tolerance_seconds = tolerance_seconds

    def check(self, original: MediaProbe, output_path: Path) -> MediaProbe:
        """
        Runs the health check and returns the output's probe.

        Raises:
            ValidationError: With one of the `REASON_*` strings as its message.
                             The output's probe, when one was taken, is
                             attached as `new_probe`.
        """
        # Zero-byte files would make the size statistics undefined.
        if original.size_bytes <= 0:
            raise ValidationError(REASON_EMPTY_SOURCE)

        try:
            output_size = output_path.stat().st_size
        except FileNotFoundError:
            output_size = 0
        if output_size <= 0:
            raise ValidationError(REASON_EMPTY_OUTPUT)

        try:
            new_probe = self.prober.probe(output_path)
        except (ProbeError, FileMissingError) as e:
            logger.debug(f"Re-probe of {output_path.name} failed: {e}")
            raise ValidationError(REASON_UNREADABLE_OUTPUT) from e

        if not new_probe.has_video_stream:
            error = ValidationError(REASON_NO_VIDEO)
            error.new_probe = new_probe
            raise error

        drift = abs(original.duration_seconds - new_probe.duration_seconds)
        if drift > self.tolerance_seconds:
            logger.debug(
                f"Duration drift for {output_path.name}: source {original.duration_seconds:.1f}s, "
                f"output {new_probe.duration_seconds:.1f}s, tolerance {self.tolerance_seconds:.1f}s"
            )
            error = ValidationError(REASON_DURATION_MISMATCH)
            error.new_probe = new_probe
            raise error

        logger.debug(f"{output_path.name} is healthy (duration drift {drift:.2f}s)")
        return new_probe

    def validate(self, original: MediaProbe, output_path: Path) -> ValidationResult:
        """
        Checks an encoded output against the probe of its source.

        Args:
            original: The probe taken of the source before encoding.
            output_path: The freshly encoded file.

        Returns:
            A `ValidationResult`. Unhealthy results carry a reason starting
            with "validation:".
        """
        try:
            new_probe = self.check(original, output_path)
        except ValidationError as e:
            logger.warning(f"{output_path.name} failed the health check: {e}")
            return ValidationResult(
                healthy=False,
                new_probe=getattr(e, "new_probe", None),
                reason=str(e),
            )
        return ValidationResult(healthy=True, new_probe=new_probe)
