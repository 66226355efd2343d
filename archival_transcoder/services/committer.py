"""
Applies the result of a file's encode and health check to the filesystem.

A validated output replaces the original; anything else is discarded and the
original stays exactly as it was found. The original is never removed before
the output has passed the health check.
"""
import os
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.common import MIB
from ..config.video import CANONICAL_EXTENSION
from ..domain.exceptions import CommitError
from ..domain.models import (
    AlreadyProcessed,
    EncodeResult,
    Failed,
    Outcome,
    Skipped,
    Transcoded,
    TranscodePlan,
    ValidationResult,
)
from ..utils.format_utils import formatted_size

REASON_ENCODE_ERROR = "encode error"
REASON_TARGET_EXISTS = "commit: target exists"
REASON_NOT_VALIDATED = "validation: not run"


def final_path_for(source_path: Path) -> Path:
    return source_path.with_suffix(CANONICAL_EXTENSION)


def size_statistics(original_bytes: int, output_bytes: int) -> tuple:
    """
    Returns `(size_delta_mb, percent_saved)`.

    The delta is in whole MiB, rounded down, and negative when the output
    grew. Both sizes must be positive; the validator rejects zero-byte files
    before this point.
    """
    if original_bytes <= 0:
        raise CommitError("Cannot compute savings for a zero-byte original.")
    size_delta_mb = (original_bytes - output_bytes) // MIB
    percent_saved = int(100 - (100 * output_bytes / original_bytes))
    return size_delta_mb, percent_saved


def discard_output(output_path: Path):
    try:
        output_path.unlink(missing_ok=True)
        logger.debug(f"Removed untrusted output {output_path.name}")
    except OSError as e:
        logger.error(f"Could not remove untrusted output {output_path}: {e}")


class Committer:
    def commit(
        self,
        plan: TranscodePlan,
        encode_result: Optional[EncodeResult],
        validation_result: Optional[ValidationResult],
        remove_original: bool,
    ) -> Outcome:
        """
        Resolves one file to its terminal outcome.

        Args:
            plan: The file's plan.
            encode_result: None when the plan called for no encode.
            validation_result: None when the encode failed and no check ran.
            remove_original: Replace the original, or keep both files side by side.

        Returns:
            The file's `Outcome`.

        Raises:
            CommitError: If the filesystem refuses the swap.
        """
        if not plan.encode:
            return AlreadyProcessed() if plan.archived else Skipped("policy")

        if encode_result is None or not encode_result.succeeded:
            discard_output(plan.output_path)
            return Failed(REASON_ENCODE_ERROR)

        if validation_result is None:
            discard_output(plan.output_path)
            return Failed(REASON_NOT_VALIDATED)

        if not validation_result.healthy:
            discard_output(plan.output_path)
            return Failed(validation_result.reason or REASON_NOT_VALIDATED)

        try:
            original_bytes = plan.source_path.stat().st_size
            output_bytes = encode_result.output_path.stat().st_size
        except OSError as e:
            raise CommitError(f"Cannot stat files for {plan.source_path.name}: {e}") from e

        size_delta_mb, percent_saved = size_statistics(original_bytes, output_bytes)

        if remove_original:
            final_path = final_path_for(plan.source_path)
            if final_path != plan.source_path and final_path.exists():
                logger.error(
                    f"Cannot place {encode_result.output_path.name}: {final_path.name} already exists"
                )
                discard_output(encode_result.output_path)
                return Failed(REASON_TARGET_EXISTS)
            self.swap(plan.source_path, encode_result.output_path, final_path)
        else:
            logger.debug(f"Keeping original {plan.source_path.name} next to {encode_result.output_path.name}")

        logger.debug(
            f"{plan.source_path.name}: {formatted_size(original_bytes)} -> {formatted_size(output_bytes)}"
        )
        return Transcoded(
            size_delta_mb=size_delta_mb,
            percent_saved=percent_saved,
            elapsed_seconds=encode_result.elapsed_seconds,
        )

    @staticmethod
    def swap(source_path: Path, output_path: Path, final_path: Path):
        """
        Moves the output to its final name, then drops the original.

        `os.replace` is atomic within one filesystem. When the final name is the
        source's own name the original is replaced in that single step; there is
        never a moment where the original is gone and the output not yet in place.
        """
        try:
            os.replace(output_path, final_path)
        except OSError as e:
            raise CommitError(f"Could not move {output_path} to {final_path}: {e}") from e

        if final_path != source_path:
            try:
                source_path.unlink()
            except FileNotFoundError:
                logger.warning(f"Original {source_path.name} disappeared before it could be removed")
            except OSError as e:
                raise CommitError(
                    f"{final_path.name} is in place but the original {source_path} could not be removed: {e}"
                ) from e
        logger.debug(f"Committed {final_path.name}")
