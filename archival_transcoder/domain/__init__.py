"""
This package contains the core domain models of the Archival Transcoder.

The domain layer holds the plain records passed between the pipeline stages.
It does not run external tools or touch the filesystem, so the decision logic
built on it can be tested with canned data.

Modules:
    exceptions.py: The exception hierarchy used to report per-file failures.
    media.py: `MediaProbe`, the normalized view of one ffprobe result, and the
              parsing helpers that build it.
    models.py: The records produced by each stage (`TranscodePlan`,
               `EncodeResult`, `ValidationResult`), the per-file `Outcome`
               variants and the `FileReport` that tracks a file's states.
"""
