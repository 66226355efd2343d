"""
Services Package for the Archival Transcoder.

Each service performs one stage of the per-file work. The pipeline strings them
together; none of them knows about the others' internals.

- **Prober (`prober.py`):** reads a file's metadata through ffprobe into a `MediaProbe`.
- **PolicyEngine (`policy.py`):** decides whether a file needs resizing and encoding.
- **Transcoder (`transcoder.py`):** runs ffmpeg for a plan and times it.
- **Validator (`validator.py`):** re-probes the output and checks its duration.
- **Committer (`committer.py`):** swaps a validated output into place or discards it.
- **VideoFileScanner (`file_processing_service.py`):** finds the candidate files.
- **RunReport / ErrorLog (`logging_service.py`):** write outcome records to disk.

The external tools sit behind `ProbeRunner` and `Encoder`, so the policy,
validation and commit logic can be exercised with fakes.
"""
