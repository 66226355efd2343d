"""
Utilities Package for the Archival Transcoder.

Helpers that are not specific to any single stage of the pipeline.

Modules:
    - ffmpeg_utils.py: Runs external commands and formats command lines for logs.
    - format_utils.py: Converts durations and byte counts into readable strings.
    - tool_locator.py: Finds the ffmpeg and ffprobe executables and reports
      their versions.
"""
