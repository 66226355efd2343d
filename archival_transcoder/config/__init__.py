"""
Configuration Package for the Archival Transcoder.

This package keeps the static constants apart from the application logic:

- `common.py`: logging format, file state names, outcome statuses and report file names.
- `video.py`: container extensions, codec lists, the archival tag and encoder defaults.
- `settings.py`: the immutable `TranscodeSettings` object assembled from defaults,
  the YAML user config, environment variables and command-line flags.
"""
