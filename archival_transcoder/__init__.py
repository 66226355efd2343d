"""
Archival Transcoder.

Batch-transcodes a directory of videos down to a target resolution with an
external encoder (ffmpeg). For every file the pipeline probes the metadata,
decides whether work is needed, encodes into a new Matroska file, checks the
result and only then swaps it in place of the original.

Files written by this tool carry an ``ARCHIVAL=yes`` container tag, which is
how later runs recognise them and skip the work.
"""

__version__ = "0.3.0"
