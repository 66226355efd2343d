"""
This package contains the transcode pipeline.

The pipeline takes the scanned file list and carries each file through its
states (probe, plan, encode, validate, commit) before starting the next one.
"""
