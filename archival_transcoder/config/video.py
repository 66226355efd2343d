"""
Configuration settings related to video processing.

Container extensions, codec lists, the archival marker and the encoder
defaults used when neither the user config, the environment nor the
command line override them.
"""

# --- Input Selection ---
VIDEO_EXTENSIONS = (".mkv", ".mp4", ".avi")

# Part of the name of every file this tool writes. Scanning skips such names so
# an output left next to its source is never picked up as a new input.
PROCESSED_NAME_MARKER = ".archival"

# --- Stream Selection ---
# Video streams with these codecs are cover art or thumbnails, not a real track.
THUMBNAIL_CODECS = frozenset({"mjpeg", "png", "bmp", "gif", "webp"})

# --- Archival Marker ---
# Stamped into the container's format tags on every output.
ARCHIVAL_TAG = "ARCHIVAL"
ARCHIVAL_TAG_VALUE = "yes"

# --- Output Container ---
CANONICAL_EXTENSION = ".mkv"
OUTPUT_FORMAT = "matroska"
SUBTITLE_CODEC = "srt"

# --- Encoder Defaults ---
DEFAULT_TARGET_HEIGHT = 720
DEFAULT_CRF = 25
DEFAULT_ENCODER = "libx265"
DEFAULT_PRESET = "faster"
DEFAULT_REMOVE_ORIGINAL = True
MAX_CRF = 51

# One decimal minute. Output durations further than this from the source are
# treated as truncated or corrupted encodes.
DEFAULT_DURATION_TOLERANCE = 6.0
