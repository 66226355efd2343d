"""
Launcher for running the Archival Transcoder from a source checkout:

    python main.py /path/to/videos --resolution 720
"""

import sys

from archival_transcoder.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
