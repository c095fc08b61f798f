"""Portrait Batch - Batch portrait crops and rotations for video folders.

For every video in a directory, FFmpeg is invoked four times:
1. Left, middle and right 9:16 portrait crops into ``portrait_clips/``
2. A 90 degree counter-clockwise rotation into ``rotated_left/``
"""

__version__ = "0.1.0"
