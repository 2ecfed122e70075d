"""
subfix - Subtitle conversion and cleanup utility.

Converts WebVTT and SubRip captions to SubRip, shifts their timing and
fixes common problems in Japanese subtitle text.
"""

__version__ = "0.1.0";
__author__ = "subfix Project";
__license__ = "MIT";
