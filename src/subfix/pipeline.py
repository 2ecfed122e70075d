"""
Core entry points: decode text into a track, transform it, encode it as SubRip.
"""
from typing import Optional

from . import japanese, srt, vtt
from .errors import UnknownFormat
from .formats import detect_format
from .japanese import NormalizerConfig
from .logging import get_logger
from .shift import shift
from .timeline import Track

DECODERS = {
    "vtt": vtt.decode,
    "srt": srt.decode,
};


def decode( text: str, fmt: Optional[str] = None ) -> Track:
    """
    Decode subtitle text into a track.

    Args:
        text: Document text
        fmt: "vtt" or "srt"; detected from the text when omitted

    Returns:
        Decoded track
    """
    fmt = fmt or detect_format( text );
    if fmt not in DECODERS:
        raise UnknownFormat( fmt );

    track = DECODERS[fmt]( text );
    get_logger().debug( f"Decoded {len( track )} cues from {fmt}" );
    return track;


def transform( track: Track, offset_ms: Optional[int] = None, fix_japanese: bool = False,
               config: Optional[NormalizerConfig] = None ) -> Track:
    """
    Apply the optional passes in order: shift, then the Japanese fixer.

    Args:
        track: Track to transform
        offset_ms: Signed offset in milliseconds, or None to keep timing
        fix_japanese: Run the Japanese fixer
        config: Layout limits for the fixer

    Returns:
        Transformed track (the input track when no pass is requested)
    """
    logger = get_logger();
    if offset_ms is not None:
        logger.debug( f"Shifting {len( track )} cues by {offset_ms}ms" );
        track = shift( track, offset_ms );
    if fix_japanese:
        logger.debug( f"Normalizing Japanese text in {len( track )} cues" );
        track = japanese.normalize( track, config );
    return track;


def encode( track: Track ) -> str:
    """Encode a track as SubRip text."""
    return srt.encode( track );
