"""
SubRip codec.

Encoding renders cues through pysrt, so timestamps come out in the canonical
HH:MM:SS,mmm form and indices are regenerated from 1. Decoding shares the
tolerant block scanner with the WebVTT decoder.
"""
import io

import pysrt

from .formats import BlockScanner, split_lines, stray_block_error
from .timeline import Track


def decode( text: str ) -> Track:
    """
    Decode a SubRip document.

    Index lines are optional and never trusted; timing lines accept either
    millisecond separator.

    Args:
        text: Document text

    Returns:
        Track without header (SubRip has no preamble)
    """
    scanner = BlockScanner( split_lines( text ) );
    cues = [];

    while True:
        scanner.skip_blank();
        if scanner.at_end():
            break;

        if not scanner.starts_cue( scanner.position ):
            first_line, block = scanner.take_block();
            raise stray_block_error( first_line, block );

        cues.append( scanner.take_cue().to_cue() );

    return Track( tuple( cues ) );


def to_subrip_file( track: Track ) -> pysrt.SubRipFile:
    """Build a pysrt file with indices regenerated as 1..n."""
    subs = pysrt.SubRipFile( eol="\n" );
    for position, cue in enumerate( track.cues, start=1 ):
        subs.append( pysrt.SubRipItem(
            index=position,
            start=pysrt.SubRipTime( milliseconds=cue.start ),
            end=pysrt.SubRipTime( milliseconds=cue.end ),
            text="\n".join( cue.text_lines )
        ) );
    return subs;


def encode( track: Track ) -> str:
    """
    Encode a track as a SubRip document.

    Each cue becomes an index line, a ``HH:MM:SS,mmm --> HH:MM:SS,mmm``
    timing line, its text lines and a blank separator line.

    Blank lines at the top or bottom of a cue cannot be told apart from the
    separator, so only tracks whose cues start and end with a visible line
    decode back unchanged. Every decoder and the Japanese fixer produce such
    tracks.
    """
    buffer = io.StringIO();
    for item in to_subrip_file( track ):
        # write_into skips the separator after text ending in a newline
        buffer.write( str( item ) );
        buffer.write( "\n" );
    return buffer.getvalue();
