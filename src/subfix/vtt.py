"""
WebVTT decoder.

Reads the WEBVTT preamble (header lines, STYLE and REGION blocks) into the
track header, drops NOTE blocks, and turns every cue into timeline cues.
WebVTT-only inline tags are stripped; tags SubRip understands are kept as
raw markup.
"""
import re
from typing import List

from .errors import MissingHeader
from .formats import BlockScanner, CueBlock, parse_timing_line, split_lines, stray_block_error
from .timeline import Cue, Line, RawMarkup, Track

# Tags with no SubRip equivalent: classes, voices, languages, ruby and karaoke timestamps
VTT_ONLY_TAGS = re.compile( r'</?(?:c|v|lang|ruby|rt|rp)(?:[.\s][^<>]*)?>|<\d+(?::\d+)+(?:\.\d+)?>' );
ENTITY_PATTERN = re.compile( r'&(amp|lt|gt|nbsp|lrm|rlm);' );
ENTITY_TEXT = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "nbsp": "\u00a0",
    "lrm": "",
    "rlm": "",
};
LINE_SETTING = re.compile( r'(?:^|\s)line:([0-9.]+)%' );
TOP_POSITION = "{\\an8}";

PREAMBLE_BLOCKS = ( "STYLE", "REGION" );
SPECIAL_BLOCKS = PREAMBLE_BLOCKS + ( "NOTE", );


def _block_keyword( text: str ) -> str:
    words = text.strip().split( None, 1 );
    return words[0] if words else "";


def _is_special_block( text: str ) -> bool:
    return _block_keyword( text ) in SPECIAL_BLOCKS;


def _unescape( text: str ) -> str:
    return ENTITY_PATTERN.sub( lambda match: ENTITY_TEXT[match.group( 1 )], text );


def parse_cue_text( raw: str ) -> Line:
    """Turn one line of WebVTT cue text into a line of spans."""
    line = Line.parse( VTT_ONLY_TAGS.sub( "", raw ) );
    return line.map_plain( _unescape );


def is_top_positioned( settings: str ) -> bool:
    """Whether cue settings place the cue in the upper half of the frame."""
    match = LINE_SETTING.search( settings );
    if not match:
        return False;
    try:
        return float( match.group( 1 ) ) < 50.0;
    except ValueError:
        return False;


def _build_cue( block: CueBlock ) -> Cue:
    cue = block.to_cue( parse_cue_text );
    _, _, settings = parse_timing_line( block.timing, block.timing_line );
    if not is_top_positioned( settings ):
        return cue;
    first = Line( ( RawMarkup( TOP_POSITION ), ) + cue.lines[0].spans );
    return cue.with_lines( ( first, ) + cue.lines[1:] );


def decode( text: str ) -> Track:
    """
    Decode a WebVTT document.

    Args:
        text: Document text (a leading BOM and CRLF line endings are accepted)

    Returns:
        Track whose header holds the WEBVTT preamble
    """
    lines = split_lines( text );
    if not lines[0].startswith( "WEBVTT" ):
        raise MissingHeader();

    scanner = BlockScanner( lines, 0, _is_special_block );

    # Header runs until the first blank line (or a cue with no blank before it)
    position = 1;
    while position < len( lines ) and lines[position].strip() and not scanner.starts_cue( position ):
        position += 1;
    preamble: List[str] = [ "\n".join( lines[:position] ) ];
    scanner.position = position;

    cues = [];
    while True:
        scanner.skip_blank();
        if scanner.at_end():
            break;

        if scanner.starts_cue( scanner.position ):
            cues.append( _build_cue( scanner.take_cue() ) );
            continue;

        first_line, block = scanner.take_block();
        keyword = _block_keyword( block[0] );
        if keyword in PREAMBLE_BLOCKS:
            preamble.append( "\n".join( block ) );
        elif keyword != "NOTE":
            raise stray_block_error( first_line, block );

    return Track( tuple( cues ), "\n\n".join( preamble ) );
