"""
Shared grammar for the line-oriented subtitle formats.

Holds timestamp parsing and formatting, the timing-line parser, the cue
block scanner used by both the WebVTT and SubRip decoders, and format
detection.
"""
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .errors import InvalidTiming, MalformedTiming, UnexpectedEOF, UnknownFormat
from .timeline import Cue, Line

BOM = "\ufeff";
TIMING_ARROW = "-->";

# [H:]M:S[(.|,)fraction], every field variable width
TIMESTAMP_PATTERN = re.compile( r'(?:(\d+):)?(\d{1,2}):(\d{1,2})(?:[.,](\d+))?' );

# Only digits and separators before the arrow; caption text such as "A --> B"
# stays text
TIMING_LINE_SHAPE = re.compile( r'\s*[\d:.,]*\s*-->' );


def parse_timestamp( text: str, line_number: Optional[int] = None, field: str = "timestamp" ) -> int:
    """
    Parse a caption timestamp into milliseconds.

    Accepts an optional hours field, unpadded fields and either ``.`` or
    ``,`` before the fraction. The fraction is a decimal fraction of a
    second, so ``3.4`` is 3400ms; digits past the third are truncated.

    Args:
        text: Timestamp text such as "00:01:02.500" or "1:2:3.4"
        line_number: Line the timestamp came from, for error reporting
        field: Name of the field being parsed, for error reporting

    Returns:
        Total milliseconds
    """
    match = TIMESTAMP_PATTERN.fullmatch( text.strip() );
    if not match:
        raise MalformedTiming( text, line_number, field );

    hours = int( match.group( 1 ) or 0 );
    minutes = int( match.group( 2 ) );
    seconds = int( match.group( 3 ) );
    milliseconds = int( ( match.group( 4 ) or "0" ).ljust( 3, "0" )[:3] );

    if minutes > 59 or seconds > 59:
        raise MalformedTiming( text, line_number, field );

    return ( ( hours * 60 + minutes ) * 60 + seconds ) * 1000 + milliseconds;


def format_timestamp( total_ms: int, separator: str = ",", hour_digits: int = 2 ) -> str:
    """Format milliseconds as HH:MM:SS,mmm (hours never truncated)."""
    if total_ms < 0:
        raise ValueError( f"cannot format negative timestamp: {total_ms}" );
    total_seconds, milliseconds = divmod( total_ms, 1000 );
    total_minutes, seconds = divmod( total_seconds, 60 );
    hours, minutes = divmod( total_minutes, 60 );
    return f"{hours:0{hour_digits}d}:{minutes:02d}:{seconds:02d}{separator}{milliseconds:03d}";


def parse_timing_line( text: str, line_number: Optional[int] = None ) -> Tuple[int, int, str]:
    """
    Parse ``start --> end [settings]``.

    Returns:
        Tuple of (start_ms, end_ms, settings) where settings is the raw text
        after the end timestamp (empty when absent)
    """
    before, arrow, after = text.partition( TIMING_ARROW );
    if not arrow:
        raise MalformedTiming( text, line_number, "timing" );

    end_fields = after.strip().split( None, 1 );
    if not end_fields:
        raise MalformedTiming( text, line_number, "end" );

    start = parse_timestamp( before, line_number, "start" );
    end = parse_timestamp( end_fields[0], line_number, "end" );
    settings = end_fields[1] if len( end_fields ) > 1 else "";
    return start, end, settings;


def is_timing_line( text: str ) -> bool:
    """Whether a line is shaped like a timing line, well formed or not."""
    return TIMING_LINE_SHAPE.match( text ) is not None;


def _is_blank( text: str ) -> bool:
    return not text.strip();


@dataclass
class CueBlock:
    """A cue as found in the source text, before its timing is parsed."""

    identifier: Optional[str];  # Index or cue id line, if any
    timing: str;                # Raw timing line
    timing_line: int;           # 1-based line number of the timing line
    text: List[str];            # Raw text lines, interior blank lines kept

    def to_cue( self, line_factory: Callable[[str], Line] = Line.parse ) -> Cue:
        start, end, _ = parse_timing_line( self.timing, self.timing_line );
        if start > end:
            raise InvalidTiming( start, end, self.timing_line );
        index = int( self.identifier ) if self.identifier and self.identifier.isdigit() else None;
        return Cue( start, end, tuple( line_factory( text ) for text in self.text ), index );


class BlockScanner:
    """
    Line-oriented scanner that splits subtitle text into cue blocks.

    A blank line ends the current cue only when the next non-blank line starts
    a new block (a timing line, an identifier followed by a timing line, or a
    format-specific block such as a WebVTT NOTE) or the input ends. Any other
    blank line is part of the cue text.
    """

    def __init__( self, lines: List[str], first_line: int = 0,
                  is_special_block: Optional[Callable[[str], bool]] = None ):
        self.lines = lines;
        self.position = first_line;
        self.is_special_block = is_special_block or ( lambda text: False );

    def starts_cue( self, position: int ) -> bool:
        """Whether a cue (with or without identifier) starts at this line."""
        if position >= len( self.lines ) or _is_blank( self.lines[position] ):
            return False;
        if is_timing_line( self.lines[position] ):
            return True;
        following = position + 1;
        return (
            following < len( self.lines )
            and not _is_blank( self.lines[following] )
            and is_timing_line( self.lines[following] )
        );

    def starts_unseparated_cue( self, position: int ) -> bool:
        """
        Whether a cue starts inside a block, with no blank line before it.

        Only a timing line or a numeric index followed by a timing line
        count, so ordinary text is never mistaken for a cue identifier.
        """
        if is_timing_line( self.lines[position] ):
            return True;
        following = position + 1;
        return (
            self.lines[position].strip().isdigit()
            and following < len( self.lines )
            and is_timing_line( self.lines[following] )
        );

    def starts_block( self, position: int ) -> bool:
        return self.starts_cue( position ) or self.is_special_block( self.lines[position] );

    def skip_blank( self ):
        while self.position < len( self.lines ) and _is_blank( self.lines[self.position] ):
            self.position += 1;

    def at_end( self ) -> bool:
        return self.position >= len( self.lines );

    def take_block( self ) -> Tuple[int, List[str]]:
        """Consume a non-cue block up to the next blank line."""
        start = self.position;
        while self.position < len( self.lines ) and not _is_blank( self.lines[self.position] ):
            self.position += 1;
        return start + 1, self.lines[start:self.position];

    def take_cue( self ) -> CueBlock:
        """Consume the cue starting at the current position."""
        identifier = None;
        if not is_timing_line( self.lines[self.position] ):
            identifier = self.lines[self.position].strip();
            self.position += 1;

        timing = self.lines[self.position];
        timing_line = self.position + 1;
        self.position += 1;

        if self.at_end() or _is_blank( self.lines[self.position] ):
            raise UnexpectedEOF( timing_line );

        text = [];
        while not self.at_end():
            if not _is_blank( self.lines[self.position] ):
                if self.starts_unseparated_cue( self.position ):
                    break;
                text.append( self.lines[self.position] );
                self.position += 1;
                continue;

            following = self.position;
            while following < len( self.lines ) and _is_blank( self.lines[following] ):
                following += 1;
            if following >= len( self.lines ) or self.starts_block( following ):
                break;

            # Blank lines inside the cue text
            text.extend( [ "" ] * ( following - self.position ) );
            self.position = following;

        if not text:
            raise UnexpectedEOF( timing_line );
        return CueBlock( identifier, timing, timing_line, text );


def stray_block_error( first_line: int, block: List[str] ) -> MalformedTiming:
    """Error for a block before the first cue that has no usable timing line."""
    if len( block ) > 1 and block[0].strip().isdigit():
        return MalformedTiming( block[1], first_line + 1, "timing" );
    return MalformedTiming( block[0], first_line, "timing" );


def split_lines( text: str ) -> List[str]:
    """Split decoded text into lines, dropping a BOM and normalizing line endings."""
    if text.startswith( BOM ):
        text = text[len( BOM ):];
    return text.replace( "\r\n", "\n" ).replace( "\r", "\n" ).split( "\n" );


def detect_format( text: str ) -> str:
    """
    Detect the subtitle format of a document.

    Returns:
        "vtt" or "srt"
    """
    if text.startswith( BOM ):
        text = text[len( BOM ):];
    if text.startswith( "WEBVTT" ):
        return "vtt";

    for line in split_lines( text ):
        if _is_blank( line ):
            continue;
        if line.strip().isdigit() or is_timing_line( line ):
            return "srt";
        break;

    raise UnknownFormat();
