"""
Timeline model: timestamps, line spans, cues and tracks.

Timestamps are plain ``int`` millisecond counts. Every type here is a frozen
dataclass so transformations build new values instead of mutating shared ones.
"""
import re
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import EmptyLines, InvalidTiming

Timestamp = int;

# Inline tags passed through verbatim: HTML-like tags and {\...} override blocks
MARKUP_PATTERN = re.compile( r'</?[A-Za-z][^<>]*>|\{\\[^{}]*\}' );


@dataclass( frozen=True )
class PlainText:
    """Readable caption text."""

    text: str;


@dataclass( frozen=True )
class RawMarkup:
    """An inline formatting tag kept as-is; never displayed, never rewritten."""

    text: str;


Span = Union[PlainText, RawMarkup];


def _normalize_spans( spans: Iterable[Span] ) -> Tuple[Span, ...]:
    """Drop empty plain spans and join adjacent plain spans."""
    result = [];
    for span in spans:
        if isinstance( span, PlainText ):
            if not span.text:
                continue;
            if result and isinstance( result[-1], PlainText ):
                result[-1] = PlainText( result[-1].text + span.text );
                continue;
        elif not isinstance( span, RawMarkup ):
            raise TypeError( f"not a line span: {span!r}" );
        result.append( span );
    return tuple( result );


def char_width( ch: str ) -> int:
    """Display columns taken by a character (wide and fullwidth count double)."""
    return 2 if unicodedata.east_asian_width( ch ) in ( "W", "F" ) else 1;


def text_width( text: str ) -> int:
    return sum( char_width( ch ) for ch in text );


@dataclass( frozen=True )
class Line:
    """
    One visual line of a cue, as a sequence of plain-text and markup spans.

    Spans are kept in normal form, so two lines that render the same way
    with the same markup compare equal.
    """

    spans: Tuple[Span, ...] = ();

    def __post_init__( self ):
        object.__setattr__( self, "spans", _normalize_spans( self.spans ) );

    @classmethod
    def of( cls, *spans: Span ) -> "Line":
        return cls( tuple( spans ) );

    @classmethod
    def plain_line( cls, text: str ) -> "Line":
        return cls( ( PlainText( text ), ) );

    @classmethod
    def parse( cls, raw: str ) -> "Line":
        """
        Split raw caption text into plain text and markup spans.

        Args:
            raw: One line of caption text, possibly containing inline tags

        Returns:
            Line whose RawMarkup spans are the recognised tags
        """
        spans = [];
        position = 0;
        for match in MARKUP_PATTERN.finditer( raw ):
            spans.append( PlainText( raw[position:match.start()] ) );
            spans.append( RawMarkup( match.group() ) );
            position = match.end();
        spans.append( PlainText( raw[position:] ) );
        return cls( tuple( spans ) );

    @property
    def text( self ) -> str:
        """Rendered line with markup included."""
        return "".join( span.text for span in self.spans );

    @property
    def plain( self ) -> str:
        """Only the readable text."""
        return "".join( span.text for span in self.spans if isinstance( span, PlainText ) );

    @property
    def display_width( self ) -> int:
        return text_width( self.plain );

    @property
    def has_markup( self ) -> bool:
        return any( isinstance( span, RawMarkup ) for span in self.spans );

    def map_plain( self, transform: Callable[[str], str] ) -> "Line":
        """Apply a text function to every plain span, leaving markup untouched."""
        return Line( tuple(
            PlainText( transform( span.text ) ) if isinstance( span, PlainText ) else span
            for span in self.spans
        ) );

    def joined( self, other: "Line", separator: str = " " ) -> "Line":
        """Concatenate two lines, separated only when both show text."""
        if not self.plain or not other.plain:
            separator = "";
        return Line( self.spans + ( PlainText( separator ), ) + other.spans );

    def __str__( self ):
        return self.text;


def _coerce_line( value: Union[Line, str] ) -> Line:
    if isinstance( value, Line ):
        return value;
    if isinstance( value, str ):
        return Line.parse( value );
    raise TypeError( f"cue lines must be Line or str, got {type( value ).__name__}" );


@dataclass( frozen=True )
class Cue:
    """
    One displayed subtitle unit.

    ``index`` is whatever sequence number the source carried; it takes no
    part in equality and encoders regenerate it.
    """

    start: Timestamp;       # Start time in milliseconds
    end: Timestamp;         # End time in milliseconds
    lines: Tuple[Line, ...];  # Visual lines, top to bottom
    index: Optional[int] = field( default=None, compare=False );

    def __post_init__( self ):
        object.__setattr__( self, "lines", tuple( _coerce_line( line ) for line in self.lines ) );
        if self.start < 0 or self.end < 0 or self.start > self.end:
            raise InvalidTiming( self.start, self.end );
        if not self.lines:
            raise EmptyLines();

    @classmethod
    def from_text( cls, start: Timestamp, end: Timestamp, texts: Sequence[str], index: Optional[int] = None ) -> "Cue":
        return cls( start, end, tuple( Line.parse( text ) for text in texts ), index );

    @property
    def text_lines( self ) -> List[str]:
        return [ line.text for line in self.lines ];

    @property
    def duration( self ) -> int:
        return self.end - self.start;

    def with_timing( self, start: Timestamp, end: Timestamp ) -> "Cue":
        return Cue( start, end, self.lines, self.index );

    def with_lines( self, lines: Iterable[Line] ) -> "Cue":
        return Cue( self.start, self.end, tuple( lines ), self.index );

    def __repr__( self ):
        preview = " / ".join( self.text_lines )[:30];
        return f"Cue(start={self.start}ms, end={self.end}ms, text='{preview}')";


@dataclass( frozen=True )
class Track:
    """Ordered cues of one subtitle file plus an opaque format preamble."""

    cues: Tuple[Cue, ...] = ();
    header: Optional[str] = None;

    def __post_init__( self ):
        object.__setattr__( self, "cues", tuple( self.cues ) );

    def __len__( self ):
        return len( self.cues );

    def __iter__( self ) -> Iterator[Cue]:
        return iter( self.cues );

    def with_cues( self, cues: Iterable[Cue] ) -> "Track":
        return Track( tuple( cues ), self.header );
