"""
Error kinds raised by the subtitle timeline, codecs and transformations.

Every error is terminal for the operation that raised it: nothing is
partially decoded, shifted or normalized.
"""
from typing import Optional


class SubtitleError( ValueError ):
    """Base class for all subfix errors."""


class TimelineError( SubtitleError ):
    """A cue or track violates a timeline invariant."""


class InvalidTiming( TimelineError ):
    """Cue start is after its end, or a timestamp is negative."""

    def __init__( self, start: int, end: int, line_number: Optional[int] = None ):
        self.start = start;
        self.end = end;
        self.line_number = line_number;
        message = f"invalid cue timing: start {start}ms, end {end}ms";
        if line_number is not None:
            message = f"line {line_number}: {message}";
        super().__init__( message );


class EmptyLines( TimelineError ):
    """A cue was built without any text lines."""

    def __init__( self ):
        super().__init__( "cue has no text lines" );


class DecodeError( SubtitleError ):
    """
    Input text could not be decoded into a track.

    Carries the 1-based line number and the offending field so callers can
    point at the exact location.
    """

    def __init__( self, message: str, line_number: Optional[int] = None, field: Optional[str] = None ):
        self.line_number = line_number;
        self.field = field;
        self.detail = message;
        prefix = f"line {line_number}: " if line_number is not None else "";
        super().__init__( f"{prefix}{message}" );


class MalformedTiming( DecodeError ):
    """A timing line does not match the timestamp grammar."""

    def __init__( self, text: str, line_number: Optional[int] = None, field: str = "timing" ):
        self.text = text;
        super().__init__( f"malformed timing {field!r}: {text!r}", line_number, field );


class UnexpectedEOF( DecodeError ):
    """A cue block ends right after its timing line."""

    def __init__( self, line_number: Optional[int] = None ):
        super().__init__( "cue has a timing line but no text", line_number, "text" );


class MissingHeader( DecodeError ):
    """A WebVTT document does not start with the WEBVTT signature."""

    def __init__( self ):
        super().__init__( "invalid vtt file (missing WEBVTT header)", 1, "header" );


class UnknownFormat( DecodeError ):
    """The subtitle format of the input could not be recognized."""

    def __init__( self, fmt: Optional[str] = None ):
        self.fmt = fmt;
        if fmt is None:
            super().__init__( "could not recognize subtitle format" );
        else:
            super().__init__( f"unsupported input format: {fmt!r}" );


class NegativeResultingTimestamp( SubtitleError ):
    """Shifting would move a cue before the start of the track."""

    def __init__( self, cue_position: int, value: int, offset: int ):
        self.cue_position = cue_position;
        self.value = value;
        self.offset = offset;
        super().__init__(
            f"shifting by {offset}ms moves cue {cue_position} to {value}ms (before track start)"
        );
