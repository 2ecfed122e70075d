"""
Time shifting for whole tracks.
"""
from decimal import Decimal, InvalidOperation

from .errors import MalformedTiming, NegativeResultingTimestamp
from .formats import parse_timestamp
from .timeline import Track


def shift( track: Track, offset_ms: int ) -> Track:
    """
    Move every cue of a track by a signed offset.

    The whole track is checked before any cue is rebuilt, so either every
    cue moves or the call fails and nothing changes. Callers wanting a
    clamped shift must clamp the offset themselves.

    Args:
        track: Track to shift
        offset_ms: Milliseconds to add (positive delays, negative advances)

    Returns:
        New track with the same cue order and text

    Raises:
        NegativeResultingTimestamp: if any cue would start before zero
    """
    if isinstance( offset_ms, bool ) or not isinstance( offset_ms, int ):
        raise TypeError( f"offset must be an integer number of milliseconds, got {offset_ms!r}" );

    # end >= start for every cue, so starts are the only values that can go negative
    for position, cue in enumerate( track.cues, start=1 ):
        if cue.start + offset_ms < 0:
            raise NegativeResultingTimestamp( position, cue.start + offset_ms, offset_ms );

    return track.with_cues(
        cue.with_timing( cue.start + offset_ms, cue.end + offset_ms ) for cue in track.cues
    );


def parse_offset( text: str ) -> int:
    """
    Parse a user-supplied offset into milliseconds.

    Accepts seconds ("1.5", "-2") or timestamp syntax with an optional sign
    ("-00:01.250", "+1:02:03,4").

    Args:
        text: Offset text

    Returns:
        Signed offset in milliseconds
    """
    value = text.strip();
    sign = 1;
    if value[:1] in ( "+", "-" ):
        sign = -1 if value[0] == "-" else 1;
        value = value[1:];
    if value[:1] in ( "+", "-" ):
        raise MalformedTiming( text, field="offset" );

    if ":" in value:
        return sign * parse_timestamp( value, field="offset" );

    try:
        seconds = Decimal( value );
    except InvalidOperation:
        raise MalformedTiming( text, field="offset" ) from None;
    if not seconds.is_finite():
        raise MalformedTiming( text, field="offset" );

    return sign * int( ( seconds * 1000 ).to_integral_value() );
