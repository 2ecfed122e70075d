"""
Test cases for time shifting.
"""
import pytest
from pathlib import Path
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from subfix.errors import MalformedTiming, NegativeResultingTimestamp
from subfix.shift import parse_offset, shift
from subfix.timeline import Cue, Track


def sample_track() -> Track:
    return Track( (
        Cue( 1000, 2000, [ "one" ], index=1 ),
        Cue( 1500, 4000, [ "two" ], index=2 ),  # Overlaps the first cue
        Cue( 5000, 5000, [ "three" ], index=3 ),
    ), "WEBVTT" );


class TestShift:
    """Test cases for shifting whole tracks."""

    def test_positive_shift( self ):
        shifted = shift( sample_track(), 250 );
        assert [ ( cue.start, cue.end ) for cue in shifted ] == [ ( 1250, 2250 ), ( 1750, 4250 ), ( 5250, 5250 ) ];
        assert [ cue.text_lines for cue in shifted ] == [ [ "one" ], [ "two" ], [ "three" ] ];
        assert shifted.header == "WEBVTT";

    def test_zero_shift_is_identity( self ):
        assert shift( sample_track(), 0 ) == sample_track();

    def test_shift_to_zero( self ):
        """Test that the first cue may land exactly on zero."""
        track = sample_track();
        shifted = shift( track, -track.cues[0].start );
        assert shifted.cues[0].start == 0;

    def test_shift_below_zero( self ):
        """Test that one millisecond too far fails for the whole track."""
        track = sample_track();
        with pytest.raises( NegativeResultingTimestamp ) as error:
            shift( track, -( track.cues[0].start + 1 ) );
        assert error.value.cue_position == 1;
        assert error.value.value == -1;
        assert error.value.offset == -1001;

    def test_failure_names_first_offending_cue( self ):
        track = Track( ( Cue( 5000, 6000, [ "late" ] ), Cue( 100, 200, [ "early" ] ) ) );
        with pytest.raises( NegativeResultingTimestamp ) as error:
            shift( track, -1000 );
        assert error.value.cue_position == 2;

    def test_additivity( self ):
        """Test that two shifts equal one shift by the sum."""
        track = sample_track();
        for first, second in [ ( 500, 700 ), ( -200, 300 ), ( 1000, -1500 ), ( -1000, 0 ) ]:
            assert shift( shift( track, first ), second ) == shift( track, first + second );

    def test_order_and_index_preserved( self ):
        shifted = shift( sample_track(), 10 );
        assert [ cue.index for cue in shifted ] == [ 1, 2, 3 ];

    def test_empty_track( self ):
        assert len( shift( Track(), -5000 ) ) == 0;

    def test_offset_must_be_integer( self ):
        for offset in [ 1.5, "100", True, None ]:
            with pytest.raises( TypeError ):
                shift( sample_track(), offset );


class TestParseOffset:
    """Test cases for user-supplied offsets."""

    def test_valid_offsets( self ):
        test_cases = [
            ( "1.5", 1500 ),
            ( "-2", -2000 ),
            ( "+0.25", 250 ),
            ( "0", 0 ),
            ( "0.0005", 0 ),
            ( "+00:01.250", 1250 ),
            ( "-1:02:03,4", -3723400 ),
            ( " 3 ", 3000 ),
        ];

        for text, expected in test_cases:
            assert parse_offset( text ) == expected, f"Failed for {text!r}";

    def test_invalid_offsets( self ):
        for text in [ "", "abc", "1.5s", "nan", "inf", "-00:99", "--1" ]:
            with pytest.raises( MalformedTiming ):
                parse_offset( text );

    def test_invalid_offset_hides_decimal_error( self ):
        with pytest.raises( MalformedTiming ) as error:
            parse_offset( "abc" );
        assert error.value.__cause__ is None;
        assert error.value.__suppress_context__;
        assert error.value.field == "offset";


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
