"""
Test cases for the SubRip codec.
"""
import pytest
from pathlib import Path
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from subfix import srt
from subfix.errors import MalformedTiming, UnexpectedEOF
from subfix.timeline import Cue, Track


class TestSRTEncode:
    """Test cases for encoding tracks as SubRip."""

    def test_single_cue( self ):
        track = Track( ( Cue( 1000, 2500, [ "こんにちは" ] ), ) );
        assert srt.encode( track ) == "1\n00:00:01,000 --> 00:00:02,500\nこんにちは\n\n";

    def test_indices_are_regenerated( self ):
        """Test that source indices are ignored on output."""
        track = Track( (
            Cue( 0, 1000, [ "a" ], index=7 ),
            Cue( 1000, 2000, [ "b", "<i>c</i>" ], index=3 ),
        ) );
        assert srt.encode( track ) == (
            "1\n00:00:00,000 --> 00:00:01,000\na\n\n"
            "2\n00:00:01,000 --> 00:00:02,000\nb\n<i>c</i>\n\n"
        );

    def test_long_timestamps( self ):
        track = Track( ( Cue( 3723400, 360000000, [ "x" ] ), ) );
        assert "01:02:03,400 --> 100:00:00,000" in srt.encode( track );

    def test_empty_track( self ):
        assert srt.encode( Track() ) == "";

    def test_separator_after_trailing_blank_line( self ):
        """Test that every cue is followed by its own blank separator."""
        track = Track( (
            Cue( 0, 1000, [ "a", "" ] ),
            Cue( 2000, 3000, [ "b" ] ),
        ) );
        assert srt.encode( track ) == (
            "1\n00:00:00,000 --> 00:00:01,000\na\n\n\n"
            "2\n00:00:02,000 --> 00:00:03,000\nb\n\n"
        );


class TestSRTDecode:
    """Test cases for decoding SubRip documents."""

    def test_decode( self ):
        text = (
            "1\n00:00:01,000 --> 00:00:02,500\nこんにちは\n\n"
            "2\n00:00:03,000 --> 00:00:04,000\n<i>two</i>\nlines\n"
        );
        track = srt.decode( text );
        assert [ ( cue.start, cue.end, cue.text_lines, cue.index ) for cue in track ] == [
            ( 1000, 2500, [ "こんにちは" ], 1 ),
            ( 3000, 4000, [ "<i>two</i>", "lines" ], 2 ),
        ];
        assert track.header is None;

    def test_lenient_input( self ):
        """Test missing indices, dot separators and extra blank lines."""
        text = "\n\n00:00:01.5 --> 00:00:02.000\nfirst\n\n\n\n3\n0:0:3,000 --> 0:0:4,000\nsecond\n\n";
        track = srt.decode( text );
        assert [ ( cue.start, cue.end, cue.text_lines ) for cue in track ] == [
            ( 1500, 2000, [ "first" ] ),
            ( 3000, 4000, [ "second" ] ),
        ];

    def test_stray_text( self ):
        with pytest.raises( MalformedTiming ) as error:
            srt.decode( "hello\n\n1\n00:00:01,000 --> 00:00:02,000\nx\n" );
        assert error.value.line_number == 1;

    def test_index_without_timing( self ):
        """Test that the error points at the line after the index."""
        with pytest.raises( MalformedTiming ) as error:
            srt.decode( "1\nnot a timing line\nx\n" );
        assert error.value.line_number == 2;

    def test_timing_without_text( self ):
        with pytest.raises( UnexpectedEOF ):
            srt.decode( "1\n00:00:01,000 --> 00:00:02,000\n\n2\n00:00:03,000 --> 00:00:04,000\nx\n" );

    def test_round_trip( self ):
        """Test that decoding the encoded track reproduces it."""
        track = Track( (
            Cue( 0, 1000, [ "{\\an8}top" ] ),
            Cue( 500, 1500, [ "<b>bold</b> text", "second line" ] ),
            Cue( 3723400, 3723400, [ "zero length" ] ),
        ) );
        assert srt.decode( srt.encode( track ) ) == track;

    def test_round_trip_with_blank_lines( self ):
        """Test cues with blank lines inside and at the bottom."""
        track = Track( (
            Cue( 0, 1000, [ "a", "", "b" ] ),
            Cue( 1000, 2000, [ "c", "" ] ),
            Cue( 2000, 3000, [ "d" ] ),
        ) );
        again = srt.decode( srt.encode( track ) );
        assert [ ( cue.start, cue.end ) for cue in again ] == [ ( 0, 1000 ), ( 1000, 2000 ), ( 2000, 3000 ) ];
        assert [ cue.text_lines for cue in again ] == [ [ "a", "", "b" ], [ "c" ], [ "d" ] ];

    def test_arrow_in_text( self ):
        """Test that caption text containing an arrow is not a timing line."""
        track = srt.decode( "1\n00:00:01,000 --> 00:00:02,000\nA --> B\n\n2\n00:00:03,000 --> 00:00:04,000\nx\n" );
        assert [ cue.text_lines for cue in track ] == [ [ "A --> B" ], [ "x" ] ];


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
