"""
Track-level cleanups that sit outside the Japanese fixer.

Unlike the normalizer these may change how many cues a track has, so they
only run when asked for explicitly.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from .japanese import contains_japanese
from .timeline import Cue, Track


def merge_simultaneous( track: Track ) -> Track:
    """
    Merge runs of adjacent cues that share both start and end.

    The merged cue keeps the first cue's index and stacks the lines of every
    cue in the run, top to bottom.
    """
    merged: List[Cue] = [];
    for cue in track.cues:
        if merged and merged[-1].start == cue.start and merged[-1].end == cue.end:
            merged[-1] = merged[-1].with_lines( merged[-1].lines + cue.lines );
        else:
            merged.append( cue );
    return track.with_cues( merged );


@dataclass( frozen=True )
class TrackStats:
    """Summary of a track, as shown by ``subfix info``."""

    cue_count: int;               # Number of cues
    first_start: Optional[int];   # Start of the first cue in ms
    last_end: Optional[int];      # Latest end of any cue in ms
    overlaps: int;                # Adjacent pairs where a cue starts before the previous ends
    max_lines: int;               # Most lines in a single cue
    max_width: int;               # Widest line in display columns
    has_japanese: bool;           # Whether any cue contains kana or kanji

    @property
    def duration( self ) -> int:
        if self.first_start is None or self.last_end is None:
            return 0;
        return self.last_end - self.first_start;

    def as_dict( self ) -> Dict:
        return {
            'cue_count': self.cue_count,
            'first_start': self.first_start,
            'last_end': self.last_end,
            'duration': self.duration,
            'overlaps': self.overlaps,
            'max_lines': self.max_lines,
            'max_width': self.max_width,
            'has_japanese': self.has_japanese,
        };


def track_stats( track: Track ) -> TrackStats:
    cues = track.cues;
    if not cues:
        return TrackStats( 0, None, None, 0, 0, 0, False );

    overlaps = sum( 1 for previous, cue in zip( cues, cues[1:] ) if cue.start < previous.end );
    lines = [ line for cue in cues for line in cue.lines ];
    return TrackStats(
        cue_count=len( cues ),
        first_start=cues[0].start,
        last_end=max( cue.end for cue in cues ),
        overlaps=overlaps,
        max_lines=max( len( cue.lines ) for cue in cues ),
        max_width=max( line.display_width for line in lines ),
        has_japanese=any( contains_japanese( line.plain ) for line in lines ),
    );
