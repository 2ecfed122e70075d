"""
Japanese caption cleanup.

The fixer is an ordered pipeline of pure rules, each taking the lines of one
cue and returning new lines:

1. normalize_width        full-width ASCII to half-width, half-width kana to full-width
2. clean_layout           whitespace cleanup and re-wrapping of 3+ line cues
3. normalize_punctuation  one glyph per ellipsis/wave dash, no doubled enclosing brackets
4. remove_markers         residual markup artifacts and repeated punctuation

Contract: the pipeline is idempotent. Running it on already fixed lines
returns them unchanged, it never touches timing and never changes how many
cues a track has. Rule 4 may drop lines it empties, but a cue always keeps
at least one line. Rule 2 measures line widths on the form rules 3 and 4
settle on, and rule 4 re-applies rule 3 after every removal, so a second run
makes exactly the same decisions as the first.
"""
import re
import unicodedata
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple

from .timeline import Line, PlainText, Track, text_width

LineRule = Callable[[Sequence[Line]], Tuple[Line, ...]];

IDEOGRAPHIC_SPACE = "\u3000";
WAVE_DASH = "\uff5e";  # full-width tilde, kept as the Japanese wave dash
ELLIPSIS = "…";

# Half-width (semi-)voiced sound marks: combining form and standalone fallback
COMBINING_MARKS = { "\uff9e": "\u3099", "\uff9f": "\u309a" };
STANDALONE_MARKS = { "\uff9e": "\u309b", "\uff9f": "\u309c" };

WHITESPACE_RUN = re.compile( r'\s+' );
ELLIPSIS_VARIANTS = re.compile( r'\.{3,}|・{3,}|[‥⋯]' );

BRACKET_PAIRS = {
    "「": "」",
    "『": "』",
    "(": ")",
    "[": "]",
    "【": "】",
    "〈": "〉",
    "《": "》",
    "〔": "〕",
};

GAIJI_MARKER = re.compile( r'\[外:[0-9A-Fa-f]+\]' );
BIDI_CONTROLS = re.compile( "[\u200e\u200f\u202a-\u202e\u2066-\u2069\ufeff]" );
BIDI_ENTITIES = re.compile( r'&(?:lrm|rlm);' );
EMPTY_TAGS = re.compile( r'\{\s*\}|<\s*>' );
LEAKED_ESCAPES = re.compile( r'\\[Nnh]' );
REPEATED_PUNCTUATION = (
    ( re.compile( r'。{2,}' ), "。" ),
    ( re.compile( r'、{2,}' ), "、" ),
    ( re.compile( ELLIPSIS + r'{3,}' ), ELLIPSIS * 2 ),
);


@dataclass( frozen=True )
class NormalizerConfig:
    """Layout limits for the Japanese fixer."""

    max_lines: int = 2;          # Preferred maximum lines per cue
    max_line_length: int = 32;   # Display columns (16 full-width characters)

    def __post_init__( self ):
        if self.max_lines < 1:
            raise ValueError( "max_lines must be at least 1" );
        if self.max_line_length < 1:
            raise ValueError( "max_line_length must be at least 1" );


def is_japanese( ch: str ) -> bool:
    """Whether a character is kana or a common kanji."""
    return (
        "\u3040" <= ch <= "\u30ff"      # Hiragana + Katakana
        or "\uff66" <= ch <= "\uff9d"   # Half-width Katakana
        or "\u4e00" <= ch <= "\u9faf"   # Common + Uncommon Kanji
    );


def contains_japanese( text: str ) -> bool:
    return any( is_japanese( ch ) for ch in text );


# --- rule 1: width ---------------------------------------------------------

def normalize_width_text( text: str ) -> str:
    """
    Convert glyph widths for horizontal captions.

    Full-width ASCII becomes half-width (except the wave dash), half-width
    katakana and punctuation become full-width. A half-width voicing mark
    merges into the previous kana when Unicode has the composed character.
    """
    result: List[str] = [];
    for ch in text:
        if ch in COMBINING_MARKS:
            if result:
                composed = unicodedata.normalize( "NFC", result[-1] + COMBINING_MARKS[ch] );
                if len( composed ) == 1:
                    result[-1] = composed;
                    continue;
            result.append( STANDALONE_MARKS[ch] );
        elif "\uff61" <= ch <= "\uff9d":
            result.append( unicodedata.normalize( "NFKC", ch ) );
        elif "\uff01" <= ch <= "\uff5e" and ch != WAVE_DASH:
            result.append( chr( ord( ch ) - 0xfee0 ) );
        else:
            result.append( ch );
    return "".join( result );


def normalize_width( lines: Sequence[Line] ) -> Tuple[Line, ...]:
    return tuple( line.map_plain( normalize_width_text ) for line in lines );


# --- rule 2: whitespace and layout -----------------------------------------

def _collapse_run( match ) -> str:
    run = match.group();
    return IDEOGRAPHIC_SPACE if set( run ) == { IDEOGRAPHIC_SPACE } else " ";


def _collapse_whitespace( line: Line ) -> Line:
    """Collapse whitespace runs, including runs split by markup."""
    spans = [];
    ends_with_space = False;
    for span in line.spans:
        if isinstance( span, PlainText ):
            text = WHITESPACE_RUN.sub( _collapse_run, span.text );
            if ends_with_space:
                text = text.lstrip();
            if text:
                ends_with_space = text[-1].isspace();
            span = PlainText( text );
        spans.append( span );
    return Line( tuple( spans ) );


def _strip_edges( line: Line ) -> Line:
    """Strip whitespace from the rendered start and end of a line."""
    spans = list( line.spans );
    for position in range( len( spans ) ):
        if isinstance( spans[position], PlainText ):
            spans[position] = PlainText( spans[position].text.lstrip() );
            if spans[position].text:
                break;
    for position in reversed( range( len( spans ) ) ):
        if isinstance( spans[position], PlainText ):
            spans[position] = PlainText( spans[position].text.rstrip() );
            if spans[position].text:
                break;
    return Line( tuple( spans ) );


def tidy_line( line: Line ) -> Line:
    return _strip_edges( _collapse_whitespace( line ) );


def settled_width( line: Line ) -> int:
    """Display width of a line once punctuation and marker cleanup have run."""
    return text_width( _remove_markers_line( _normalize_punctuation_line( line ) ).plain );


def _rewrap( lines: List[Line], max_lines: int, max_line_length: int ) -> List[Line]:
    """Merge the narrowest adjacent pair until the cue fits, or nothing fits."""
    while len( lines ) > max_lines:
        widths = [ settled_width( line ) for line in lines ];
        best_width, best_position = None, 0;
        for position in range( len( lines ) - 1 ):
            separator = 1 if widths[position] and widths[position + 1] else 0;
            combined = widths[position] + separator + widths[position + 1];
            if best_width is None or combined < best_width:
                best_width, best_position = combined, position;

        if best_width > max_line_length:
            break;
        merged = lines[best_position].joined( lines[best_position + 1] );
        lines[best_position:best_position + 2] = [ merged ];
    return lines;


def clean_layout( lines: Sequence[Line], max_lines: int = 2, max_line_length: int = 32 ) -> Tuple[Line, ...]:
    """
    Clean whitespace and re-wrap cues with too many lines.

    Lines that cannot be merged within ``max_line_length`` are left as they
    are; content is never truncated.
    """
    tidied = [ tidy_line( line ) for line in lines ];
    return tuple( _rewrap( tidied, max_lines, max_line_length ) );


# --- rule 3: punctuation ---------------------------------------------------

def normalize_punctuation_text( text: str ) -> str:
    text = ELLIPSIS_VARIANTS.sub( ELLIPSIS, text );
    return text.replace( "〜", WAVE_DASH );


def _encloses( text: str, opener: str, closer: str ) -> bool:
    """Whether the bracket opening the text is the one closing it."""
    depth = 0;
    for position, ch in enumerate( text ):
        if ch == opener:
            depth += 1;
        elif ch == closer:
            depth -= 1;
            if depth == 0:
                return position == len( text ) - 1;
    return False;


def _redundant_pair( plain: str ) -> bool:
    if len( plain ) < 4 or plain[0] not in BRACKET_PAIRS:
        return False;
    opener = plain[0];
    closer = BRACKET_PAIRS[opener];
    return (
        plain[1] == opener
        and plain[-1] == closer
        and plain[-2] == closer
        and _encloses( plain, opener, closer )
        and _encloses( plain[1:-1], opener, closer )
    );


def _drop_outer_characters( line: Line ) -> Line:
    spans = list( line.spans );
    plain_positions = [ position for position, span in enumerate( spans ) if isinstance( span, PlainText ) ];
    first, last = plain_positions[0], plain_positions[-1];
    spans[first] = PlainText( spans[first].text[1:] );
    spans[last] = PlainText( spans[last].text[:-1] );
    return Line( tuple( spans ) );


def _normalize_punctuation_line( line: Line ) -> Line:
    line = line.map_plain( normalize_punctuation_text );
    while _redundant_pair( line.plain ):
        line = _drop_outer_characters( line );
    return line;


def normalize_punctuation( lines: Sequence[Line] ) -> Tuple[Line, ...]:
    return tuple( _normalize_punctuation_line( line ) for line in lines );


# --- rule 4: markers -------------------------------------------------------

def strip_markers_text( text: str ) -> str:
    text = GAIJI_MARKER.sub( "", text );
    text = BIDI_CONTROLS.sub( "", text );
    text = BIDI_ENTITIES.sub( "", text );
    text = EMPTY_TAGS.sub( "", text );
    text = LEAKED_ESCAPES.sub( " ", text );
    for pattern, replacement in REPEATED_PUNCTUATION:
        text = pattern.sub( replacement, text );
    return text;


def _remove_markers_line( line: Line ) -> Line:
    # Removal can expose new ellipses, brackets or spaces; settle them here
    while True:
        cleaned = tidy_line( _normalize_punctuation_line( line.map_plain( strip_markers_text ) ) );
        if cleaned == line:
            return line;
        line = cleaned;


def _trim_blank_edges( lines: List[Line] ) -> List[Line]:
    start, end = 0, len( lines );
    while start < end and not lines[start].text:
        start += 1;
    while end > start and not lines[end - 1].text:
        end -= 1;
    return lines[start:end];


def remove_markers( lines: Sequence[Line] ) -> Tuple[Line, ...]:
    """
    Strip residual markers from every line of a cue.

    Lines the removal leaves empty are dropped, together with blank lines
    that end up above or below the remaining text. A cue holding nothing but
    markers keeps its lines as they were, so it still shows something.
    """
    kept = [];
    for line in lines:
        cleaned = _remove_markers_line( line );
        if cleaned.text or not line.text:
            kept.append( cleaned );

    kept = _trim_blank_edges( kept );
    if not kept:
        return tuple( lines );
    return tuple( kept );


# --- pipeline --------------------------------------------------------------

def build_rules( config: Optional[NormalizerConfig] = None ) -> Tuple[LineRule, ...]:
    """Ordered rules for a configuration."""
    config = config or NormalizerConfig();
    return (
        normalize_width,
        partial( clean_layout, max_lines=config.max_lines, max_line_length=config.max_line_length ),
        normalize_punctuation,
        remove_markers,
    );


RULES = build_rules();


def normalize_lines( lines: Sequence[Line], config: Optional[NormalizerConfig] = None ) -> Tuple[Line, ...]:
    rules = RULES if config is None else build_rules( config );
    result = tuple( lines );
    for rule in rules:
        result = rule( result );
    return result;


def normalize( track: Track, config: Optional[NormalizerConfig] = None ) -> Track:
    """
    Run the Japanese fixer over every cue of a track.

    Args:
        track: Track to clean
        config: Layout limits (defaults to two lines of 32 columns)

    Returns:
        New track with the same cues, timings and order
    """
    return track.with_cues( cue.with_lines( normalize_lines( cue.lines, config ) ) for cue in track.cues );
