"""
File handling for the command line: reading input, choosing where output goes
and writing it.
"""
import sys
from pathlib import Path
from typing import Optional, Union

from .logging import get_logger

STDIO = "-";
SUPPORTED_SUFFIXES = ( ".vtt", ".srt" );
OUTPUT_SUFFIX = ".srt";


def is_stdio( path: Union[str, Path, None] ) -> bool:
    return path is not None and str( path ) == STDIO;


def validate_input_file( input_file: Union[str, Path] ) -> Optional[str]:
    """
    Check that an input path can be read as subtitles.

    Args:
        input_file: Path to the input, or "-" for stdin

    Returns:
        Error message, or None if the input is usable
    """
    if is_stdio( input_file ):
        return None;

    path = Path( input_file );
    if not path.exists():
        return f"Input file not found: {path}";
    if not path.is_file():
        return f"Input is not a file: {path}";
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        return f"Only .vtt and .srt files are supported, got: {path.suffix or '(no extension)'}";
    return None;


def read_text( input_file: Union[str, Path] ) -> str:
    """
    Read subtitle text as UTF-8.

    A leading BOM is dropped and CRLF/CR line endings become LF, so decoders
    only ever see ``\\n``.
    """
    if is_stdio( input_file ):
        data = sys.stdin.buffer.read();
    else:
        data = Path( input_file ).read_bytes();

    text = data.decode( "utf-8-sig" );
    return text.replace( "\r\n", "\n" ).replace( "\r", "\n" );


def resolve_output( input_file: Union[str, Path], output: Optional[Union[str, Path]] = None,
                    in_place: bool = False, suffix: str = "", stdout_is_tty: Optional[bool] = None ) -> Optional[Path]:
    """
    Decide where the result of a command goes.

    Order: an explicit output path, then the input itself for in-place
    edits, then stdout when it is piped or the input came from stdin, and
    finally ``<stem><suffix>.srt`` in the current directory.

    Args:
        input_file: Input path or "-"
        output: Explicit output path ("-" forces stdout)
        in_place: Overwrite the input file
        suffix: Added to the input stem for the default file name
        stdout_is_tty: Override for terminal detection

    Returns:
        Output path, or None for stdout
    """
    if output is not None:
        return None if is_stdio( output ) else Path( output );

    if in_place:
        if is_stdio( input_file ):
            raise ValueError( "--in-place needs an input file, not stdin" );
        return Path( input_file );

    if stdout_is_tty is None:
        stdout_is_tty = sys.stdout.isatty();
    if is_stdio( input_file ) or not stdout_is_tty:
        return None;

    return Path( f"{Path( input_file ).stem}{suffix}{OUTPUT_SUFFIX}" );


def write_text( text: str, output: Optional[Path] ):
    """Write UTF-8 output with LF line endings to a file, or to stdout for None."""
    if output is None:
        sys.stdout.write( text );
        sys.stdout.flush();
        return;

    output.parent.mkdir( parents=True, exist_ok=True );
    with open( output, "w", encoding="utf-8", newline="\n" ) as handle:
        handle.write( text );
    get_logger().info( f"Wrote {output}" );
