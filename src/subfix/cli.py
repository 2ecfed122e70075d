"""
CLI entry point for subfix with argument parsing and environment variable loading.
"""
import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from . import __version__, pipeline
from .backup import DEFAULT_BACKUP_LIMIT, get_backup_manager
from .cleanup import merge_simultaneous, track_stats
from .errors import SubtitleError
from .files import OUTPUT_SUFFIX, is_stdio, read_text, resolve_output, validate_input_file, write_text
from .formats import detect_format, format_timestamp
from .japanese import NormalizerConfig
from .logging import setup_logging
from .shift import parse_offset

DEFAULT_MAX_LINE_LENGTH = 32;
DEFAULT_MAX_LINES = 2;
DEFAULT_BACKUP_DIR = "backup";


class SubfixCLI:
    """
    Command line interface for subfix.

    Subcommands convert, shift, clean up and describe subtitle files.
    Defaults for the Japanese fixer, logging and backups can be overridden
    from the environment or a ``.env`` file.
    """

    def __init__( self ):
        self.parser = self._create_parser();
        self.args = None;
        self.logger = None;
        self.config = None;
        self.offset_ms = None;

    def _add_file_argument( self, parser ):
        parser.add_argument(
            "file",
            help="Subtitle file (.vtt or .srt), or - for stdin"
        );

    def _add_output_arguments( self, parser, in_place: bool ):
        group = parser.add_mutually_exclusive_group() if in_place else parser;
        group.add_argument(
            "--output", "-o",
            help="Output file (defaults to stdout when piped, otherwise a file in the current directory)"
        );
        if in_place:
            group.add_argument(
                "--in-place",
                action="store_true",
                help="Rewrite the input file (a backup is taken first)"
            );

    def _create_parser( self ):
        """Create argument parser with all subcommands."""
        parser = argparse.ArgumentParser(
            prog="subfix",
            description="Convert, shift and clean up WebVTT and SubRip subtitles",
            epilog="Environment variables: SUBFIX_MAX_LINE_LENGTH, SUBFIX_MAX_LINES, "
                   "SUBFIX_LOG_DIR, SUBFIX_BACKUP_DIR, SUBFIX_BACKUP_LIMIT"
        );
        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}"
        );
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode with verbose output"
        );
        parser.add_argument(
            "--log-dir",
            type=Path,
            help="Also write a rotating log file into this directory (default: $SUBFIX_LOG_DIR)"
        );

        commands = parser.add_subparsers( dest="command", metavar="COMMAND" );
        commands.required = True;

        convert = commands.add_parser( "convert", help="Convert a subtitle file to SubRip" );
        self._add_file_argument( convert );
        self._add_output_arguments( convert, in_place=False );
        convert.add_argument(
            "--fix-jp",
            action="store_true",
            dest="fix_japanese",
            help="Fix common issues with Japanese subtitles"
        );
        convert.add_argument(
            "--offset",
            type=int,
            metavar="MS",
            help="Shift every cue by this many milliseconds (negative moves earlier)"
        );

        shift = commands.add_parser( "shift", help="Shift every cue by a fixed time" );
        self._add_file_argument( shift );
        shift.add_argument(
            "--by",
            required=True,
            metavar="SECONDS|TIMESTAMP",
            help="Offset as seconds (1.5, -2) or a timestamp (--by=-00:01.250)"
        );
        self._add_output_arguments( shift, in_place=True );

        cleanup = commands.add_parser( "cleanup", help="Clean up a subtitle file" );
        self._add_file_argument( cleanup );
        cleanup.add_argument(
            "--fix-jp",
            action="store_true",
            dest="fix_japanese",
            help="Fix common issues with Japanese subtitles"
        );
        cleanup.add_argument(
            "--merge-simultaneous",
            action="store_true",
            help="Merge adjacent cues with the same start and end time"
        );
        cleanup.add_argument(
            "--max-line-length",
            type=int,
            help=f"Line width in display columns for --fix-jp (default: {DEFAULT_MAX_LINE_LENGTH})"
        );
        cleanup.add_argument(
            "--max-lines",
            type=int,
            help=f"Preferred lines per cue for --fix-jp (default: {DEFAULT_MAX_LINES})"
        );
        self._add_output_arguments( cleanup, in_place=True );

        info = commands.add_parser( "info", help="Show a summary of a subtitle file" );
        self._add_file_argument( info );

        return parser;

    def _load_environment( self ):
        """Load settings from a .env file and the environment."""
        env_file = Path( ".env" );
        if env_file.exists():
            load_dotenv( env_file );

        self.env_max_line_length = os.getenv( "SUBFIX_MAX_LINE_LENGTH" );
        self.env_max_lines = os.getenv( "SUBFIX_MAX_LINES" );
        self.env_log_dir = os.getenv( "SUBFIX_LOG_DIR" );
        self.env_backup_dir = os.getenv( "SUBFIX_BACKUP_DIR" );
        self.env_backup_limit = os.getenv( "SUBFIX_BACKUP_LIMIT" );

    def _setting( self, cli_value, env_value, name: str, default: int, errors: list ) -> int:
        """Pick a positive integer setting: flag, then environment, then default."""
        if cli_value is not None:
            value = cli_value;
        elif env_value:
            try:
                value = int( env_value );
            except ValueError:
                errors.append( f"{name} must be an integer, got: {env_value!r}" );
                return default;
        else:
            value = default;

        if value < 1:
            errors.append( f"{name} must be at least 1" );
            return default;
        return value;

    def _validate_arguments( self ):
        """Validate parsed arguments and environment setup."""
        errors = [];

        error = validate_input_file( self.args.file );
        if error:
            errors.append( error );

        max_line_length = self._setting(
            getattr( self.args, "max_line_length", None ), self.env_max_line_length,
            "Maximum line length", DEFAULT_MAX_LINE_LENGTH, errors
        );
        max_lines = self._setting(
            getattr( self.args, "max_lines", None ), self.env_max_lines,
            "Maximum lines", DEFAULT_MAX_LINES, errors
        );
        self.config = NormalizerConfig( max_lines=max_lines, max_line_length=max_line_length );

        self.backup_limit = self._setting(
            None, self.env_backup_limit, "Backup limit", DEFAULT_BACKUP_LIMIT, errors
        );
        self.backup_dir = Path( self.env_backup_dir or DEFAULT_BACKUP_DIR );

        if getattr( self.args, "in_place", False ):
            if is_stdio( self.args.file ):
                errors.append( "--in-place needs an input file, not stdin" );
            elif Path( self.args.file ).suffix.lower() != OUTPUT_SUFFIX:
                # Output is always SubRip
                errors.append( f"--in-place only edits {OUTPUT_SUFFIX} files; use -o to write {self.args.file} as SubRip" );

        if self.args.command == "shift":
            try:
                self.offset_ms = parse_offset( self.args.by );
            except SubtitleError:
                errors.append( f"Invalid offset: {self.args.by!r} (use seconds like 1.5 or a timestamp like -00:01.250)" );
        elif self.args.command == "convert":
            self.offset_ms = self.args.offset;

        return errors;

    def parse_args( self, argv=None ):
        """Parse command line arguments and validate configuration."""
        self.args = self.parser.parse_args( argv );

        self._load_environment();

        # --log-dir beats the environment; without either only the console is used
        log_dir = self.args.log_dir or self.env_log_dir;
        self.logger = setup_logging( debug=self.args.debug, log_dir=log_dir );

        errors = self._validate_arguments();
        if errors:
            self.logger.error( "Configuration errors:" );
            for error in errors:
                self.logger.error( f"  - {error}" );
            sys.exit( 1 );

        self.logger.debug( f"subfix v{__version__}: {self.args.command} {self.args.file}" );
        self.logger.debug( f"Normalizer: {self.config}" );
        return self.args;

    def _read_track( self ):
        text = read_text( self.args.file );
        track = pipeline.decode( text );
        self.logger.debug( f"Read {len( track )} cues from {self.args.file}" );
        if getattr( self.args, "fix_japanese", False ) and not track_stats( track ).has_japanese:
            self.logger.warning( f"--fix-jp given but {self.args.file} has no Japanese text" );
        return track;

    def _write_track( self, track, suffix: str ):
        output = resolve_output(
            self.args.file,
            self.args.output,
            getattr( self.args, "in_place", False ),
            suffix
        );
        if getattr( self.args, "in_place", False ):
            get_backup_manager( self.backup_dir, self.backup_limit ).create_backup( Path( self.args.file ) );
        write_text( pipeline.encode( track ), output );

    def run_convert( self ):
        track = pipeline.transform(
            self._read_track(),
            offset_ms=self.offset_ms,
            fix_japanese=self.args.fix_japanese,
            config=self.config
        );
        self._write_track( track, "" );

    def run_shift( self ):
        track = pipeline.transform( self._read_track(), offset_ms=self.offset_ms );
        self._write_track( track, "_modified" );

    def run_cleanup( self ):
        track = self._read_track();
        if not ( self.args.merge_simultaneous or self.args.fix_japanese ):
            self.logger.warning( "No cleanup selected (use --fix-jp and/or --merge-simultaneous); re-encoding only" );

        if self.args.merge_simultaneous:
            before = len( track );
            track = merge_simultaneous( track );
            self.logger.info( f"Merged {before - len( track )} simultaneous cue(s)" );
        track = pipeline.transform( track, fix_japanese=self.args.fix_japanese, config=self.config );
        self._write_track( track, "_modified" );

    def run_info( self, console: Console = None ):
        """Print a summary table of the input file to stdout."""
        text = read_text( self.args.file );
        fmt = detect_format( text );
        track = pipeline.decode( text, fmt );
        stats = track_stats( track );

        table = Table( title=str( self.args.file ), show_header=False );
        table.add_column( "Property", style="bold" );
        table.add_column( "Value" );
        table.add_row( "Format", "WebVTT" if fmt == "vtt" else "SubRip" );
        table.add_row( "Cues", str( stats.cue_count ) );
        if stats.cue_count:
            table.add_row( "First cue", format_timestamp( stats.first_start ) );
            table.add_row( "Last cue ends", format_timestamp( stats.last_end ) );
            table.add_row( "Duration", format_timestamp( stats.duration ) );
        table.add_row( "Overlapping cues", str( stats.overlaps ) );
        table.add_row( "Most lines in a cue", str( stats.max_lines ) );
        table.add_row( "Widest line", f"{stats.max_width} columns" );
        table.add_row( "Japanese text", "yes" if stats.has_japanese else "no" );

        ( console or Console() ).print( table );

    def run( self ):
        """Run the parsed subcommand."""
        handlers = {
            "convert": self.run_convert,
            "shift": self.run_shift,
            "cleanup": self.run_cleanup,
            "info": self.run_info,
        };
        handlers[self.args.command]();


def main( argv=None ):
    """Main entry point for the subfix CLI."""
    cli = SubfixCLI();
    args = cli.parse_args( argv );

    try:
        cli.run();
    except KeyboardInterrupt:
        cli.logger.warning( "Interrupted by user" );
        sys.exit( 130 );
    except ( SubtitleError, OSError, UnicodeDecodeError ) as e:
        cli.logger.error( f"{args.file}: {e}" );
        sys.exit( 1 );
    except Exception as e:
        cli.logger.error( f"Unexpected error: {e}" );
        if args.debug:
            raise;
        sys.exit( 1 );


if __name__ == "__main__":
    main();
