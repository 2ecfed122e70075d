"""
Logging for subfix: Rich console output plus an optional rotating log file.
"""
import logging
import shutil
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

MAX_LOG_BYTES = 5 * 1024 * 1024;  # 5MB
LOG_BACKUP_COUNT = 5;


class SubfixLogger:
    """
    Application logger with Rich display and size-bounded log files.

    Features:
    - Rich console output on stderr (stdout is reserved for subtitle output)
    - INFO by default, DEBUG with --debug
    - File logging with rotation, only when a log directory is configured
    - 5MB size check on startup, moves an oversized log aside
    """

    def __init__( self, name: str = "subfix", debug: bool = False, log_dir: Optional[Union[str, Path]] = None ):
        self.name = name;
        self.debug_mode = debug;
        self.console = Console( stderr=True );

        self.log_dir = Path( log_dir ) if log_dir else None;
        self.log_file = None;
        if self.log_dir is not None:
            self.log_dir.mkdir( parents=True, exist_ok=True );
            self.log_file = self.log_dir / f"{name}.log";
            self._check_and_rotate_on_startup();

        self.logger = self._setup_logger();

    def _check_and_rotate_on_startup( self ):
        """Move the log file aside if it grew past 5MB since the last run."""
        if self.log_file.exists() and self.log_file.stat().st_size > MAX_LOG_BYTES:
            timestamp = datetime.now().isoformat().replace( ":", "-" );
            rotated = self.log_dir / f"{self.name}.{timestamp}.log";
            shutil.move( str( self.log_file ), str( rotated ) );
            self.console.print( f"Rotated log file to {rotated}" );

    def _setup_logger( self ) -> logging.Logger:
        logger = logging.getLogger( self.name );
        logger.setLevel( logging.DEBUG if self.debug_mode else logging.INFO );
        logger.propagate = False;

        for handler in list( logger.handlers ):
            handler.close();
        logger.handlers.clear();

        console_handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=self.debug_mode,
            show_path=self.debug_mode
        );
        console_handler.setLevel( logging.DEBUG if self.debug_mode else logging.INFO );
        console_handler.setFormatter( logging.Formatter( "%(message)s" ) );
        logger.addHandler( console_handler );

        if self.log_file is not None:
            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=MAX_LOG_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8"
            );
            file_handler.setLevel( logging.DEBUG );
            file_handler.setFormatter( logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ) );
            logger.addHandler( file_handler );

        return logger;

    def debug( self, message, **kwargs ):
        self.logger.debug( message, **kwargs );

    def info( self, message, **kwargs ):
        self.logger.info( message, **kwargs );

    def warning( self, message, **kwargs ):
        self.logger.warning( message, **kwargs );

    def error( self, message, **kwargs ):
        self.logger.error( message, **kwargs );

    def exception( self, message, **kwargs ):
        self.logger.exception( message, **kwargs );


# Global logger instance
_logger = None;


def get_logger() -> SubfixLogger:
    """Get the global logger, creating a console-only one on first use."""
    global _logger;
    if _logger is None:
        _logger = SubfixLogger();
    return _logger;


def setup_logging( debug: bool = False, log_dir: Optional[Union[str, Path]] = None ) -> SubfixLogger:
    """(Re)configure the global logger for a CLI run."""
    global _logger;
    _logger = SubfixLogger( debug=debug, log_dir=log_dir );
    return _logger;
