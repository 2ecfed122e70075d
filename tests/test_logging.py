"""
Test cases for the logger setup.
"""
import logging
import pytest
from logging.handlers import RotatingFileHandler
from pathlib import Path
from unittest.mock import patch
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from rich.logging import RichHandler

from subfix.logging import SubfixLogger, get_logger, setup_logging


class TestSubfixLogger:
    """Test cases for the logger wrapper."""

    def test_console_only_by_default( self ):
        """Test that no log file is created unless a directory is given."""
        logger = SubfixLogger();
        handlers = logger.logger.handlers;
        assert len( handlers ) == 1;
        assert isinstance( handlers[0], RichHandler );
        assert logger.log_file is None;

    def test_debug_mode( self ):
        logger = SubfixLogger( debug=True );
        assert logger.debug_mode;
        assert logger.logger.level == logging.DEBUG;
        assert callable( logger.debug );

    def test_info_level( self ):
        assert SubfixLogger().logger.level == logging.INFO;

    def test_file_handler( self, tmp_path ):
        logger = SubfixLogger( log_dir=tmp_path / "logs" );
        assert any( isinstance( handler, RotatingFileHandler ) for handler in logger.logger.handlers );

        logger.info( "written to file" );
        for handler in logger.logger.handlers:
            handler.flush();
        assert "written to file" in ( tmp_path / "logs" / "subfix.log" ).read_text( encoding="utf-8" );

    def test_rotation_on_startup( self, tmp_path ):
        """Test that an oversized log file is moved aside on startup."""
        log_dir = tmp_path / "logs";
        log_dir.mkdir();
        ( log_dir / "subfix.log" ).write_text( "x" * 100, encoding="utf-8" );

        with patch( 'subfix.logging.MAX_LOG_BYTES', 10 ):
            SubfixLogger( log_dir=log_dir );

        rotated = [ path for path in log_dir.iterdir() if path.name != "subfix.log" ];
        assert len( rotated ) == 1;
        assert rotated[0].read_text( encoding="utf-8" ) == "x" * 100;

    def test_reconfigure_replaces_handlers( self, tmp_path ):
        SubfixLogger( log_dir=tmp_path );
        logger = SubfixLogger();
        assert len( logger.logger.handlers ) == 1;


class TestGlobalLogger:
    """Test cases for the global logger helpers."""

    def test_setup_replaces_global( self ):
        configured = setup_logging( debug=True );
        assert get_logger() is configured;
        assert get_logger().debug_mode;

        reset = setup_logging();
        assert get_logger() is reset;
        assert not reset.debug_mode;


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
