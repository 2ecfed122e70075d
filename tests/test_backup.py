"""
Test cases for backups taken before in-place edits.
"""
import pytest
from pathlib import Path
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from subfix.backup import BackupManager, get_backup_manager


class TestBackupManager:
    """Test cases for the backup manager."""

    def test_create_backup( self, tmp_path ):
        source = tmp_path / "movie.srt";
        source.write_text( "original", encoding="utf-8" );

        manager = BackupManager( tmp_path / "backup" );
        backup = manager.create_backup( source );

        assert backup.parent == tmp_path / "backup";
        assert backup.name.startswith( "movie." );
        assert backup.suffix == ".srt";
        assert backup.read_text( encoding="utf-8" ) == "original";

    def test_backups_do_not_collide( self, tmp_path ):
        """Test that backups in the same second get distinct names."""
        source = tmp_path / "movie.srt";
        source.write_text( "x", encoding="utf-8" );

        manager = BackupManager( tmp_path / "backup" );
        first = manager.create_backup( source );
        second = manager.create_backup( source );
        assert first != second;
        assert first.exists() and second.exists();

    def test_retention_limit( self, tmp_path ):
        source = tmp_path / "movie.srt";
        manager = BackupManager( tmp_path / "backup", limit=2 );

        created = [];
        for version in range( 4 ):
            source.write_text( f"version {version}", encoding="utf-8" );
            created.append( manager.create_backup( source ) );

        remaining = manager.get_existing_backups( source );
        assert len( remaining ) == 2;
        assert [ path for path, _ in remaining ] == created[-2:];

    def test_other_files_are_ignored( self, tmp_path ):
        backup_dir = tmp_path / "backup";
        backup_dir.mkdir();
        ( backup_dir / "movie.notes.srt" ).write_text( "x", encoding="utf-8" );
        ( backup_dir / "other.2024-01-01T00-00-00.srt" ).write_text( "x", encoding="utf-8" );

        manager = BackupManager( backup_dir );
        assert manager.get_existing_backups( tmp_path / "movie.srt" ) == [];

    def test_missing_file( self, tmp_path ):
        manager = BackupManager( tmp_path / "backup" );
        with pytest.raises( FileNotFoundError ):
            manager.create_backup( tmp_path / "missing.srt" );

    def test_invalid_limit( self, tmp_path ):
        with pytest.raises( ValueError ):
            BackupManager( tmp_path, limit=0 );


class TestGlobalManager:
    """Test cases for the shared backup manager."""

    def test_reused_with_same_settings( self, tmp_path ):
        first = get_backup_manager( tmp_path / "a", 5 );
        assert get_backup_manager( tmp_path / "a", 5 ) is first;

    def test_rebuilt_when_settings_change( self, tmp_path ):
        first = get_backup_manager( tmp_path / "a", 5 );
        second = get_backup_manager( tmp_path / "b", 5 );
        assert second is not first;
        assert second.backup_dir == tmp_path / "b";


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
