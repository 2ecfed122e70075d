"""
Timestamped backups taken before a subtitle file is rewritten in place.
"""
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .logging import get_logger

DEFAULT_BACKUP_LIMIT = 20;


class BackupManager:
    """
    Keeps ISO-8601 timestamped copies of files about to be modified.

    Copies are named ``<stem>.<YYYY-MM-DDTHH-MM-SS><suffix>`` inside the
    backup directory; only the newest ``limit`` copies of each file are kept.
    """

    def __init__( self, backup_dir: Optional[Path] = None, limit: int = DEFAULT_BACKUP_LIMIT ):
        if limit < 1:
            raise ValueError( "backup limit must be at least 1" );
        self.logger = get_logger();
        self.backup_dir = Path( backup_dir ) if backup_dir else Path( "backup" );
        self.limit = limit;

    def get_backup_filename( self, original_file: Path, counter: int = 0, timestamp: Optional[str] = None ) -> str:
        timestamp = timestamp or datetime.now().isoformat( timespec="seconds" ).replace( ":", "-" );
        if counter:
            timestamp = f"{timestamp}-{counter}";
        return f"{original_file.stem}.{timestamp}{original_file.suffix}";

    def get_existing_backups( self, original_file: Path ) -> List[Tuple[Path, datetime]]:
        """
        List backups of a file, oldest first.

        Args:
            original_file: File whose backups to list

        Returns:
            List of (backup_path, timestamp) tuples
        """
        pattern = f"{original_file.stem}.????-??-??T??-??-??*{original_file.suffix}";
        backups = [];
        for backup_path in self.backup_dir.glob( pattern ):
            stamp = backup_path.name[len( original_file.stem ) + 1:len( backup_path.name ) - len( original_file.suffix )];
            try:
                date_part, time_part = stamp[:19].split( "T" );
                timestamp = datetime.fromisoformat( f"{date_part}T{time_part.replace( '-', ':' )}" );
            except ValueError as e:
                self.logger.debug( f"Skipping malformed backup file {backup_path}: {e}" );
                continue;
            backups.append( ( backup_path, timestamp ) );

        backups.sort( key=lambda item: ( item[1], len( item[0].name ), item[0].name ) );
        return backups;

    def apply_retention_policy( self, original_file: Path ) -> int:
        """Delete the oldest backups beyond the limit; returns how many were removed."""
        backups = self.get_existing_backups( original_file );
        if len( backups ) <= self.limit:
            return 0;

        removed = 0;
        for backup_path, _ in backups[:-self.limit]:
            try:
                backup_path.unlink();
                removed += 1;
                self.logger.debug( f"Removed old backup: {backup_path.name}" );
            except OSError as e:
                self.logger.warning( f"Could not remove backup {backup_path}: {e}" );

        if removed:
            self.logger.info( f"Removed {removed} old backup(s) of {original_file.name}" );
        return removed;

    def create_backup( self, file_path: Path ) -> Path:
        """
        Copy a file into the backup directory and prune old copies.

        Args:
            file_path: File about to be modified

        Returns:
            Path of the new backup
        """
        file_path = Path( file_path );
        if not file_path.exists():
            raise FileNotFoundError( f"File to backup not found: {file_path}" );

        self.backup_dir.mkdir( parents=True, exist_ok=True );
        # Backups within the same second get a counter that keeps them in creation order
        timestamp = datetime.now().isoformat( timespec="seconds" ).replace( ":", "-" );
        counter = len( list( self.backup_dir.glob( f"{file_path.stem}.{timestamp}*{file_path.suffix}" ) ) );
        backup_path = self.backup_dir / self.get_backup_filename( file_path, counter, timestamp );
        while backup_path.exists():
            counter += 1;
            backup_path = self.backup_dir / self.get_backup_filename( file_path, counter, timestamp );

        shutil.copy2( file_path, backup_path );
        self.logger.info( f"Created backup: {backup_path}" );

        self.apply_retention_policy( file_path );
        return backup_path;


# Global backup manager instance
_backup_manager = None;


def get_backup_manager( backup_dir: Optional[Path] = None, limit: int = DEFAULT_BACKUP_LIMIT ) -> BackupManager:
    """Get the global backup manager, rebuilding it when the settings change."""
    global _backup_manager;
    wanted_dir = Path( backup_dir ) if backup_dir else Path( "backup" );
    if _backup_manager is None or _backup_manager.backup_dir != wanted_dir or _backup_manager.limit != limit:
        _backup_manager = BackupManager( wanted_dir, limit );
    return _backup_manager;
