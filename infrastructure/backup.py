"""Backups of the collection files"""
import logging
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Union

from domain.errors import PersistenceFailed
from infrastructure.repositories.json_file_repositories import COLLECTION_FILES

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class BackupManager:
    """Copies the data files verbatim into timestamped backup directories"""

    def __init__(
        self,
        data_dir: Union[str, Path],
        backup_dir: Union[str, Path],
        auto_backup: bool = True,
        interval_minutes: int = 60,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.data_dir = Path(data_dir)
        self.backup_dir = Path(backup_dir)
        self.auto_backup = auto_backup
        self.interval = timedelta(minutes=interval_minutes)
        self.clock = clock
        self.last_backup_at: Optional[datetime] = None

    def create_backup(self) -> Path:
        """Copy every existing collection file into <backup_dir>/<timestamp>/"""
        now = self.clock()
        target = self.backup_dir / now.strftime(BACKUP_TIMESTAMP_FORMAT)
        copied: List[str] = []

        try:
            target.mkdir(parents=True, exist_ok=True)
            for name in COLLECTION_FILES:
                source = self.data_dir / name
                if source.exists():
                    shutil.copy2(source, target / name)
                    copied.append(name)
        except OSError as e:
            logger.error("Failed to create backup in %s: %s", target, e)
            raise PersistenceFailed(f"Failed to create backup: {e}", str(target)) from e

        self.last_backup_at = now
        logger.info("Backup created successfully in %s (%s)", target, ", ".join(copied) or "no files")
        return target

    def backup_due(self, now: Optional[datetime] = None) -> bool:
        if not self.auto_backup:
            return False
        if self.last_backup_at is None:
            return True
        return (now or self.clock()) - self.last_backup_at >= self.interval

    def maybe_backup(self, now: Optional[datetime] = None) -> Optional[Path]:
        """Run an automatic backup when one is due; failures are only logged"""
        if not self.backup_due(now):
            return None
        try:
            return self.create_backup()
        except PersistenceFailed as e:
            logger.warning("Automatic backup skipped: %s", e)
            return None
