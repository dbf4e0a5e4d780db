"""Disk cache for downloaded reference images.

Entries are immutable once written and keyed by generated filename, so
re-searching the same subject creates new entries rather than reusing old ones.
Eviction is purely age based: files whose modification time is older than
`max_age` seconds are deleted.
"""

import asyncio
import os
import time
from pathlib import Path
from config import CACHE_MAX_AGE_SECONDS, CACHE_SWEEP_INTERVAL
from utils.helpers import ensure_directory, slugify
from utils.logger import setup_logger

logger = setup_logger(__name__)


class TempFileCache:
    """Directory of normalized reference images with time-based eviction."""

    def __init__(self, directory: str, max_age: float = CACHE_MAX_AGE_SECONDS):
        self.directory = Path(directory)
        self.max_age = max_age

    def ensure(self) -> Path:
        ensure_directory(str(self.directory))
        return self.directory

    def path_for(self, subject: str, source: str, extension: str) -> Path:
        """Reserve a fresh path `<slug>-<source>-<epoch-ms><ext>` inside the cache.

        The file is created empty with O_EXCL, so concurrent callers never get
        the same name. The caller is expected to replace it with real content.

        :param subject: Subject name the image was searched for.
        :param source: Provider name.
        :param extension: File extension including the dot.
        :return: Path of the newly created, empty file.
        """
        self.ensure()
        slug = slugify(subject)
        timestamp = int(time.time() * 1000)
        while True:
            path = self.directory / f"{slug}-{source}-{timestamp}{extension}"
            try:
                fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                # Same subject/source within one millisecond: bump until unique
                timestamp += 1
                continue
            os.close(fd)
            return path

    def cleanup(self, now: float | None = None) -> int:
        """Delete cache files older than max_age.

        :param now: Reference epoch time (defaults to current time).
        :return: Number of files deleted.
        """
        if not self.directory.exists():
            return 0

        now = time.time() if now is None else now
        deleted = 0
        for item in self.directory.iterdir():
            try:
                if not item.is_file():
                    continue
                if now - item.stat().st_mtime > self.max_age:
                    item.unlink()
                    deleted += 1
                    logger.info(f"Cleaned up old temp file: {item.name}")
            except OSError as e:
                logger.error(f"Error cleaning up temp file {item.name}: {e}")

        if deleted:
            logger.info(f"Cache sweep removed {deleted} file(s) from {self.directory}")
        return deleted

    async def run_periodic_cleanup(self, interval: float = CACHE_SWEEP_INTERVAL) -> None:
        """Sweep the cache every `interval` seconds until cancelled."""
        logger.debug(f"Periodic cache sweep every {interval}s for {self.directory}")
        while True:
            await asyncio.sleep(interval)
            self.cleanup()
