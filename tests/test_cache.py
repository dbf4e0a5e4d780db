"""Tests for the reference image disk cache."""

import asyncio
import os
import re
import time
from unittest.mock import patch

import pytest

from caricature.search.cache import TempFileCache


def test_path_for_encodes_subject_source_and_timestamp(tmp_path):
    """Filename is <slug>-<source>-<epoch-ms><ext> inside the cache directory."""
    cache = TempFileCache(str(tmp_path / "cache"))

    path = cache.path_for("Oprah Winfrey!", "google", ".png")

    assert path.parent == tmp_path / "cache"
    assert re.fullmatch(r"oprah-winfrey--google-\d{13}\.png", path.name)


def test_path_for_never_reuses_existing_file(tmp_path):
    """Identical inputs in the same millisecond still get distinct files."""
    cache = TempFileCache(str(tmp_path))

    first = cache.path_for("Jon Stewart", "pexels", ".jpg")
    first.write_bytes(b"x")
    second = cache.path_for("Jon Stewart", "pexels", ".jpg")

    assert first != second
    assert second.read_bytes() == b""


@patch("caricature.search.cache.time.time", return_value=1700000000.0)
def test_path_for_reserves_name_before_content_is_written(mock_time, tmp_path):
    """Two reservations before either is written never share a name."""
    cache = TempFileCache(str(tmp_path))

    first = cache.path_for("Jon Stewart", "pexels", ".jpg")
    second = cache.path_for("Jon Stewart", "pexels", ".jpg")

    assert first.name == "jon-stewart-pexels-1700000000000.jpg"
    assert second.name == "jon-stewart-pexels-1700000000001.jpg"
    assert first.exists() and second.exists()


def test_cleanup_deletes_only_files_older_than_max_age(tmp_path):
    """A >24h old file is evicted, a fresh one is kept."""
    cache = TempFileCache(str(tmp_path))
    old_file = tmp_path / "old-google-1.jpg"
    new_file = tmp_path / "new-google-2.jpg"
    old_file.write_bytes(b"old")
    new_file.write_bytes(b"new")

    now = time.time()
    day = 24 * 60 * 60
    os.utime(old_file, (now - day - 60, now - day - 60))
    os.utime(new_file, (now - day + 60, now - day + 60))

    deleted = cache.cleanup(now=now)

    assert deleted == 1
    assert not old_file.exists()
    assert new_file.exists()


def test_cleanup_ignores_subdirectories(tmp_path):
    cache = TempFileCache(str(tmp_path), max_age=0)
    (tmp_path / "nested").mkdir()

    assert cache.cleanup(now=time.time() + 10) == 0
    assert (tmp_path / "nested").is_dir()


def test_cleanup_missing_directory_is_noop(tmp_path):
    """Missing cache directory returns 0 instead of raising."""
    cache = TempFileCache(str(tmp_path / "does-not-exist"))

    assert cache.cleanup() == 0


def test_periodic_cleanup_sweeps_repeatedly_until_cancelled(tmp_path):
    """The background sweep runs every interval and stops on cancellation."""
    cache = TempFileCache(str(tmp_path))

    async def run():
        with patch.object(cache, "cleanup", return_value=0) as cleanup:
            task = asyncio.create_task(cache.run_periodic_cleanup(interval=0.01))
            await asyncio.sleep(0.2)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return cleanup.call_count

    assert asyncio.run(run()) > 1
