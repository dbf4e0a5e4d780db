"""Download + resize + re-encode + cache-write of discovered remote images."""

import asyncio
import os
from io import BytesIO

import aiofiles
import aiohttp
from aiohttp import ClientTimeout
from PIL import Image, UnidentifiedImageError

from config import (
    DOWNLOAD_TIMEOUT,
    MAX_DOWNLOAD_BYTES,
    NORMALIZED_MAX_SIZE,
    NORMALIZED_QUALITY,
)
from caricature.errors import DownloadError
from utils.helpers import get_image_extension
from utils.logger import setup_logger
from .cache import TempFileCache

logger = setup_logger(__name__)

DOWNLOAD_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/121.0 Safari/537.36"
    ),
    "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
}


class ImageNormalizer:
    """Fetches a remote image and stores a bounded JPEG copy in the cache.

    `normalize` never raises: every failure is logged with provider and subject
    context and reported as None, and nothing is left in the cache directory.
    """

    def __init__(
        self,
        cache: TempFileCache,
        max_bytes: int = MAX_DOWNLOAD_BYTES,
        timeout: float = DOWNLOAD_TIMEOUT,
        max_size: tuple[int, int] = NORMALIZED_MAX_SIZE,
        quality: int = NORMALIZED_QUALITY,
    ):
        self.cache = cache
        self.max_bytes = max_bytes
        self.timeout = timeout
        self.max_size = max_size
        self.quality = quality

    async def normalize(
        self,
        url: str,
        subject: str,
        source: str,
        session: aiohttp.ClientSession,
    ) -> str | None:
        """Download `url`, normalize it and return the cached file path.

        :param url: Remote image URL.
        :param subject: Person the image was searched for (used in the filename).
        :param source: Provider name (used in the filename and logs).
        :param session: Shared aiohttp session.
        :return: Local path, or None when any step failed.
        """
        logger.info(f"Downloading image from {source}: {url}")
        try:
            raw = await self._download(url, subject, source, session)
            encoded = await asyncio.to_thread(self._reencode, raw, url, subject, source)
            path = self.cache.path_for(subject, source, get_image_extension(url))
            await self._write_atomic(path, encoded)
        except DownloadError as e:
            logger.warning(str(e))
            return None
        except OSError as e:
            logger.warning(f"[{source}] could not write cached image for '{subject}': {e}")
            return None

        logger.info(f"Downloaded and processed: {path.name}")
        return str(path)

    async def _download(self, url: str, subject: str, source: str, session: aiohttp.ClientSession) -> bytes:
        timeout = ClientTimeout(total=self.timeout)
        try:
            async with session.get(url, timeout=timeout, headers=DOWNLOAD_HEADERS, allow_redirects=True) as resp:
                if resp.status < 200 or resp.status >= 300:
                    raise DownloadError(source, subject, url, f"HTTP status {resp.status}")

                if resp.content_length is not None and resp.content_length > self.max_bytes:
                    raise DownloadError(source, subject, url, f"response too large ({resp.content_length} bytes)")

                buffer = bytearray()
                async for chunk in resp.content.iter_chunked(64 * 1024):
                    buffer.extend(chunk)
                    if len(buffer) > self.max_bytes:
                        raise DownloadError(source, subject, url, f"response exceeds {self.max_bytes} bytes")
                return bytes(buffer)
        except DownloadError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(source, subject, url, f"{type(e).__name__}: {e}") from e

    def _reencode(self, raw: bytes, url: str, subject: str, source: str) -> bytes:
        """Decode, fit inside max_size (no upscaling), re-encode as baseline JPEG."""
        try:
            with Image.open(BytesIO(raw)) as img:
                img.load()
                if img.mode != "RGB":
                    img = img.convert("RGB")
                # thumbnail() preserves aspect ratio and never enlarges
                img.thumbnail(self.max_size, Image.Resampling.LANCZOS)
                out = BytesIO()
                img.save(out, format="JPEG", quality=self.quality, progressive=False)
                return out.getvalue()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DownloadError(source, subject, url, f"could not decode image: {e}") from e

    async def _write_atomic(self, path, data: bytes) -> None:
        # `path` is already reserved (empty) by the cache, so the .part name is ours alone
        tmp_path = path.with_name(path.name + ".part")
        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            os.replace(tmp_path, path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            path.unlink(missing_ok=True)
            raise
