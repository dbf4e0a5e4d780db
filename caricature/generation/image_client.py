"""
OpenAI Images API client (aiohttp).

Processing flow:
    1. Build a JSON payload (text-only generation) or a multipart form
       (reference-guided edit with several input images).
    2. POST to the configured API base URL with bearer auth and optional org.
    3. Return the parsed JSON response, or raise ExternalServiceError on any
       non-2xx status or transport failure.

No retries are performed; callers decide how to fall back.
"""

import asyncio
from pathlib import Path
from typing import Any

import aiofiles
import aiohttp

from config import Settings
from caricature.errors import ConfigurationError, ExternalServiceError
from utils.logger import setup_logger

logger = setup_logger(__name__)


def _sniff_content_type(data: bytes, filename: str) -> str:
    """Detect the image MIME type from magic bytes (cached files keep their URL extension)."""
    if data.startswith(b"\x89PNG"):
        return "image/png"
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    suffix = Path(filename).suffix.lower()
    return {".png": "image/png", ".webp": "image/webp"}.get(suffix, "image/jpeg")


class OpenAIImageClient:
    """Thin async wrapper over /images/generations and /images/edits."""

    def __init__(self, settings: Settings):
        if not settings.openai_api_key:
            raise ConfigurationError(
                "OpenAI API key is not configured. Set OPENAI_API_KEY to generate images."
            )
        self.settings = settings
        self.base_url = settings.openai_base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.settings.openai_api_key}"}
        if self.settings.openai_org_id:
            headers["OpenAI-Organization"] = self.settings.openai_org_id
        return headers

    async def generate(self, prompt: str) -> dict[str, Any]:
        """Plain text-to-image generation, one image returned as base64."""
        payload = {
            "model": self.settings.image_model,
            "prompt": prompt,
            "size": self.settings.image_size,
            "n": 1,
        }
        # gpt-image models always return base64 and reject response_format
        if self.settings.image_model.startswith("dall-e"):
            payload["response_format"] = "b64_json"

        logger.debug(f"[images] generations model={self.settings.image_model} prompt_len={len(prompt)}")
        return await self._post("/images/generations", json=payload)

    async def edit(self, prompt: str, image_paths: list[str]) -> dict[str, Any]:
        """Reference-guided edit: all images attached as `image[]`, style reference first."""
        form = aiohttp.FormData()
        form.add_field("model", self.settings.image_edit_model)
        form.add_field("prompt", prompt)
        form.add_field("n", "1")
        form.add_field("size", self.settings.image_size)
        form.add_field("input_fidelity", "high")
        form.add_field("background", "opaque")

        for path in image_paths:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
            filename = Path(path).name
            form.add_field(
                "image[]",
                data,
                filename=filename,
                content_type=_sniff_content_type(data, filename),
            )

        logger.debug(
            f"[images] edits model={self.settings.image_edit_model} images={len(image_paths)} prompt_len={len(prompt)}"
        )
        return await self._post("/images/edits", data=form)

    async def _post(self, endpoint: str, **kwargs) -> dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        try:
            async with aiohttp.ClientSession(headers=self._headers()) as session:
                async with session.post(url, **kwargs) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        detail = await resp.text()
                        try:
                            detail = (await resp.json(content_type=None))["error"]["message"]
                        except (ValueError, KeyError, TypeError):
                            pass
                        raise ExternalServiceError(
                            f"Image request to {endpoint} failed with status {resp.status}: {detail}"
                        )
                    return await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ExternalServiceError(f"Image request to {endpoint} failed: {e}") from e
