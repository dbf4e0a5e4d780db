"""Caricature generation: reference-guided edit with text-only fallback.

Decision flow for one subject:
    1. Search up to MAX_REFERENCE_IMAGES portraits (search failure -> no references).
    2. Keep references whose cached file still exists, capped to the maximum.
    3. Reference-guided edit only when the style reference file exists AND at
       least one subject reference is usable; otherwise text-only generation.
    4. A failed edit call falls back to text-only generation exactly once.
    5. The chosen response must carry an image, else ExternalServiceError.

Provenance fields describe the path that produced the image, not the path
that was attempted.
"""

import os
from typing import Any

from config import MAX_REFERENCE_IMAGES, Settings
from prompts import build_reference_prompt, build_text_only_prompt
from caricature.errors import ConfigurationError, ExternalServiceError, GenerationFallbackError
from caricature.search import PortraitSearchAggregator, SearchResult
from utils.logger import setup_logger
from .image_client import OpenAIImageClient
from .models import CaricatureResult

logger = setup_logger(__name__)


def reference_source_of(references: list[SearchResult]) -> str | None:
    """Shared source of the references, "mixed" for several sources, None for none."""
    sources = {ref.source for ref in references}
    if not sources:
        return None
    if len(sources) > 1:
        return "mixed"
    return sources.pop()


class CaricatureGenerator:
    """Produces one caricature per subject name."""

    def __init__(
        self,
        settings: Settings,
        search: PortraitSearchAggregator | None = None,
        image_client: OpenAIImageClient | None = None,
    ):
        self.settings = settings
        self.search = search or PortraitSearchAggregator(settings)
        self.image_client = image_client

    def _client(self) -> OpenAIImageClient:
        if not self.settings.generation_configured:
            raise ConfigurationError(
                "OpenAI API key is not configured. Set OPENAI_API_KEY to generate images."
            )
        if self.image_client is None:
            self.image_client = OpenAIImageClient(self.settings)
        return self.image_client

    async def generate(self, name: str) -> CaricatureResult:
        """Generate a caricature of `name`.

        :param name: Subject name, echoed verbatim in the result.
        :return: CaricatureResult with provenance of the path that succeeded.
        :raises ConfigurationError: when the image-generation key is absent.
        :raises ExternalServiceError: when the final generation call fails or
            returns no image.
        """
        client = self._client()
        logger.info(f"Generating caricature for: {name}")

        references = await self._find_references(name)

        response = None
        used_references: list[SearchResult] = []
        style_path = self.settings.style_reference_path

        if references and os.path.isfile(style_path):
            logger.info(
                f"Using {len(references)} reference image(s) from: {reference_source_of(references)}"
            )
            try:
                response = await self._generate_with_references(client, name, style_path, references)
                used_references = references
            except GenerationFallbackError as e:
                logger.warning(f"{e}; falling back to text-only")
        elif references:
            logger.info(f"Style reference missing at {style_path}, using text-only generation")
        else:
            logger.info(f"No reference images found for {name}, using text-only generation")

        if response is None:
            response = await client.generate(build_text_only_prompt(name))

        image = self._first_image(response)
        return CaricatureResult(
            name=name,
            image_base64=image["b64_json"],
            revised_prompt=image.get("revised_prompt") or None,
            used_reference_images=bool(used_references),
            reference_source=reference_source_of(used_references),
            reference_count=len(used_references),
        )

    async def _find_references(self, name: str) -> list[SearchResult]:
        try:
            found = await self.search.search(name, max_results=MAX_REFERENCE_IMAGES)
        except Exception as e:
            logger.warning(f"Could not find reference images for {name}: {e}")
            return []

        # Cached files may have been evicted since the search returned
        usable = [ref for ref in found if ref.local_path and os.path.isfile(ref.local_path)]
        return usable[:MAX_REFERENCE_IMAGES]

    async def _generate_with_references(
        self,
        client: OpenAIImageClient,
        name: str,
        style_path: str,
        references: list[SearchResult],
    ) -> dict[str, Any]:
        prompt = build_reference_prompt(name, references)
        image_paths = [style_path] + [ref.local_path for ref in references]
        try:
            return await client.edit(prompt, image_paths)
        except Exception as e:
            raise GenerationFallbackError(name, str(e)) from e

    @staticmethod
    def _first_image(response: Any) -> dict[str, Any]:
        data = response.get("data") if isinstance(response, dict) else None
        if not data or not isinstance(data[0], dict) or not data[0].get("b64_json"):
            raise ExternalServiceError("No image data returned from OpenAI.")
        return data[0]
