"""Multi-provider portrait search with priority fallback.

Providers are folded left-to-right in fixed priority order. A provider is only
called when it is configured and the running total is still below the target,
and a provider failure only skips that provider.
"""

import aiohttp

from config import MAX_REFERENCE_IMAGES, Settings
from utils.logger import setup_logger
from .cache import TempFileCache
from .models import SearchResult
from .normalizer import ImageNormalizer
from .providers import BaseImageProvider, default_providers

logger = setup_logger(__name__)


class PortraitSearchAggregator:
    """Collects normalized portrait images of a person across providers."""

    def __init__(
        self,
        settings: Settings,
        providers: list[BaseImageProvider] | None = None,
        cache: TempFileCache | None = None,
    ):
        self.settings = settings
        self.cache = cache or TempFileCache(settings.cache_dir)
        if providers is None:
            providers = default_providers(settings, ImageNormalizer(self.cache))
        self.providers = providers

    def configured_providers(self) -> list[str]:
        return [p.name for p in self.providers if p.is_configured()]

    async def search(self, person_name: str, max_results: int = MAX_REFERENCE_IMAGES) -> list[SearchResult]:
        """Return up to `max_results` cached portraits of `person_name`, indexed from 1.

        :param person_name: Subject name (trimmed here; blank yields []).
        :param max_results: Target count, clamped to at least 1.
        :return: Ordered results; empty when nothing usable was found.
        """
        person_name = (person_name or "").strip()
        if not person_name:
            return []
        max_results = max(1, int(max_results))

        logger.info(f"Searching for portrait of: {person_name}")
        collected: list[SearchResult] = []

        async with aiohttp.ClientSession() as session:
            for provider in self.providers:
                if len(collected) >= max_results:
                    break
                if not provider.is_configured():
                    continue

                remaining = max_results - len(collected)
                try:
                    found = await provider.collect(person_name, remaining, session)
                except Exception as e:
                    logger.warning(f"{provider.name} search failed for '{person_name}': {e}")
                    continue
                collected.extend(found[:remaining])

        results = [
            result.model_copy(update={"index": position})
            for position, result in enumerate(collected[:max_results], start=1)
        ]

        if not results:
            logger.info(f"No reference image found for: {person_name}")
        else:
            sources = ", ".join(sorted({r.source for r in results}))
            logger.info(f"Found {len(results)} reference image(s) for {person_name} ({sources})")
        return results
