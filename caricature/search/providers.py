"""Portrait search provider adapters (Google Custom Search, Unsplash, Pexels).

Each adapter turns a person name into one provider-specific search request,
parses the response into SearchCandidate objects and normalizes candidates
in rank order until the requested number of usable images is reached.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import aiohttp

from config import (
    GOOGLE_EXTRA_BUFFER,
    GOOGLE_SEARCH_URL,
    PEXELS_BASE_URL,
    PEXELS_EXTRA_BUFFER,
    Settings,
    UNSPLASH_BASE_URL,
    UNSPLASH_EXTRA_BUFFER,
)
from caricature.errors import ProviderError
from utils.logger import setup_logger
from .models import SearchCandidate, SearchResult
from .normalizer import ImageNormalizer

logger = setup_logger(__name__)


class BaseImageProvider(ABC):
    """Contract that every portrait search provider must satisfy.

    Sub-classes implement :meth:`is_configured` and :meth:`fetch_candidates`;
    :meth:`collect` handles overfetching and per-candidate normalization.
    """

    name: str = ""
    extra_buffer: int = 0
    # Largest page size the provider API accepts
    max_page_size: int = 10

    def __init__(self, settings: Settings, normalizer: ImageNormalizer):
        self.settings = settings
        self.normalizer = normalizer

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True when this provider's credentials are present."""

    @abstractmethod
    async def fetch_candidates(
        self, person_name: str, count: int, session: aiohttp.ClientSession
    ) -> list[SearchCandidate]:
        """Query the provider API and return up to *count* candidates in rank order."""

    async def collect(
        self, person_name: str, slots: int, session: aiohttp.ClientSession
    ) -> list[SearchResult]:
        """Fetch `slots + extra_buffer` candidates and normalize until `slots` are filled.

        :param person_name: Trimmed subject name.
        :param slots: Number of results still needed by the aggregator.
        :param session: Shared aiohttp session.
        :return: Up to `slots` results whose images are in the cache.
        :raises ProviderError: when the search call itself fails.
        """
        count = min(slots + self.extra_buffer, self.max_page_size)
        candidates = await self.fetch_candidates(person_name, count, session)
        logger.debug(f"[{self.name}] {len(candidates)} candidate(s) for '{person_name}'")

        results: list[SearchResult] = []
        for candidate in candidates:
            if len(results) >= slots:
                break
            local_path = await self.normalizer.normalize(candidate.url, person_name, self.name, session)
            if not local_path:
                continue
            results.append(
                SearchResult(
                    url=candidate.url,
                    local_path=local_path,
                    source=self.name,
                    description=candidate.description,
                )
            )

        logger.info(f"[{self.name}] kept {len(results)}/{slots} image(s) for '{person_name}'")
        return results

    async def _get_json(
        self,
        person_name: str,
        session: aiohttp.ClientSession,
        url: str,
        params: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            async with session.get(url, params=params, headers=headers) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    raise ProviderError(self.name, person_name, f"HTTP {resp.status}: {body[:200]}")
                data = await resp.json(content_type=None)
        except ProviderError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProviderError(self.name, person_name, f"{type(e).__name__}: {e}") from e

        if not isinstance(data, dict):
            raise ProviderError(self.name, person_name, "response is not a JSON object")
        return data


class GoogleImageProvider(BaseImageProvider):
    """Google Custom Search (image search type)."""

    name = "google"
    extra_buffer = GOOGLE_EXTRA_BUFFER
    max_page_size = 10

    def is_configured(self) -> bool:
        return self.settings.google_configured

    async def fetch_candidates(self, person_name, count, session):
        params = {
            "key": self.settings.google_api_key,
            "cx": self.settings.google_engine_id,
            "q": f"{person_name} portrait professional headshot",
            "searchType": "image",
            "num": count,
            "imgSize": "medium",
            "imgType": "photo",
            "safe": "medium",
        }
        data = await self._get_json(person_name, session, GOOGLE_SEARCH_URL, params)

        candidates = []
        for item in data.get("items") or []:
            link = item.get("link")
            if not link:
                continue
            candidates.append(
                SearchCandidate(url=link, description=item.get("title") or item.get("snippet") or "")
            )
        return candidates[:count]


class UnsplashImageProvider(BaseImageProvider):
    """Unsplash photo search."""

    name = "unsplash"
    extra_buffer = UNSPLASH_EXTRA_BUFFER
    max_page_size = 30

    def is_configured(self) -> bool:
        return self.settings.unsplash_configured

    async def fetch_candidates(self, person_name, count, session):
        headers = {"Authorization": f"Client-ID {self.settings.unsplash_access_key}"}
        params = {
            "query": f"{person_name} portrait professional headshot",
            "per_page": count,
            "orientation": "portrait",
        }
        data = await self._get_json(person_name, session, f"{UNSPLASH_BASE_URL}/search/photos", params, headers)

        candidates = []
        for photo in data.get("results") or []:
            url = (photo.get("urls") or {}).get("regular")
            if not url:
                continue
            candidates.append(
                SearchCandidate(url=url, description=photo.get("description") or photo.get("alt_description") or "")
            )
        return candidates[:count]


class PexelsImageProvider(BaseImageProvider):
    """Pexels photo search."""

    name = "pexels"
    extra_buffer = PEXELS_EXTRA_BUFFER
    max_page_size = 80

    def is_configured(self) -> bool:
        return self.settings.pexels_configured

    async def fetch_candidates(self, person_name, count, session):
        headers = {"Authorization": self.settings.pexels_api_key}
        params = {
            "query": f"{person_name} portrait professional",
            "per_page": count,
            "orientation": "portrait",
        }
        data = await self._get_json(person_name, session, f"{PEXELS_BASE_URL}/search", params, headers)

        candidates = []
        for photo in data.get("photos") or []:
            url = (photo.get("src") or {}).get("medium")
            if not url:
                continue
            candidates.append(SearchCandidate(url=url, description=photo.get("alt") or ""))
        return candidates[:count]


def default_providers(settings: Settings, normalizer: ImageNormalizer) -> list[BaseImageProvider]:
    """Providers in fixed priority order: Google -> Unsplash -> Pexels."""
    return [
        GoogleImageProvider(settings, normalizer),
        UnsplashImageProvider(settings, normalizer),
        PexelsImageProvider(settings, normalizer),
    ]
