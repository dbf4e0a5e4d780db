"""Tests for the Google / Unsplash / Pexels provider adapters."""

import asyncio
from unittest.mock import AsyncMock, Mock

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer as LocalServer

from config import Settings
from caricature.errors import ProviderError
from caricature.search.models import SearchCandidate
from caricature.search.providers import (
    BaseImageProvider,
    GoogleImageProvider,
    PexelsImageProvider,
    UnsplashImageProvider,
    default_providers,
)

GOOGLE_RESPONSE = {
    "items": [
        {"link": "https://img.example.com/a.jpg", "title": "Oprah at the Oscars", "snippet": "snip"},
        {"link": "https://img.example.com/b.jpg", "title": "", "snippet": "Talk show host"},
        {"title": "no link, skipped"},
        {"link": "https://img.example.com/c.jpg"},
    ]
}

UNSPLASH_RESPONSE = {
    "results": [
        {"urls": {"regular": "https://images.unsplash.com/1"}, "description": None, "alt_description": "woman smiling"},
        {"urls": {}, "description": "missing url"},
    ]
}

PEXELS_RESPONSE = {
    "photos": [
        {"src": {"medium": "https://images.pexels.com/1.jpeg"}, "alt": "portrait"},
        {"src": {"medium": "https://images.pexels.com/2.jpeg"}},
    ]
}

FULL_SETTINGS = Settings(
    google_api_key="g-key",
    google_engine_id="cx-id",
    unsplash_access_key="u-key",
    pexels_api_key="p-key",
    openai_api_key="sk-test",
)


def _normalizer(fail_urls=()):
    """Normalizer stub returning a fake path unless the URL is in fail_urls."""
    normalizer = Mock()

    async def normalize(url, subject, source, session):
        if url in fail_urls:
            return None
        return f"/cache/{source}-{url.rsplit('/', 1)[-1]}"

    normalizer.normalize = AsyncMock(side_effect=normalize)
    return normalizer


def test_base_provider_is_abstract():
    """BaseImageProvider cannot be instantiated directly."""
    with pytest.raises(TypeError):
        BaseImageProvider(FULL_SETTINGS, _normalizer())  # type: ignore[abstract]


def test_default_provider_priority_order():
    names = [p.name for p in default_providers(FULL_SETTINGS, _normalizer())]
    assert names == ["google", "unsplash", "pexels"]


def test_is_configured_follows_credentials():
    empty = Settings()
    assert not GoogleImageProvider(Settings(google_api_key="k"), _normalizer()).is_configured()
    assert GoogleImageProvider(FULL_SETTINGS, _normalizer()).is_configured()
    assert not UnsplashImageProvider(empty, _normalizer()).is_configured()
    assert UnsplashImageProvider(FULL_SETTINGS, _normalizer()).is_configured()
    assert not PexelsImageProvider(empty, _normalizer()).is_configured()
    assert PexelsImageProvider(FULL_SETTINGS, _normalizer()).is_configured()


def test_google_parses_items_and_query_params():
    provider = GoogleImageProvider(FULL_SETTINGS, _normalizer())
    provider._get_json = AsyncMock(return_value=GOOGLE_RESPONSE)

    candidates = asyncio.run(provider.fetch_candidates("Oprah Winfrey", 10, session=None))

    assert [c.url for c in candidates] == [
        "https://img.example.com/a.jpg",
        "https://img.example.com/b.jpg",
        "https://img.example.com/c.jpg",
    ]
    assert [c.description for c in candidates] == ["Oprah at the Oscars", "Talk show host", ""]

    params = provider._get_json.call_args.args[3]
    assert params["q"] == "Oprah Winfrey portrait professional headshot"
    assert params["searchType"] == "image"
    assert params["num"] == 10
    assert params["cx"] == "cx-id"


def test_unsplash_parses_results():
    provider = UnsplashImageProvider(FULL_SETTINGS, _normalizer())
    provider._get_json = AsyncMock(return_value=UNSPLASH_RESPONSE)

    candidates = asyncio.run(provider.fetch_candidates("Jon Stewart", 9, session=None))

    assert candidates == [SearchCandidate(url="https://images.unsplash.com/1", description="woman smiling")]
    headers = provider._get_json.call_args.args[4]
    assert headers == {"Authorization": "Client-ID u-key"}


def test_pexels_parses_photos():
    provider = PexelsImageProvider(FULL_SETTINGS, _normalizer())
    provider._get_json = AsyncMock(return_value=PEXELS_RESPONSE)

    candidates = asyncio.run(provider.fetch_candidates("Jon Stewart", 9, session=None))

    assert [c.description for c in candidates] == ["portrait", ""]
    params = provider._get_json.call_args.args[3]
    assert params["query"] == "Jon Stewart portrait professional"


def test_collect_overfetches_and_stops_when_slots_filled():
    """Requests slots + buffer candidates but keeps only `slots` normalized results."""
    normalizer = _normalizer()
    provider = UnsplashImageProvider(FULL_SETTINGS, normalizer)
    provider.fetch_candidates = AsyncMock(
        return_value=[SearchCandidate(url=f"https://u/{i}.jpg") for i in range(8)]
    )

    results = asyncio.run(provider.collect("Anyone", 2, session=None))

    assert provider.fetch_candidates.call_args.args[1] == 2 + provider.extra_buffer
    assert len(results) == 2
    assert normalizer.normalize.call_count == 2
    assert all(r.source == "unsplash" for r in results)
    assert all(r.index is None for r in results)


def test_collect_skips_failed_normalizations():
    normalizer = _normalizer(fail_urls={"https://g/0.jpg", "https://g/2.jpg"})
    provider = GoogleImageProvider(FULL_SETTINGS, normalizer)
    provider.fetch_candidates = AsyncMock(
        return_value=[SearchCandidate(url=f"https://g/{i}.jpg", description=str(i)) for i in range(5)]
    )

    results = asyncio.run(provider.collect("Anyone", 2, session=None))

    assert [r.url for r in results] == ["https://g/1.jpg", "https://g/3.jpg"]
    assert results[0].local_path == "/cache/google-1.jpg"


def test_collect_clamps_request_to_provider_page_size():
    provider = GoogleImageProvider(FULL_SETTINGS, _normalizer())
    provider.fetch_candidates = AsyncMock(return_value=[])

    asyncio.run(provider.collect("Anyone", 3, session=None))

    assert provider.fetch_candidates.call_args.args[1] == 10


def _get_json_against(handler):
    async def run():
        app = web.Application()
        app.router.add_get("/search", handler)
        server = LocalServer(app)
        await server.start_server()
        try:
            provider = PexelsImageProvider(FULL_SETTINGS, _normalizer())
            async with aiohttp.ClientSession() as session:
                return await provider._get_json("Anyone", session, str(server.make_url("/search")), {"q": "x"})
        finally:
            await server.close()

    return asyncio.run(run())


def test_get_json_raises_provider_error_on_quota_status():
    async def quota(request):
        return web.json_response({"error": "rate limited"}, status=429)

    with pytest.raises(ProviderError) as exc:
        _get_json_against(quota)
    assert exc.value.provider == "pexels"
    assert "429" in str(exc.value)


def test_get_json_raises_provider_error_on_malformed_body():
    async def malformed(request):
        return web.Response(text="<html>oops</html>", content_type="text/html")

    with pytest.raises(ProviderError):
        _get_json_against(malformed)


def test_get_json_returns_parsed_object():
    async def ok(request):
        return web.json_response({"photos": [], "q": request.query["q"]})

    assert _get_json_against(ok) == {"photos": [], "q": "x"}
