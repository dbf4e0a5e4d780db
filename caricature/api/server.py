"""
HTTP API for the caricature generator (FastAPI).

Endpoints:
- `POST /api/generate`: body `{names: string | string[]}` -> `{results: [...]}`
- `GET /api/info`: which OpenAI credentials are configured (last 4 chars only)
- any other route: static file from `public/`, falling back to `index.html`

Error mapping:
- Invalid body or no usable names -> HTTP 400 `{error}`
- Any single name failing -> HTTP 500 `{error}` with that name's message
"""

import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from config import CACHE_SWEEP_INTERVAL, MAX_REQUEST_BYTES, PUBLIC_DIR, Settings
from caricature.errors import ValidationError
from caricature.generation import CaricatureGenerator
from caricature.search import PortraitSearchAggregator, TempFileCache
from utils.helpers import mask_secret
from utils.logger import setup_logger
from .batch import handle_batch

logger = setup_logger(__name__)

FALLBACK_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


def log_configuration(settings: Settings) -> None:
    """Report which credentials are present; a missing OpenAI key is only a warning."""
    if settings.generation_configured:
        logger.info(f"API Key configured: ...{mask_secret(settings.openai_api_key)}")
        if settings.openai_org_id:
            logger.info(f"Organization ID: {settings.openai_org_id}")
    else:
        logger.warning("OPENAI_API_KEY is not set. Image generation requests will fail until it is provided.")

    if settings.google_configured:
        logger.info("Google Custom Search API configured for reference images")
    if settings.unsplash_configured:
        logger.info("Unsplash API configured for reference images")
    if settings.pexels_configured:
        logger.info("Pexels API configured for reference images")
    if not (settings.google_configured or settings.unsplash_configured or settings.pexels_configured):
        logger.info("No image search APIs configured. Will use text-only generation.")


def create_app(
    settings: Settings | None = None,
    generator: CaricatureGenerator | None = None,
    public_dir: str = PUBLIC_DIR,
    sweep_interval: float = CACHE_SWEEP_INTERVAL,
) -> FastAPI:
    settings = settings or Settings.from_env()
    cache = TempFileCache(settings.cache_dir)
    if generator is None:
        generator = CaricatureGenerator(settings, search=PortraitSearchAggregator(settings, cache=cache))
    public_path = Path(public_dir).resolve()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_configuration(settings)
        cache.ensure()
        cache.cleanup()
        sweep_task = asyncio.create_task(cache.run_periodic_cleanup(sweep_interval))
        try:
            yield
        finally:
            sweep_task.cancel()
            try:
                await sweep_task
            except asyncio.CancelledError:
                pass

    app = FastAPI(title="Caricature Generator", lifespan=lifespan)
    app.state.settings = settings
    app.state.generator = generator
    app.state.cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/generate")
    async def generate(request: Request):
        body = await request.body()
        if len(body) > MAX_REQUEST_BYTES:
            return JSONResponse(status_code=413, content={"error": "Request body too large."})
        try:
            payload = json.loads(body) if body else {}
        except ValueError:
            payload = {}
        names = payload.get("names") if isinstance(payload, dict) else None

        try:
            results = await handle_batch(names, generator)
        except ValidationError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            return JSONResponse(
                status_code=500,
                content={"error": str(e) or "Failed to generate caricatures."},
            )

        return {"results": [r.model_dump(by_alias=True) for r in results]}

    @app.get("/api/info")
    async def info():
        return {
            "apiKeyConfigured": settings.generation_configured,
            "apiKeyLast4": mask_secret(settings.openai_api_key),
            "orgIdConfigured": bool(settings.openai_org_id),
            "orgId": settings.openai_org_id,
        }

    @app.api_route("/{full_path:path}", methods=FALLBACK_METHODS)
    async def static_fallback(full_path: str):
        candidate = (public_path / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(public_path):
            return FileResponse(candidate)
        index = public_path / "index.html"
        if not index.is_file():
            return JSONResponse(status_code=404, content={"error": "Not found"})
        return FileResponse(index)

    return app
