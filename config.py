"""
Configuration settings for the caricature generator.
Contains paths, provider credentials, image processing and cache parameters.

SETUP INSTRUCTIONS:
1. Create a .env file with your API credentials (see .env.example)
2. Edit this file only if you need to change the defaults below
3. Never commit .env to version control (already in .gitignore)
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from .env file (a missing file is fine)
load_dotenv()

# ------------------------------------------------------------
# File paths (directories, not individual files)
# ------------------------------------------------------------
CACHE_DIR = os.getenv("CARICATURE_CACHE_DIR", "data/temp_images")
OUTPUT_DIR = "data/output"
PUBLIC_DIR = "public"

# Exemplar caricature that defines the art style for every generation (read-only)
STYLE_REFERENCE_PATH = os.getenv("CARICATURE_STYLE_REFERENCE", "data/style/style-reference.png")

# ------------------------------------------------------------
# Reference image cache
# ------------------------------------------------------------
CACHE_MAX_AGE_SECONDS = 24 * 60 * 60   # files older than this are evicted
CACHE_SWEEP_INTERVAL = 60 * 60         # periodic eviction sweep (seconds)

# ------------------------------------------------------------
# Reference image download + normalization
# ------------------------------------------------------------
MAX_DOWNLOAD_BYTES = 20 * 1024 * 1024  # 20MB hard cap per candidate
DOWNLOAD_TIMEOUT = 15                  # seconds
NORMALIZED_MAX_SIZE = (1024, 1024)     # fit inside, never upscale
NORMALIZED_QUALITY = 90                # JPEG quality

# ------------------------------------------------------------
# Portrait search
# ------------------------------------------------------------
MAX_REFERENCE_IMAGES = 3
# Extra candidates requested per provider to absorb download/decode failures
GOOGLE_EXTRA_BUFFER = 8
UNSPLASH_EXTRA_BUFFER = 6
PEXELS_EXTRA_BUFFER = 6

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
UNSPLASH_BASE_URL = "https://api.unsplash.com"
PEXELS_BASE_URL = "https://api.pexels.com/v1"

# ------------------------------------------------------------
# Image generation (OpenAI Images API)
# ------------------------------------------------------------
DEFAULT_IMAGE_MODEL = "dall-e-3"
# Reference-guided edits need a model that accepts multiple input images
DEFAULT_IMAGE_EDIT_MODEL = "gpt-image-1"
DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"

# ------------------------------------------------------------
# Server
# ------------------------------------------------------------
PORT = int(os.getenv("PORT", "3001"))
MAX_REQUEST_BYTES = 1024 * 1024

# ------------------------------------------------------------
# Logging
# ------------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_DIR = "data/logs"


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    """Explicit runtime configuration passed into the search and generation layers."""

    google_api_key: str | None = None
    google_engine_id: str | None = None
    unsplash_access_key: str | None = None
    pexels_api_key: str | None = None
    cache_dir: str = CACHE_DIR
    style_reference_path: str = STYLE_REFERENCE_PATH
    openai_api_key: str | None = None
    openai_org_id: str | None = None
    image_model: str = DEFAULT_IMAGE_MODEL
    image_edit_model: str = DEFAULT_IMAGE_EDIT_MODEL
    image_size: str = DEFAULT_IMAGE_SIZE
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (after .env loading)."""
        return cls(
            google_api_key=_env("GOOGLE_API_KEY"),
            google_engine_id=_env("GOOGLE_SEARCH_ENGINE_ID"),
            unsplash_access_key=_env("UNSPLASH_ACCESS_KEY"),
            pexels_api_key=_env("PEXELS_API_KEY"),
            cache_dir=_env("CARICATURE_CACHE_DIR") or CACHE_DIR,
            style_reference_path=_env("CARICATURE_STYLE_REFERENCE") or STYLE_REFERENCE_PATH,
            openai_api_key=_env("OPENAI_API_KEY"),
            openai_org_id=_env("OPENAI_ORG_ID"),
            image_model=_env("OPENAI_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
            image_edit_model=_env("OPENAI_IMAGE_EDIT_MODEL") or DEFAULT_IMAGE_EDIT_MODEL,
            image_size=_env("OPENAI_IMAGE_SIZE") or DEFAULT_IMAGE_SIZE,
            openai_base_url=_env("OPENAI_BASE_URL") or DEFAULT_OPENAI_BASE_URL,
        )

    @property
    def google_configured(self) -> bool:
        return bool(self.google_api_key and self.google_engine_id)

    @property
    def unsplash_configured(self) -> bool:
        return bool(self.unsplash_access_key)

    @property
    def pexels_configured(self) -> bool:
        return bool(self.pexels_api_key)

    @property
    def generation_configured(self) -> bool:
        return bool(self.openai_api_key)
