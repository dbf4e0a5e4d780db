"""
Helper functions for the caricature generator.
Contains utility functions used across different modules.
"""

import os
import re
from pathlib import Path
from urllib.parse import urlparse

SUPPORTED_EXTS = [".jpg", ".jpeg", ".png", ".webp", ".gif"]

_SLUG_PATTERN = re.compile(r"[^a-z0-9]")


def ensure_directory(path: str) -> None:
    """
    Ensure a directory exists, create if it doesn't.

    Args:
        path (str): Path to the directory
    """
    os.makedirs(path, exist_ok=True)


def slugify(name: str) -> str:
    """
    Lower-case a name and replace every character outside [a-z0-9] with '-'.

    Args:
        name (str): Free-form subject name

    Returns:
        str: Filesystem-safe slug ("Oprah Winfrey" -> "oprah-winfrey")
    """
    return _SLUG_PATTERN.sub("-", name.lower())


def get_image_extension(url: str, default: str = ".jpg") -> str:
    """
    Get the image extension of a remote URL's path.

    Args:
        url (str): Remote image URL
        default (str): Extension used when the path has no known image extension

    Returns:
        str: Extension including the dot
    """
    ext = Path(urlparse(url).path).suffix.lower()
    return ext if ext in SUPPORTED_EXTS else default


def mask_secret(value: str | None, visible: int = 4) -> str | None:
    """Return only the last `visible` characters of a secret, or None when unset."""
    if not value:
        return None
    return value[-visible:]
