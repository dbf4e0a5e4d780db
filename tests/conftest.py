"""Shared fixtures for the caricature generator tests."""

from io import BytesIO

import pytest
from PIL import Image

from config import Settings


def make_image_bytes(size=(64, 48), fmt="PNG", color=(200, 120, 40)) -> bytes:
    """Encode a solid-color image of the given size."""
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def settings(tmp_path):
    """Settings with a generation key, no search providers and a tmp cache."""
    return Settings(
        openai_api_key="sk-test-abcd1234",
        cache_dir=str(tmp_path / "cache"),
        style_reference_path=str(tmp_path / "style" / "style-reference.png"),
    )


@pytest.fixture
def style_reference(settings):
    """Write the style reference image so the reference-guided path is allowed."""
    from pathlib import Path

    path = Path(settings.style_reference_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(make_image_bytes())
    return str(path)
