from typing import Literal
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ImageSource = Literal["google", "unsplash", "pexels"]


class SearchCandidate(BaseModel):
    """A remote image reported by a provider, before download.

    Fields:
        url: URL of the image (remote)
        description: Best-effort caption or alt text, may be empty
    """
    url: str
    description: str = ""


class SearchResult(BaseModel):
    """A discovered image that was downloaded and normalized into the cache.

    Fields:
        url: URL of the image (remote)
        local_path: Path of the normalized cached copy
        source: Provider that found the image
        description: Best-effort caption or alt text, may be empty
        index: 1-based rank in the aggregated result set (None until aggregated)
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    local_path: str
    source: ImageSource
    description: str = ""
    index: int | None = None
