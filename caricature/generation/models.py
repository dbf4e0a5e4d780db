from typing import Literal
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ReferenceSource = Literal["google", "unsplash", "pexels", "mixed"]


class CaricatureResult(BaseModel):
    """Generated caricature plus provenance of the path that produced it.

    Fields:
        name: Requested subject, verbatim
        image_base64: Base64-encoded final image bytes
        revised_prompt: Provider's rewritten prompt, if supplied
        used_reference_images: True only when the reference-guided call succeeded
        reference_source: Source of the references used ("mixed" for several)
        reference_count: Number of references used (0 when not on that path)
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    image_base64: str
    revised_prompt: str | None = None
    used_reference_images: bool = False
    reference_source: ReferenceSource | None = None
    reference_count: int = 0
