"""
Error taxonomy for the caricature generator.

Only ConfigurationError, ExternalServiceError and ValidationError ever reach a
caller. The others are raised and recovered inside the search and generation
layers, each degrading to the next fallback tier exactly once.
"""


class CaricatureError(Exception):
    """Base class for all caricature generator errors."""


class ConfigurationError(CaricatureError):
    """A required credential is absent."""


class ProviderError(CaricatureError):
    """One search provider's call failed (network, quota, malformed response)."""

    def __init__(self, provider: str, subject: str, message: str):
        self.provider = provider
        self.subject = subject
        super().__init__(f"{provider} search failed for '{subject}': {message}")


class DownloadError(CaricatureError):
    """One candidate image could not be fetched, decoded or resized."""

    def __init__(self, source: str, subject: str, url: str, message: str):
        self.source = source
        self.subject = subject
        self.url = url
        super().__init__(f"[{source}] download failed for '{subject}' ({url}): {message}")


class GenerationFallbackError(CaricatureError):
    """The reference-guided edit call failed; text-only generation takes over."""

    def __init__(self, subject: str, message: str):
        self.subject = subject
        super().__init__(f"Reference-guided generation failed for '{subject}': {message}")


class ExternalServiceError(CaricatureError):
    """The image-generation service failed or returned no image."""


class ValidationError(CaricatureError):
    """Malformed or empty request payload."""
