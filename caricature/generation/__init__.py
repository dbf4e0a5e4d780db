"""
Generation subpackage.
OpenAI image client, caricature decision flow and roster generation.
"""
from .generator import CaricatureGenerator
from .image_client import OpenAIImageClient
from .models import CaricatureResult

__all__ = ["CaricatureGenerator", "OpenAIImageClient", "CaricatureResult"]
