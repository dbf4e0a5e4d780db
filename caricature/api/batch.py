"""Batch request handling: name parsing and strictly sequential generation."""

import re
from typing import Any

from caricature.errors import ValidationError
from caricature.generation import CaricatureGenerator, CaricatureResult
from utils.logger import setup_logger

logger = setup_logger(__name__)

_NAME_SEPARATORS = re.compile(r"[,\n]")


def parse_names(raw: Any) -> list[str]:
    """
    Normalize a `names` payload into an ordered list of unique, trimmed names.

    Args:
        raw: Comma/newline separated string, or a list of strings (non-string
            entries are ignored)

    Returns:
        Names in first-occurrence order

    Raises:
        ValidationError: payload has the wrong type or yields no names
    """
    if isinstance(raw, str):
        candidates = _NAME_SEPARATORS.split(raw)
    elif isinstance(raw, list):
        candidates = [item for item in raw if isinstance(item, str)]
    else:
        raise ValidationError('Request body must include "names" as a string or an array of strings.')

    names: list[str] = []
    for candidate in candidates:
        name = candidate.strip()
        if name and name not in names:
            names.append(name)

    if not names:
        raise ValidationError("Please provide at least one valid name.")
    return names


async def handle_batch(raw: Any, generator: CaricatureGenerator) -> list[CaricatureResult]:
    """
    Generate caricatures for every name, one at a time.

    The batch is all-or-nothing: the first failing name propagates its error
    and results already produced in this call are discarded.
    """
    names = parse_names(raw)
    logger.info(f"Batch of {len(names)} name(s): {', '.join(names)}")

    results: list[CaricatureResult] = []
    for name in names:
        try:
            results.append(await generator.generate(name))
        except Exception as e:
            logger.error(f"Generation failed for '{name}', aborting batch of {len(names)}: {e}")
            raise
    return results
