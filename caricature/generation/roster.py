"""Static personality roster generation.

Generates text-only caricatures for a fixed list of personalities and writes
them as PNG files. Unlike the HTTP batch, one failing personality is recorded
and the run continues with the next one.
"""

import asyncio
import base64
from dataclasses import dataclass
from pathlib import Path

from config import OUTPUT_DIR, Settings
from prompts import build_text_only_prompt
from caricature.errors import CaricatureError
from utils.helpers import ensure_directory, slugify
from utils.logger import setup_logger
from .image_client import OpenAIImageClient

logger = setup_logger(__name__)

# (name, traits)
PERSONALITIES = [
    ("Judge Judy", "No-nonsense, snappy judgments"),
    ("Jon Stewart", "Witty, fair, skeptical"),
    ("Oprah Winfrey", "Empathetic, centered"),
    ("Joe Rogan", "Curious, slightly chaotic"),
    ("Anderson Cooper", "Calm, mainstream neutral"),
    ("Gandalf", "Wise, grandfatherly neutrality"),
    ("Morpheus", "Visionary, cryptic"),
    ("HAL 9000", "Unsettling AI neutrality"),
    ("J.A.R.V.I.S.", "Calm AI guidance"),
    ("GLaDOS", "Darkly sarcastic moderation"),
    ("C-3PO", "Overly polite and procedural"),
    ("Ron Swanson", "Dry libertarian neutrality"),
    ("Chris Wallace", "Professional, confrontational"),
    ("Morgan Freeman", "Authoritative, soothing"),
    ("The Arbiter AI", "Customizable, persona-free baseline"),
]


@dataclass
class RosterEntry:
    name: str
    success: bool
    path: str | None = None
    size: int = 0
    error: str | None = None


def roster_filename(name: str) -> str:
    return f"{slugify(name)}-realistic-caricature.png"


async def _generate_one(client: OpenAIImageClient, name: str, output_dir: Path) -> RosterEntry:
    try:
        response = await client.generate(build_text_only_prompt(name))
    except CaricatureError as e:
        logger.error(f"FAILED: {name} - {e}")
        return RosterEntry(name=name, success=False, error=str(e))

    data = response.get("data") or []
    if not data or not data[0].get("b64_json"):
        logger.error(f"FAILED: {name} - No image data")
        return RosterEntry(name=name, success=False, error="No image data")

    image_bytes = base64.b64decode(data[0]["b64_json"])
    path = output_dir / roster_filename(name)
    path.write_bytes(image_bytes)

    revised = data[0].get("revised_prompt")
    logger.info(f"SUCCESS: {name} -> {path} ({round(len(image_bytes) / 1024)} KB)")
    if revised:
        logger.debug(f"Revised prompt: {revised[:100]}...")
    return RosterEntry(name=name, success=True, path=str(path), size=len(image_bytes))


async def generate_roster(
    settings: Settings,
    output_dir: str = f"{OUTPUT_DIR}/personalities-realistic",
    personalities: list[tuple[str, str]] | None = None,
    delay: float = 2.0,
    client: OpenAIImageClient | None = None,
) -> list[RosterEntry]:
    """
    Generate one caricature per personality, sequentially, pausing between calls.

    Args:
        settings: Runtime settings (OPENAI_API_KEY required)
        output_dir: Folder that receives the PNG files
        personalities: (name, traits) pairs, defaults to PERSONALITIES
        delay: Seconds to wait between generations
        client: Optional pre-built image client

    Returns:
        One RosterEntry per personality, in input order
    """
    personalities = PERSONALITIES if personalities is None else personalities
    client = client or OpenAIImageClient(settings)
    ensure_directory(output_dir)
    out_path = Path(output_dir)

    logger.info(f"Generating {len(personalities)} personality caricatures...")
    entries: list[RosterEntry] = []
    for i, (name, traits) in enumerate(personalities):
        logger.info(f"[{i + 1}/{len(personalities)}] Processing: {name} ({traits})")
        entries.append(await _generate_one(client, name, out_path))
        if i < len(personalities) - 1 and delay > 0:
            await asyncio.sleep(delay)

    successful = [e for e in entries if e.success]
    for entry in entries:
        if not entry.success:
            logger.warning(f"Failed generation: {entry.name}: {entry.error or 'Unknown error'}")
    logger.info(f"COMPLETED: {len(successful)}/{len(entries)} caricatures generated successfully")
    return entries
