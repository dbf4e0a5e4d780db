"""
Main module for the caricature generator.
Runs the HTTP server, one-off batch generation, roster generation or a cache sweep.
"""

import sys
import base64
import asyncio
import argparse
from pathlib import Path
from utils.logger import setup_logger
from utils.helpers import ensure_directory, slugify
from caricature.api.batch import handle_batch
from caricature.errors import CaricatureError
from caricature.generation import CaricatureGenerator
from caricature.generation.roster import generate_roster
from caricature.search import TempFileCache

from config import OUTPUT_DIR, PORT, Settings

logger = setup_logger(__name__)


async def async_generate(names: list[str], output_dir: str) -> list[str]:
    """
    Generate caricatures for the given names and write them as PNG files.

    Args:
        names: Subject names (same normalization as the HTTP endpoint)
        output_dir: Folder that receives the images

    Returns:
        Paths of the written files
    """
    settings = Settings.from_env()
    generator = CaricatureGenerator(settings)
    results = await handle_batch(names, generator)

    ensure_directory(output_dir)
    written = []
    for result in results:
        path = Path(output_dir) / f"{slugify(result.name)}-caricature.png"
        path.write_bytes(base64.b64decode(result.image_base64))
        logger.info(
            f"Saved {path} (references used: {result.reference_count}, source: {result.reference_source or 'none'})"
        )
        written.append(str(path))
    return written


def serve(host: str, port: int) -> None:
    import uvicorn
    from caricature.api.server import create_app

    logger.info(f"Caricature server listening on http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description='Caricature Generator - stylized caricatures of public figures',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve                              # HTTP server on PORT (default 3001)
  python main.py generate "Oprah Winfrey" "Albert Einstein"
  python main.py roster --delay 2                   # Static personality roster
  python main.py cleanup                            # Evict cached reference images older than 24h
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API and front-end')
    serve_parser.add_argument('--host', default='0.0.0.0')
    serve_parser.add_argument('--port', type=int, default=PORT)

    generate_parser = subparsers.add_parser('generate', help='Generate caricatures for names')
    generate_parser.add_argument('names', nargs='+', help='Subject names')
    generate_parser.add_argument('--output-dir', default=OUTPUT_DIR)

    roster_parser = subparsers.add_parser('roster', help='Generate the static personality roster')
    roster_parser.add_argument('--output-dir', default=f"{OUTPUT_DIR}/personalities-realistic")
    roster_parser.add_argument('--delay', type=float, default=2.0, help='Seconds between generations')

    subparsers.add_parser('cleanup', help='Delete cached reference images older than 24 hours')

    args = parser.parse_args()

    if args.command == 'serve':
        serve(args.host, args.port)

    elif args.command == 'generate':
        try:
            paths = asyncio.run(async_generate(args.names, args.output_dir))
        except CaricatureError as e:
            print(f"Error: {e}")
            sys.exit(1)
        for path in paths:
            print(f"Caricature saved: {path}")

    elif args.command == 'roster':
        try:
            entries = asyncio.run(generate_roster(Settings.from_env(), args.output_dir, delay=args.delay))
        except CaricatureError as e:
            print(f"Error: {e}")
            sys.exit(1)
        successful = [e for e in entries if e.success]
        print(f"Generated {len(successful)}/{len(entries)} caricatures in {args.output_dir}")
        if len(successful) < len(entries):
            sys.exit(1)

    elif args.command == 'cleanup':
        deleted = TempFileCache(Settings.from_env().cache_dir).cleanup()
        print(f"Removed {deleted} cached file(s)")
