#!/usr/bin/env python3
"""
Ragreel command line interface

Usage:
    # Index text files into a QR video
    ragreel encode notes.txt paper.txt -o memory.mp4

    # Lossless archive without the codec round-trip check
    ragreel encode notes.txt -o memory.mkv --codec ffv1 --no-preflight

    # Search a video
    ragreel search memory.mp4 "how are frames ordered" --top-k 5 --filter source=notes.txt

    # Show what a video holds
    ragreel info memory.mp4

    # Run the HTTP API
    ragreel serve --port 8000
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ragreel.core.config import Settings
from ragreel.core.exceptions import RagreelError
from ragreel.services.similarity import metadata_equals
from ragreel.video.memory import VideoMemory

logger = logging.getLogger(__name__)


def parse_filters(items: Optional[List[str]]) -> Dict[str, Any]:
    """Turn ["key=value", ...] into a metadata filter; values are read as JSON when possible"""
    filters = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Filter must look like key=value: {item}")
        try:
            filters[key] = json.loads(value)
        except ValueError:
            filters[key] = value
    return filters


def build_memory(args) -> VideoMemory:
    overrides = {}
    if getattr(args, "codec", None):
        overrides["video_codec"] = args.codec
    return VideoMemory(Settings(**overrides), show_progress=True)


def cmd_encode(args) -> int:
    memory = build_memory(args)

    for file_path in args.files:
        path = Path(file_path)
        text = path.read_text(encoding="utf-8")
        chunk_ids = memory.process_text(text, {"source": path.name})
        print(f"📄 {path.name}: {len(chunk_ids)} chunks")

    preflight = False if args.no_preflight else None
    result = memory.encode(args.output, preflight=preflight)

    print(f"✅ Encoded {result.total_chunks} chunks into {result.total_frames} frames ({result.codec})")
    print(f"   Video:   {result.video_path}")
    print(f"   Sidecar: {result.sidecar_path}")
    return 0


def cmd_search(args) -> int:
    memory = build_memory(args)
    memory.decode(args.video)

    filters = parse_filters(args.filter)
    predicate = metadata_equals(filters) if filters else None
    results = memory.search(args.query, limit=args.top_k, predicate=predicate)

    if not results:
        print("No results found")
        return 0

    for rank, result in enumerate(results, 1):
        text = result.text
        if len(text) > args.max_text:
            text = text[:args.max_text] + "..."
        print(f"{rank}. [{result.score:.4f}] {result.chunk.id} {json.dumps(result.metadata)}")
        print(f"   {text}")
    return 0


def cmd_info(args) -> int:
    memory = build_memory(args)
    result = memory.decode(args.video)

    print(json.dumps({**result.summary(), **memory.get_stats()}, indent=2))
    return 0


def cmd_serve(args) -> int:
    import uvicorn
    uvicorn.run("ragreel.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragreel",
        description="Store a searchable text knowledge base as QR code video frames",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None,
                        help="Logging level (default: RAGREEL_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Index text files and write a QR video")
    encode.add_argument("files", nargs="+", help="UTF-8 text files to index")
    encode.add_argument("-o", "--output", required=True, help="Output video path")
    encode.add_argument("--codec", help="Video codec (mp4v, ffv1, mjpg, h264, h265)")
    encode.add_argument("--no-preflight", action="store_true",
                        help="Skip the codec round-trip check before encoding")
    encode.set_defaults(func=cmd_encode)

    search = subparsers.add_parser("search", help="Search a QR video")
    search.add_argument("video", help="Video produced by 'ragreel encode'")
    search.add_argument("query", help="Search query")
    search.add_argument("--top-k", type=int, default=10,
                        help="Number of results to return (default: 10)")
    search.add_argument("--filter", action="append", metavar="KEY=VALUE",
                        help="Only return chunks whose metadata matches (repeatable)")
    search.add_argument("--max-text", type=int, default=300,
                        help="Maximum text length to display (default: 300)")
    search.set_defaults(func=cmd_search)

    info = subparsers.add_parser("info", help="Decode a video and print its statistics")
    info.add_argument("video", help="Video produced by 'ragreel encode'")
    info.set_defaults(func=cmd_info)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = args.log_level or Settings().log_level
    logging.basicConfig(level=level.upper(), format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    try:
        return args.func(args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except (RagreelError, OSError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
