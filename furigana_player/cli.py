"""Command-line interface for the Furigana Player.

WHY: Checking what a subtitle line will look like (readings, highlighted
words, glosses) should not require a browser. The CLI runs the same
annotation pipeline as the HTTP API and prints the result, or starts the
API server itself.

HOW: Uses argparse. The subtitle file is loaded into a SubtitlePlayer
wired to the default adapters and a DictionaryClient; the async work
runs under asyncio.run(). Rendered output goes to stdout, status
messages to stderr.

RULES:
- Positional argument: SRT subtitle file (not needed with --serve)
- --at SECONDS prints the subtitle active at that time; --all (default)
  prints every subtitle with its time range
- --all skips whitespace-only subtitles, as the player hides them
- --format picks a registered formatter (default: plain_text)
- --no-readings / --no-analyzer switch off the converter / analyzer
- Status output goes to stderr (not stdout)
- Exit code 1 for missing, unsupported, or undecodable files
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from furigana_player.api import DictionaryClient
from furigana_player.config import DICTIONARY_BASE_URL, LOG_LEVEL, SUBTITLE_FORMATS
from furigana_player.core.timeline import ms_to_time
from furigana_player.formatters import FORMATTERS
from furigana_player.player import build_player


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _read_subtitles(path_arg: str) -> str:
    """Validate and read the subtitle file, exiting with status 1 on failure."""
    path = Path(path_arg)
    if not path.is_file():
        _fail("File not found: {}".format(path))

    ext = path.suffix.lower()
    if ext not in SUBTITLE_FORMATS:
        _fail("Unsupported file type '{}'. Supported formats: {}".format(
            ext, ", ".join(sorted(SUBTITLE_FORMATS))
        ))

    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        _fail("Subtitle file must be UTF-8 encoded: {}".format(exc))
    return ""


def _render(tree, format_key: str) -> str:
    formatter = FORMATTERS[format_key]()
    return "".join(output.content for output in formatter.format(tree))


async def _run(args: argparse.Namespace, content: str) -> int:
    """Annotate the requested subtitles and print them.

    Returns:
        The number of subtitles printed.
    """
    async with DictionaryClient(base_url=args.dictionary_url) as client:
        player = build_player(
            client,
            readings=not args.no_readings,
            analyzer=not args.no_analyzer,
        )
        count = player.load_subtitles(content)
        _status("Loaded {} subtitle(s)".format(count))

        if args.at is not None:
            display = await player.on_time_update(args.at)
            if display is None or not display.visible:
                _status("No subtitle at {}s".format(args.at))
                return 0
            print(_render(display.tree, args.format).rstrip("\n"))
            return 1

        printed = 0
        for entry in player.timeline:
            if not entry.text.strip():
                continue
            result = await player.annotator.annotate(entry.text)
            print("{} --> {}".format(ms_to_time(entry.start), ms_to_time(entry.end)))
            print(_render(result.tree, args.format).rstrip("\n"))
            print()
            printed += 1
        return printed


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Kept separate from main() so tests can inspect the parser without
    running anything.
    """
    parser = argparse.ArgumentParser(
        prog="furigana_player",
        description="Annotate Japanese SRT subtitles with furigana readings and "
                    "dictionary glosses.",
    )

    parser.add_argument(
        "subtitle_file",
        nargs="?",
        help="Path to the SRT subtitle file.",
    )

    which = parser.add_mutually_exclusive_group()
    which.add_argument(
        "--at",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Print only the subtitle active at this playback time.",
    )
    which.add_argument(
        "--all",
        action="store_true",
        help="Print every subtitle (default).",
    )

    parser.add_argument(
        "--format",
        choices=sorted(FORMATTERS.keys()),
        default="plain_text",
        help="Output format (default: %(default)s).",
    )

    parser.add_argument(
        "--dictionary-url",
        default=DICTIONARY_BASE_URL,
        help="Base URL of the dictionary service (default: %(default)s).",
    )

    parser.add_argument(
        "--no-readings",
        action="store_true",
        help="Do not add furigana readings.",
    )

    parser.add_argument(
        "--no-analyzer",
        action="store_true",
        help="Do not run morphological analysis; only ruby words are glossed.",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr.",
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP API instead of printing subtitles.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="API host (default: %(default)s).")
    parser.add_argument("--port", type=int, default=8000, help="API port (default: %(default)s).")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.serve:
        from furigana_player.server.app import run_api
        run_api(host=args.host, port=args.port)
        return

    if not args.subtitle_file:
        parser.error("subtitle_file is required unless --serve is given")

    content = _read_subtitles(args.subtitle_file)
    asyncio.run(_run(args, content))


if __name__ == "__main__":
    main()
