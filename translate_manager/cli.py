"""Operator CLI for one-off translations, bulk runs and bucket inspection."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Iterable, Sequence

from translate_manager.core.config import get_settings
from translate_manager.core.exceptions import TranslationManagerError
from translate_manager.core.logging_config import configure_logging
from translate_manager.services.bulk import MANUAL_JOB_SENTINEL
from translate_manager.services.manager import TranslationManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="translate-manager",
        description="Translate text, run bulk translations and inspect the translation bucket.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    translate = subparsers.add_parser("translate", help="Translate a single string.")
    translate.add_argument("text", help="English text to translate.")
    translate.add_argument(
        "--target-language",
        default=None,
        help="Target language code (defaults to DEFAULT_TARGET_LANGUAGE).",
    )

    bulk = subparsers.add_parser(
        "bulk",
        help="Translate a whole input object (batch job when a role is configured).",
    )
    bulk.add_argument("input_uri", help="Input location, s3://bucket/key or a key in the bucket.")
    bulk.add_argument("output_uri", help="Output location, s3://bucket/key or a key in the bucket.")
    bulk.add_argument(
        "--target-language",
        dest="target_languages",
        action="append",
        default=None,
        help="Target language code. Provide multiple times for several languages.",
    )

    listing = subparsers.add_parser("ls", help="List objects in the translation bucket.")
    listing.add_argument("--prefix", default=None, help="Only list keys under this prefix.")
    listing.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format (default: table).",
    )

    dictionary = subparsers.add_parser("dictionary", help="Show the stored custom dictionary.")
    dictionary.add_argument("--language", default=None, help="Only show entries for this language.")
    dictionary.add_argument(
        "--format",
        choices=("table", "json"),
        default="table",
        help="Output format (default: table).",
    )
    return parser


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render rows in a simple fixed-width table."""
    widths: list[int] = []
    for index, header in enumerate(headers):
        candidates = [len(header)]
        candidates.extend(len(row[index]) for row in rows)
        widths.append(max(candidates))

    def format_row(values: Iterable[str]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths)).rstrip()

    lines = [format_row(headers)]
    lines.append("  ".join("-" * width for width in widths))
    lines.extend(format_row(row) for row in rows)
    return "\n".join(lines)


async def _translate(manager: TranslationManager, args: argparse.Namespace) -> int:
    print(await manager.translate_text(args.text, args.target_language))
    return 0


async def _bulk(manager: TranslationManager, args: argparse.Namespace) -> int:
    job_id = await manager.start_bulk_translation(
        args.input_uri,
        args.output_uri,
        args.target_languages,
    )
    if job_id == MANUAL_JOB_SENTINEL:
        print(f"Manual translation complete; results written to {args.output_uri}")
    else:
        print(f"Started translation job {job_id}")
    return 0


async def _list(manager: TranslationManager, args: argparse.Namespace) -> int:
    objects = await manager.list_bucket_files(prefix=args.prefix)
    if args.format == "json":
        print(json.dumps([obj.model_dump(mode="json") for obj in objects], indent=2))
        return 0

    rows = [
        (
            obj.key,
            str(obj.size),
            obj.last_modified.isoformat() if obj.last_modified else "-",
        )
        for obj in objects
    ]
    print(render_table(("Key", "Size", "Last modified"), rows))
    return 0


async def _dictionary(manager: TranslationManager, args: argparse.Namespace) -> int:
    entries = await manager.load_dictionary()
    if args.language:
        wanted = args.language.strip().lower()
        entries = [entry for entry in entries if entry.language.strip().lower() == wanted]

    if args.format == "json":
        print(json.dumps([entry.model_dump() for entry in entries], ensure_ascii=False, indent=2))
        return 0

    rows = [(entry.source, entry.language, entry.translation or "-") for entry in entries]
    print(render_table(("Source", "Language", "Translation"), rows))
    return 0


_COMMANDS = {
    "translate": _translate,
    "bulk": _bulk,
    "ls": _list,
    "dictionary": _dictionary,
}


async def _run(args: argparse.Namespace) -> int:
    try:
        manager = TranslationManager.from_settings(get_settings())
    except TranslationManagerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        return await _COMMANDS[args.command](manager, args)
    except TranslationManagerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        await manager.errors.flush()


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(get_settings().log_level)
    exit_code = asyncio.run(_run(args))
    raise SystemExit(exit_code)


if __name__ == "__main__":  # pragma: no cover - script entry point
    main()
