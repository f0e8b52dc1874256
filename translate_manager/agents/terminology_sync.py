from __future__ import annotations

import argparse
import asyncio
import json
import logging
import pathlib
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from translate_manager.core.config import get_settings
from translate_manager.core.exceptions import TranslationManagerError
from translate_manager.core.logging_config import configure_logging
from translate_manager.services.manager import TranslationManager
from translate_manager.services.terminology import terminology_rows


logger = logging.getLogger("translate_manager.terminology_sync")


@dataclass(slots=True)
class EntryEdit:
    source: str
    translation: str


@dataclass(slots=True)
class TerminologySyncResult:
    target_language: str
    loaded: int = 0
    added: int = 0
    updated: int = 0
    deleted: int = 0
    not_found: int = 0
    auto_translated: int = 0
    auto_failed: int = 0
    csv_rows: int = 0
    saved: bool = False
    exported: bool = False
    imported: bool = False
    errors: list[str] = field(default_factory=list)


class TerminologySyncAgent:
    """Refresh the custom terminology: load, edit, fill gaps, save, export and import."""

    def __init__(self, manager: TranslationManager):
        self._manager = manager

    async def run(
        self,
        target_language: str | None = None,
        *,
        additions: Iterable[EntryEdit] = (),
        deletions: Iterable[str] = (),
        auto_translate: bool = False,
        import_terminology: bool = True,
        dry_run: bool = False,
    ) -> TerminologySyncResult:
        target = (target_language or self._manager.config.default_target_language).strip()
        result = TerminologySyncResult(target_language=target)

        entries = await self._manager.load_dictionary()
        result.loaded = len(entries)

        for edit in additions:
            change = self._manager.add_or_update_entry(edit.source, target, edit.translation)
            if change == "added":
                result.added += 1
            else:
                result.updated += 1

        for source in deletions:
            if self._manager.delete_entry(source, target):
                result.deleted += 1
            else:
                result.not_found += 1

        if dry_run:
            result.csv_rows = len(
                terminology_rows(self._manager.dictionary.entries, target_language=target)
            )
            logger.info(
                "Dry-run complete. %s entries loaded, %s CSV rows for %s.",
                result.loaded,
                result.csv_rows,
                target,
            )
            return result

        if auto_translate:
            filled = await self._manager.auto_translate_missing()
            result.auto_translated = filled.translated
            result.auto_failed = filled.failed
            result.errors.extend(filled.errors)

        await self._manager.save_dictionary()
        result.saved = True

        await self._manager.export_terminology_csv(target)
        result.csv_rows = len(
            terminology_rows(self._manager.dictionary.entries, target_language=target)
        )
        result.exported = True

        if import_terminology:
            await self._manager.import_terminology(target)
            result.imported = True

        return result


def _parse_entry_spec(spec: str) -> EntryEdit:
    if "=" not in spec:
        raise ValueError("Entries must be provided as source=translation.")
    source, translation = spec.split("=", 1)
    source = source.strip()
    translation = translation.strip()
    if not source or not translation:
        raise ValueError("Entries must include both a source and a translation.")
    return EntryEdit(source=source, translation=translation)


def _load_entry_records(payload: Any, *, target_language: str) -> list[EntryEdit]:
    if isinstance(payload, dict):
        if "entries" in payload:
            payload = payload["entries"]
        else:
            payload = [
                {"source": key, "translation": value} for key, value in payload.items()
            ]

    if not isinstance(payload, list):
        raise ValueError("Entries file must hold an array or an object of source -> translation.")

    edits: list[EntryEdit] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        language = str(item.get("language") or target_language).strip().lower()
        if language != target_language.strip().lower():
            continue
        source = str(item.get("source") or "").strip()
        translation = str(item.get("translation") or "").strip()
        if source and translation:
            edits.append(EntryEdit(source=source, translation=translation))
    return edits


def _load_edits(args: argparse.Namespace, target_language: str) -> list[EntryEdit]:
    edits = [_parse_entry_spec(spec) for spec in args.add]
    if args.entries_file:
        path = pathlib.Path(args.entries_file).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Entries file {path} does not exist.")
        payload = json.loads(path.read_text(encoding="utf-8"))
        edits.extend(_load_entry_records(payload, target_language=target_language))
    return edits


async def _run(args: argparse.Namespace) -> TerminologySyncResult:
    manager = TranslationManager.from_settings(get_settings())
    agent = TerminologySyncAgent(manager)
    target = args.target_language or manager.config.default_target_language
    try:
        return await agent.run(
            target,
            additions=_load_edits(args, target),
            deletions=args.delete,
            auto_translate=args.auto_translate,
            import_terminology=not args.skip_import,
            dry_run=args.dry_run,
        )
    finally:
        await manager.errors.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="translate-manager-sync",
        description="Sync the custom dictionary in S3 and import it as Amazon Translate terminology.",
    )
    parser.add_argument(
        "--target-language",
        default=None,
        help="Language code to export and import (defaults to DEFAULT_TARGET_LANGUAGE).",
    )
    parser.add_argument(
        "--add",
        action="append",
        default=[],
        help="Dictionary entry in the form source=translation. Provide multiple times.",
    )
    parser.add_argument(
        "--entries-file",
        default=None,
        help="Path to a JSON file with entries to add or update.",
    )
    parser.add_argument(
        "--delete",
        action="append",
        default=[],
        help="Source term to remove for the target language. Provide multiple times.",
    )
    parser.add_argument(
        "--auto-translate",
        action="store_true",
        help="Machine-translate entries whose translation is blank before saving.",
    )
    parser.add_argument(
        "--skip-import",
        action="store_true",
        help="Save and export the CSV but do not import it into Amazon Translate.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and apply edits in memory only; nothing is written.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    args = build_parser().parse_args(argv)
    try:
        result = asyncio.run(_run(args))
    except (TranslationManagerError, ValueError, FileNotFoundError) as exc:
        logger.error("Terminology sync failed: %s", exc)
        raise SystemExit(1) from exc

    print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    logger.info(
        "Terminology sync completed for %s: %s loaded, +%s/~%s/-%s, %s CSV rows.",
        result.target_language,
        result.loaded,
        result.added,
        result.updated,
        result.deleted,
        result.csv_rows,
    )
    for error in result.errors:
        logger.warning("Auto-translate error: %s", error)


if __name__ == "__main__":
    main()
