"""Command-line entry point: unpack vendor files, inspect translation status, route bulk actions."""
import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from translation_sync.app_config import AppConfig, load_app_config
from translation_sync.bulk_actions import build_bulk_actions, parse_action
from translation_sync.content_store import load_snapshot
from translation_sync.errors import NotOursError, TranslationSyncError, UnsupportedLocaleError
from translation_sync.interchange_validator import check_locale_pair, check_mojibake
from translation_sync.job_ledger import load_job_ledger
from translation_sync.models import StructuredContent
from translation_sync.status_engine import TranslationStatusEngine, locale_state, row_state
from translation_sync.xliff_unpacker import parse_xliff_file, unpack_folder

logger = logging.getLogger(__name__)


def _emit(payload, output_path: Optional[str] = None) -> None:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output_path:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text + "\n")
        logger.info("Wrote output to '%s'.", output_path)
    else:
        print(text)


def _validate_decoded(decoded: Dict[str, StructuredContent], failures: Dict[str, List[str]],
                      config: AppConfig) -> Dict[str, StructuredContent]:
    """Moves documents that fail the post-decode checks from `decoded` into `failures`."""
    pairing = config.pairing
    accepted = {}
    for filename, content in decoded.items():
        errors = check_mojibake(content)
        if pairing.source:
            errors = check_locale_pair(content, pairing) + errors
        if errors:
            for error in errors:
                logger.warning("%s: %s", filename, error)
            failures[filename] = errors
        else:
            accepted[filename] = content
    return accepted


def _unpack(args: argparse.Namespace, config: AppConfig) -> int:
    path = args.path or config.extracted_folder
    if os.path.isdir(path):
        decoded, failures = unpack_folder(path)
    else:
        failures = {}
        try:
            decoded = {os.path.basename(path): parse_xliff_file(path)}
        except (TranslationSyncError, OSError) as e:
            decoded = {}
            failures[os.path.basename(path)] = [str(e)]

    accepted = _validate_decoded(decoded, failures, config)
    _emit({filename: content.to_dict() for filename, content in accepted.items()}, args.output)

    if failures:
        logger.error("%d file(s) were skipped:", len(failures))
        for filename, errors in failures.items():
            for error in errors:
                logger.error("  %s: %s", filename, error)
        return 1
    logger.info("Unpacked %d interchange file(s).", len(accepted))
    return 0


def _status(args: argparse.Namespace, config: AppConfig) -> int:
    repository, ledger = load_snapshot(args.snapshot)
    for record in load_job_ledger(config.job_ledger_path).records():
        ledger.add(record)
    engine = TranslationStatusEngine(repository, ledger)

    status = engine.group_status(args.item_id)
    locales = args.locale or sorted({item.locale for item in status.group.members()})
    row = row_state(status.group, status.active_locales, status.staleness, args.item_id)
    columns = {}
    for locale in locales:
        state = locale_state(status.group, status.active_locales, status.staleness, args.item_id, locale)
        columns[locale] = {
            "status": state.status.value,
            "target": state.target.id if state.target is not None else None,
            "is_self": state.is_self,
        }
    _emit({
        "item": args.item_id,
        "row": {"status": row.status.value, "params": row.to_query_params()},
        "locales": columns,
    })
    return 0


def _menu(args: argparse.Namespace, config: AppConfig) -> int:
    _emit(build_bulk_actions(config.pairing, config.host_locales))
    return 0


def _dispatch(args: argparse.Namespace, config: AppConfig) -> int:
    item_ids = [item_id.strip() for item_id in args.ids.split(',') if item_id.strip()]
    try:
        request = parse_action(args.action, item_ids, config.pairing, config.host_locales,
                               project_options_id=config.project_options_id)
    except NotOursError:
        print(f"'{args.action}' is not a translation action; ignoring it.", file=sys.stderr)
        return 0
    except UnsupportedLocaleError as e:
        logger.error("Translation failed: %s", e)
        return 2
    _emit({"mode": request.mode.value, "params": request.to_query_params(redirect_to=args.redirect_to)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="translation-sync", description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    unpack = subparsers.add_parser("unpack", help="Decode returned interchange files into JSON.")
    unpack.add_argument("path", nargs="?", help="Interchange file or folder (default: configured extracted folder).")
    unpack.add_argument("--output", help="Write the JSON to this file instead of stdout.")
    unpack.set_defaults(handler=_unpack)

    status = subparsers.add_parser("status", help="Show the translation status of one content item.")
    status.add_argument("snapshot", help="YAML snapshot of items, translation links and jobs.")
    status.add_argument("item_id", help="Id of the content item to inspect.")
    status.add_argument("--locale", action="append", help="Locale column to show; repeatable.")
    status.set_defaults(handler=_status)

    menu = subparsers.add_parser("menu", help="List the bulk translation actions on offer.")
    menu.set_defaults(handler=_menu)

    dispatch = subparsers.add_parser("dispatch", help="Route a bulk translation action.")
    dispatch.add_argument("action", help="Bulk action token, e.g. sdl_translate_de-DE.")
    dispatch.add_argument("ids", help="Comma-separated ids of the selected items.")
    dispatch.add_argument("--redirect-to", dest="redirect_to", help="Page to return to once submitted.")
    dispatch.set_defaults(handler=_dispatch)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_app_config()
    try:
        return args.handler(args, config)
    except TranslationSyncError as e:
        logger.error("%s (%s)", e, e.code)
        return 1


if __name__ == "__main__":
    sys.exit(main())
