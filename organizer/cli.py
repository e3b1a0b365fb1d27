#!/usr/bin/env python3
"""
drive-organizer - cloud drive media organizer

A CLI tool for cleaning and organizing movie and series folders on a
local or mounted drive using TMDB metadata.
"""
import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

from .api import create_local_store, create_provider, handle_request
from .config import ConfigurationError, load_settings

log = logging.getLogger(__name__)


def print_logs(title: str, response: dict) -> None:
    """Print the action log of one request."""
    print(f"{title}:")
    for entry in response.get("logs", []):
        print(f"  [{entry['type'].upper()}] {entry['description']}")
    if "error" in response:
        print(f"  [ERROR] {response['error']}")


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="drive-organizer",
        description="Clean and organize movie and series folders using TMDB metadata."
    )

    parser.add_argument(
        "action",
        choices=("clean", "movie", "series"),
        help="clean: remove junk recursively; movie / series: organize the folder"
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Folder to process"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without changing anything"
    )
    parser.add_argument(
        "--each",
        action="store_true",
        help="Treat every subfolder of PATH as a separate folder to process"
    )
    parser.add_argument(
        "--use-tmdb",
        action="store_true",
        help="Use TMDB for metadata lookup"
    )
    parser.add_argument(
        "--language",
        type=str,
        default=None,
        help="Language for TMDB results (default: zh-CN)"
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory for cache file (default: current directory)"
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Don't cache TMDB lookups"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings JSON file (default: platform settings directory)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed debug information"
    )

    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
    )

    path = parsed_args.path.expanduser().resolve()
    if not path.is_dir():
        print(f"Error: Not a directory: {parsed_args.path}")
        return 1

    try:
        settings = load_settings(parsed_args.config)
        if parsed_args.language:
            settings.tmdb_language = parsed_args.language
        if parsed_args.cache_dir:
            settings.cache_dir = str(parsed_args.cache_dir)

        provider = None
        if parsed_args.use_tmdb:
            provider = create_provider(settings, use_cache=not parsed_args.no_cache)

        if parsed_args.each or parsed_args.action == "clean":
            store = create_local_store(path, settings)
        else:
            store = create_local_store(path.parent, settings)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1

    if parsed_args.action == "clean":
        targets = [path]
    elif parsed_args.each:
        targets = sorted(p for p in path.iterdir() if p.is_dir() and p != store.trash_dir)
    else:
        targets = [path]

    if not targets:
        print("No folders to process.")
        return 0
    if parsed_args.dry_run:
        print("[DRY RUN - nothing will be changed]\n")

    # Ctrl-C stops the run between items instead of in the middle of one
    cancel = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda *_: cancel.set())

    failures = 0
    try:
        for target in targets:
            if cancel.is_set():
                print("Cancelled.")
                break
            payload = {
                "folderId": store.id_for(target),
                "folderName": target.name,
                "dryRun": parsed_args.dry_run,
            }
            response = handle_request(
                parsed_args.action,
                payload,
                store=store,
                provider=provider,
                settings=settings,
                cancel=cancel,
            )
            print_logs(target.name, response)
            print()
            if "error" in response:
                failures += 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    print("-" * 50)
    print(f"Processed: {len(targets)} | Failed: {failures}")
    return 0 if failures == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
