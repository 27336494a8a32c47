#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mbbot.app import cancel_edits, maintain_urls, scan_dump
from mbbot.config import configure_logging, get_musicbrainz_config

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from types import FrameType

log = logging.getLogger(__name__)

ACTION_URLS = "urls"
ACTION_CANCEL = "cancel"
ACTION_SCAN_DUMP = "scan-dump"

MBID_RE = re.compile(r"(?i)^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Perform automated edits on MusicBrainz")
    parser.add_argument(
        "--server",
        type=str,
        help="Base URL of MusicBrainz server (default: $MBBOT_SERVER_URL or test server)",
    )
    parser.add_argument(
        "--creds",
        type=str,
        help="Path to file containing username and password (default: ~/.mbbot)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log edits instead of performing them",
    )
    parser.add_argument(
        "--edit-note",
        type=str,
        default="",
        help="Edit note to attach to all edits instead of the rule's note",
    )
    parser.add_argument(
        "--make-votable",
        action="store_true",
        help="Force voting on edits",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )

    subparsers = parser.add_subparsers(dest="action", required=True)
    subparsers.add_parser(ACTION_URLS, help="Update URLs with MBIDs read from stdin")
    subparsers.add_parser(ACTION_CANCEL, help="Cancel edits with IDs read from stdin")
    scan = subparsers.add_parser(
        ACTION_SCAN_DUMP,
        help="Print MBIDs of URLs in a dumped url table that a rewrite rule matches",
    )
    scan.add_argument("path", type=Path, help="Path to the mbdump/url file")

    return parser.parse_args(list(argv))


def read_mbids(lines: Iterable[str]) -> Iterator[str]:
    """Yield MBIDs from ``lines``, skipping blank lines and raising on anything else."""

    for line in lines:
        value = line.strip()
        if not value:
            continue
        if not MBID_RE.match(value):
            raise ValueError(f"Invalid MBID {value!r}")
        yield value


def read_edit_ids(lines: Iterable[str]) -> Iterator[int]:
    for line in lines:
        value = line.strip()
        if not value:
            continue
        try:
            yield int(value)
        except ValueError as exc:
            raise ValueError(f"Invalid edit ID {value!r}") from exc


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.action == ACTION_SCAN_DUMP:
            for mbid in scan_dump(parsed_args.path):
                sys.stdout.write(f"{mbid}\n")
            return

        config = get_musicbrainz_config(
            server_url=parsed_args.server,
            credentials_path=parsed_args.creds,
        )
        if parsed_args.action == ACTION_URLS:
            results = maintain_urls(
                read_mbids(sys.stdin),
                config=config,
                dry_run=parsed_args.dry_run,
                edit_note=parsed_args.edit_note,
                make_votable=parsed_args.make_votable,
            )
            log.info("Processed %s URL(s)", len(results))
        elif parsed_args.action == ACTION_CANCEL:
            cancelled = cancel_edits(
                read_edit_ids(sys.stdin),
                config=config,
                dry_run=parsed_args.dry_run,
                edit_note=parsed_args.edit_note,
            )
            log.info("Cancelled %s edit(s)", len(cancelled))
        else:
            raise ValueError(f"Unsupported action: {parsed_args.action}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
