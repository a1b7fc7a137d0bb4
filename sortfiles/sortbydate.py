import os
import sys
import argparse
import logging
from typing import Iterable, List, Optional

from sortfiles import (
    __version__,
    configure_logging,
    iter_files,
    RunSummary,
    DEFAULT_FORMAT,
    LOCAL_TIMEZONE,
)
from sortfiles.config import ConfigurationError, SortConfig, build_config
from sortfiles.grouping import group_files, listing_failures, read_source_files
from sortfiles.materializer import materialize
from sortfiles.models import FailureKind, TransferMode, TransferOutcome, TransferStatus
from sortfiles.resolver import build_plan

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG = 2

# ------------------------------------------------------------
# core logic
# ------------------------------------------------------------

def _print_outcome(outcome: TransferOutcome) -> None:
    if outcome.ok:
        print(outcome.describe(), flush=True)
    else:
        logging.error("%s", outcome.describe(), extra={"target": os.path.basename(outcome.source)})


def sort_files(
    config: SortConfig,
    paths: Optional[Iterable[str]] = None,
    *,
    report=None,
    summary: Optional[RunSummary] = None,
) -> List[TransferOutcome]:
    """
    Sort files into target/<group key>/ folders by modification time.

    'paths' overrides enumeration of config.source. Folders that could not be
    listed and unreadable timestamps come first in the result, followed by
    transfer outcomes in destination order.
    """
    listing_errors: List[OSError] = []
    if paths is None:
        paths = iter_files(
            config.source,
            recursive=config.recursive,
            include_hidden=config.include_hidden,
            errors=listing_errors,
        )

    files, failures = read_source_files(paths)
    unlisted = listing_failures(listing_errors, config.source)
    failures = unlisted + failures
    for failure in failures:
        if report:
            report(failure)
    if summary:
        summary.inc("found", len(files) + len(failures) - len(unlisted))
        summary.inc("unreadable_folders", len(unlisted))
        summary.inc("unreadable", len(failures) - len(unlisted))

    groups = group_files(files, lambda f: config.group_key(f.modified))
    logging.debug(
        "Grouped %d files into %d folders", len(files), len(groups), extra={"target": os.path.basename(config.target)}
    )
    if summary:
        summary.inc("groups", len(groups))

    plan = build_plan(groups, config.target)
    mode = TransferMode.MOVE if config.move else TransferMode.COPY
    outcomes = materialize(plan, mode, dry_run=config.dry_run, report=report, summary=summary)

    if summary:
        for outcome in outcomes:
            if outcome.status is TransferStatus.MOVED:
                summary.inc("moved")
            elif outcome.status is TransferStatus.COPIED:
                summary.inc("copied")
            elif outcome.kind is FailureKind.DIRECTORY_CREATION_FAILED:
                summary.inc("folder_errors")
            else:
                summary.inc("transfer_errors")
        summary.inc("renamed", sum(1 for f, dst in plan.items() if os.path.basename(dst) != f.name))

    return failures + outcomes


# ------------------------------------------------------------
# CLI
# ------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sortfiles",
        description=(
            "Sort files into subfolders named after their last-modified time "
            "(year-month by default). Copies by default; use --move to move. "
            "Same-named files in one folder get -1, -2, ... suffixes."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("-d", "--source", default=None, help="Folder to sort; the working directory when omitted")
    parser.add_argument("-t", "--target", default=None, help="Folder receiving the dated subfolders; the source when omitted")
    parser.add_argument("-r", "--recursive", action="store_true", help="Include files in subfolders of the source")
    parser.add_argument("-m", "--move", action="store_true", help="Move files instead of copying them")
    parser.add_argument(
        "-z",
        "--timezone",
        default=LOCAL_TIMEZONE,
        help="IANA time zone used to read modification times (e.g. Europe/Berlin); 'local' is the system zone",
    )
    parser.add_argument(
        "-f",
        "--formatter",
        default=DEFAULT_FORMAT,
        help="strftime pattern naming the subfolders, e.g. '%%Y' or '%%Y-%%m-%%d'",
    )
    parser.add_argument("--exclude-hidden", action="store_true", help="Skip dotfiles and dot-folders")
    parser.add_argument("--dry-run", action="store_true", help="Show what would happen without touching any file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        config = build_config(
            args.source,
            args.target,
            recursive=args.recursive,
            move=args.move,
            timezone=args.timezone,
            pattern=args.formatter,
            include_hidden=not args.exclude_hidden,
            dry_run=args.dry_run,
        )
    except ConfigurationError as e:
        logging.error("%s", e, extra={"target": "CONFIG"})
        return EXIT_CONFIG

    s = RunSummary()
    s.set("mode", "move" if config.move else "copy")
    s.set("pattern", config.pattern)
    s.set("timezone", args.timezone)
    s.set("recursive", config.recursive)
    s.set("dry_run", config.dry_run)

    if args.verbose:
        logging.debug(
            "Sorting %s into %s: pattern=%s, timezone=%s, recursive=%s, dry_run=%s",
            config.source,
            config.target,
            config.pattern,
            args.timezone,
            config.recursive,
            config.dry_run,
            extra={"target": os.path.basename(config.source)},
        )

    outcomes = sort_files(config, report=_print_outcome, summary=s)

    found = s.get("found", 0)
    transferred = s.get("moved", 0) + s.get("copied", 0)
    unreadable = s.get("unreadable", 0)
    unreadable_folders = s.get("unreadable_folders", 0)
    folder_errors = s.get("folder_errors", 0)
    transfer_errors = s.get("transfer_errors", 0)
    failed = unreadable + folder_errors + transfer_errors

    verb = "Moved" if config.move else "Copied"
    if config.dry_run:
        verb = f"Would have {verb.lower()}"
    line1 = (
        f"{verb} {transferred}/{found} files into {s.get('groups', 0)} folders "
        f"({s.get('renamed', 0)} renamed). Created {s.get('folders_created', 0)} folders in {s.duration_hms}."
    )
    line2 = (
        f"Failed: {failed} (unreadable timestamp: {unreadable}, folder: {folder_errors}, "
        f"transfer: {transfer_errors}). Unlisted folders: {unreadable_folders}. "
        f"Pattern: {s['pattern']}. Time zone: {s['timezone']}."
    )
    s.emit_lines(
        [line1, line2],
        level=logging.WARNING if failed or unreadable_folders else logging.INFO,
        json_extra={
            "found": found,
            "transferred": transferred,
            "failed": failed,
            "unreadable_folders": unreadable_folders,
            "folders_created": s.get("folders_created", 0),
            "source": config.source,
            "target": config.target,
        },
    )

    return EXIT_OK if all(o.ok for o in outcomes) else EXIT_FAILURES


if __name__ == "__main__":
    sys.exit(main())
