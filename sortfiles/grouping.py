import os
import logging
import datetime as dt
from typing import Callable, Dict, Iterable, List, Tuple

from sortfiles.models import FailureKind, SourceFile, TransferOutcome

UNREADABLE_TIMESTAMP = "unreadable timestamp"
UNREADABLE_FOLDER = "could not list folder"


def read_source_file(path: str) -> SourceFile:
    """Stat 'path' and return it with its last-modified instant (UTC). Raises OSError."""
    stat = os.stat(path)
    return SourceFile(path, dt.datetime.fromtimestamp(stat.st_mtime, tz=dt.timezone.utc))


def read_source_files(paths: Iterable[str]) -> Tuple[List[SourceFile], List[TransferOutcome]]:
    """
    Read modification times for every candidate path.
    Files whose timestamp cannot be read are returned as failures and never grouped.
    Duplicate paths are collapsed.
    """
    files: List[SourceFile] = []
    failures: List[TransferOutcome] = []
    seen = set()
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        try:
            files.append(read_source_file(path))
        except (OSError, ValueError, OverflowError) as e:
            logging.debug("Could not read modification time: %s", e, extra={"target": os.path.basename(path)})
            failures.append(TransferOutcome.failure(path, None, FailureKind.UNREADABLE_TIMESTAMP, UNREADABLE_TIMESTAMP))
    return files, failures


def listing_failures(errors: Iterable[OSError], root: str) -> List[TransferOutcome]:
    """One failure per folder that could not be listed while enumerating 'root'."""
    return [
        TransferOutcome.failure(
            e.filename or root, None, FailureKind.UNREADABLE_FOLDER, f"{UNREADABLE_FOLDER}: {e.strerror or e}"
        )
        for e in errors
    ]


def group_files(files: Iterable[SourceFile], key_of: Callable[[SourceFile], str]) -> Dict[str, List[SourceFile]]:
    """
    Partition 'files' by key_of(file), calling key_of once per file.
    Buckets are sorted by full path, so the result does not depend on input order.
    """
    groups: Dict[str, List[SourceFile]] = {}
    for f in files:
        groups.setdefault(key_of(f), []).append(f)
    for members in groups.values():
        members.sort()
    return groups
