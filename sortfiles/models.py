"""
Data classes shared by the grouping, resolving and transfer steps.

- SourceFile: one input path and its modification instant
- TransferMode: copy or move
- TransferStatus / FailureKind: per-file outcome and the reason class of a failure
- TransferOutcome: what happened to one SourceFile
"""

import os
import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sortfiles import COPY_ARROW, FAIL_ARROW, MOVE_ARROW


@dataclass(frozen=True, order=True)
class SourceFile:
    """
    A file to be sorted.

    Attributes:
        path: Full path of the file as enumerated
        modified: Last-modified instant (timezone-aware, UTC)
    """
    path: str
    modified: dt.datetime = field(compare=False)

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


class TransferMode(Enum):
    COPY = "copy"
    MOVE = "move"


class TransferStatus(Enum):
    COPIED = "copied"
    MOVED = "moved"
    FAILED = "failed"


class FailureKind(Enum):
    UNREADABLE_TIMESTAMP = "unreadable_timestamp"          # stat failed, file never grouped
    DIRECTORY_CREATION_FAILED = "directory_creation_failed"  # group folder could not be made
    TRANSFER_FAILED = "transfer_failed"                    # copy/move itself failed
    UNREADABLE_FOLDER = "unreadable_folder"                # source folder could not be listed


@dataclass(frozen=True)
class TransferOutcome:
    source: str
    destination: Optional[str]
    status: TransferStatus
    kind: Optional[FailureKind] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not TransferStatus.FAILED

    @classmethod
    def success(cls, source: str, destination: str, mode: TransferMode) -> "TransferOutcome":
        status = TransferStatus.MOVED if mode is TransferMode.MOVE else TransferStatus.COPIED
        return cls(source, destination, status)

    @classmethod
    def failure(cls, source: str, destination: Optional[str], kind: FailureKind, reason: str) -> "TransferOutcome":
        return cls(source, destination, TransferStatus.FAILED, kind, reason)

    def describe(self) -> str:
        """Audit record: 'src\\n\\t-> dst' (move), 'src\\n\\t=> dst' (copy)."""
        if self.status is TransferStatus.MOVED:
            return f"{self.source}\n\t{MOVE_ARROW} {self.destination}"
        if self.status is TransferStatus.COPIED:
            return f"{self.source}\n\t{COPY_ARROW} {self.destination}"
        return f"{self.source}\n\t{FAIL_ARROW} {self.reason}"
