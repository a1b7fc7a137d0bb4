import os
import shutil
import logging
from typing import Callable, Dict, List, Mapping, Optional

from sortfiles import RunSummary
from sortfiles.models import FailureKind, SourceFile, TransferMode, TransferOutcome

DESTINATION_EXISTS = "destination exists"

Reporter = Callable[[TransferOutcome], None]


# ------------------------------------------------------------
# directories
# ------------------------------------------------------------

def create_group_dirs(
    plan: Mapping[SourceFile, str],
    *,
    dry_run: bool = False,
    summary: Optional[RunSummary] = None,
) -> Dict[str, Optional[str]]:
    """
    Create each distinct destination folder of 'plan' once.
    Returns {folder: None} on success or {folder: error text} on failure.
    A folder that already exists as a directory is accepted (not counted as created).
    """
    results: Dict[str, Optional[str]] = {}
    for folder in sorted({os.path.dirname(dst) for dst in plan.values()}):
        if dry_run:
            results[folder] = None
            continue
        try:
            os.mkdir(folder)
            logging.debug("Created folder: %s", folder, extra={"target": os.path.basename(folder)})
            results[folder] = None
            if summary:
                summary.inc("folders_created")
        except FileExistsError:
            if os.path.isdir(folder):
                results[folder] = None
            else:
                results[folder] = "path exists and is not a folder"
        except OSError as e:
            results[folder] = e.strerror or str(e)
        if results[folder]:
            logging.error("Could not create folder: %s", results[folder], extra={"target": os.path.basename(folder)})
    return results


# ------------------------------------------------------------
# transfer primitives
# ------------------------------------------------------------

def copy_file(src: str, dst: str) -> None:
    """
    Copy content and metadata of 'src' to a new file 'dst'.
    Never overwrites (FileExistsError); a partially written 'dst' is removed.
    """
    with open(src, "rb") as fsrc:
        with open(dst, "xb") as fdst:
            try:
                shutil.copyfileobj(fsrc, fdst)
            except BaseException:
                fdst.close()
                os.remove(dst)
                raise
    try:
        shutil.copystat(src, dst)
    except OSError:
        os.remove(dst)
        raise


def move_file(src: str, dst: str) -> None:
    """
    Move 'src' to 'dst'. Never overwrites (FileExistsError).
    Hard-links then unlinks; where linking is not possible (other device,
    no hard-link support) falls back to copy_file and removes the source.
    If the source cannot be removed the new 'dst' is dropped again.
    """
    try:
        os.link(src, dst)
    except FileExistsError:
        raise
    except OSError:
        copy_file(src, dst)
    try:
        os.remove(src)
    except OSError:
        os.remove(dst)
        raise


def transfer(src: str, dst: str, mode: TransferMode) -> TransferOutcome:
    """Copy or move one file and describe the result."""
    try:
        if mode is TransferMode.MOVE:
            move_file(src, dst)
        else:
            copy_file(src, dst)
    except FileExistsError:
        return TransferOutcome.failure(src, dst, FailureKind.TRANSFER_FAILED, DESTINATION_EXISTS)
    except OSError as e:
        return TransferOutcome.failure(src, dst, FailureKind.TRANSFER_FAILED, e.strerror or str(e))
    return TransferOutcome.success(src, dst, mode)


# ------------------------------------------------------------
# materialize
# ------------------------------------------------------------

def materialize(
    plan: Mapping[SourceFile, str],
    mode: TransferMode,
    *,
    dry_run: bool = False,
    report: Optional[Reporter] = None,
    summary: Optional[RunSummary] = None,
) -> List[TransferOutcome]:
    """
    Create the group folders, then transfer every planned file.

    A folder that cannot be created fails all of its files; other folders
    are unaffected. Each transfer is attempted on its own. In dry-run mode
    nothing is touched and every file is reported as if it succeeded.
    Outcomes come back ordered by destination path.
    """
    folders = create_group_dirs(plan, dry_run=dry_run, summary=summary)
    outcomes: List[TransferOutcome] = []

    for f, dst in sorted(plan.items(), key=lambda item: item[1]):
        error = folders.get(os.path.dirname(dst))
        if error:
            outcome = TransferOutcome.failure(
                f.path, dst, FailureKind.DIRECTORY_CREATION_FAILED, f"could not create folder: {error}"
            )
        elif dry_run:
            outcome = TransferOutcome.success(f.path, dst, mode)
        else:
            outcome = transfer(f.path, dst, mode)

        if not outcome.ok and outcome.kind is FailureKind.TRANSFER_FAILED:
            logging.debug("Transfer failed: %s", outcome.reason, extra={"target": f.name})
        outcomes.append(outcome)
        if report:
            report(outcome)
    return outcomes
