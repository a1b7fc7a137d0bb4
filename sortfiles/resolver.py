import os
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from sortfiles.models import SourceFile


def split_filename(name: str) -> Tuple[str, Optional[str]]:
    """
    Split at the last '.' into (stem, extension).
    Extension is None when the name has no '.' at all.
        'photo.jpg'      -> ('photo', 'jpg')
        'archive.tar.gz' -> ('archive.tar', 'gz')
        'README'         -> ('README', None)
        '.bashrc'        -> ('', 'bashrc')
    """
    idx = name.rfind(".")
    if idx < 0:
        return name, None
    return name[:idx], name[idx + 1:]


def candidate_name(stem: str, ext: Optional[str], counter: int) -> str:
    if ext is None:
        return f"{stem}-{counter}"
    return f"{stem}-{counter}.{ext}"


def claim_name(name: str, claimed: Set[str]) -> str:
    """
    Claim 'name' in 'claimed', or the first free 'stem-N.ext' with N counting from 1.
    Mutates 'claimed' and returns the name that was taken.
    """
    if name not in claimed:
        claimed.add(name)
        return name
    stem, ext = split_filename(name)
    counter = 1
    while True:
        candidate = candidate_name(stem, ext, counter)
        if candidate not in claimed:
            claimed.add(candidate)
            return candidate
        counter += 1


def resolution_order(files: Iterable[SourceFile]) -> List[SourceFile]:
    """
    Order in which names are claimed: the first file (by full path) of every
    distinct name, then the remaining duplicates, each part in path order.
    Every name that is unique in its group is therefore kept unchanged.
    """
    first: List[SourceFile] = []
    rest: List[SourceFile] = []
    seen: Set[str] = set()
    for f in sorted(files):
        (rest if f.name in seen else first).append(f)
        seen.add(f.name)
    return first + rest


def resolve_group(files: Iterable[SourceFile], target_root: str, group_key: str) -> Dict[SourceFile, str]:
    """
    Map every file of one group to a unique path under target_root/group_key.
    Of several same-named files the one with the smallest full path keeps the
    original name; the others get the lowest free -1, -2, ... suffix.
    """
    folder = os.path.join(target_root, group_key)
    claimed: Set[str] = set()
    plan: Dict[SourceFile, str] = {}
    for f in resolution_order(files):
        name = claim_name(f.name, claimed)
        if name != f.name:
            logging.debug("Name conflict in %s; using %s", group_key, name, extra={"target": f.name})
        plan[f] = os.path.join(folder, name)
    return plan


def build_plan(groups: Mapping[str, Iterable[SourceFile]], target_root: str) -> Dict[SourceFile, str]:
    """Resolve every group, in group-key order."""
    plan: Dict[SourceFile, str] = {}
    for key in sorted(groups):
        plan.update(resolve_group(groups[key], target_root, key))
    return plan
