"""Collapse a batch of changed paths into the smallest set of rescan requests.

Every changed path scores against the directory it lives in and every
directory above that, up to the watched root. A changed file is worth 1, a
directory that changed itself is worth ``dir_vs_files``. Once a directory's
score goes above ``dir_vs_files`` the whole directory is reported instead of
the individual changes below it.

If A/B has 3 changes and A/C has 8, A scores 11 and with the default
threshold of 10 a single rescan of A is requested.
"""

import os
from typing import Dict, Iterable, Iterator, List, Tuple

# Score of a changed path itself, never merged further
LEAF = -1


def is_directory_event(path: str) -> bool:
    """A trailing separator marks an event for the directory itself."""
    return path.endswith(os.sep) or bool(os.altsep and path.endswith(os.altsep))


def is_ancestor(ancestor: str, path: str) -> bool:
    """True if ``ancestor`` is ``path`` or one of its parent directories.

    Compares whole path segments, so ``/data/ab`` does not contain ``/data/abc``.
    The empty string is the ancestor of every relative path.
    """
    if ancestor == path:
        return True
    if not ancestor:
        return not os.path.isabs(path)
    prefix = ancestor if ancestor.endswith(os.sep) else ancestor + os.sep
    return path.startswith(prefix)


def _clean_root(root: str) -> str:
    return os.path.normpath(root) if root else ""


def _segments(path: str) -> List[str]:
    return path.split(os.sep)


def _inside_root(root: str, path: str) -> bool:
    """Without a root every path is in bounds."""
    return not root or is_ancestor(root, path)


def _changes(paths: Iterable[str], dir_vs_files: int) -> List[Tuple[str, str, int]]:
    """(cleaned path, directory it scores against, weight) for every event."""
    changes: List[Tuple[str, str, int]] = []
    for path in sorted(paths):
        if not path:
            continue
        clean = os.path.normpath(path)
        directory = clean if is_directory_event(path) else os.path.dirname(clean)
        weight = dir_vs_files if directory == clean else 1
        changes.append((clean, directory, weight))
    return changes


def _tracked_directories(directory: str, root: str) -> Iterator[str]:
    """``directory`` and each of its parents strictly below ``root``.

    Without a root the walk stops below the top of the filesystem, or below
    "" for relative paths.
    """
    yield directory
    current = directory
    while True:
        parent = os.path.dirname(current)
        if parent == current or parent == root or not _inside_root(root, parent):
            return
        if not root and os.path.dirname(parent) == parent:
            return
        yield parent
        current = parent


def score_paths(paths: Iterable[str], root: str = "", dir_vs_files: int = 10) -> Dict[str, int]:
    """Score every changed path and every directory touched by a change.

    Args:
        paths: changed paths, in any order, duplicates allowed
        root: directory of the watched root, or "" for no bound
        dir_vs_files: weight of a directory self-change and promotion threshold

    Returns:
        Mapping of path to score; changed paths map to LEAF
    """
    root = _clean_root(root)
    changes = _changes(paths, dir_vs_files)

    scores: Dict[str, int] = {}
    for _, directory, _ in changes:
        if not _inside_root(root, directory):
            continue
        for tracked in _tracked_directories(directory, root):
            scores.setdefault(tracked, 0)

    # every event counts, repeated saves of one file included
    for _, directory, weight in changes:
        current = directory
        while _inside_root(root, current):
            if current in scores:
                scores[current] += weight
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

    for clean, _, _ in changes:
        scores[clean] = LEAF

    return scores


def _relative(path: str, root: str) -> str:
    if root and is_ancestor(root, path):
        path = path[len(root) :]
    return path.lstrip(os.sep)


def collapse(paths: Iterable[str], root: str = "", dir_vs_files: int = 10) -> List[str]:
    """Choose the paths to report for one batch of changes.

    Every changed path is covered by exactly one returned entry: itself or a
    directory above it whose score crossed ``dir_vs_files``. No entry is
    inside another. Entries are relative to ``root``; "" is the root itself.
    """
    root = _clean_root(root)
    scores = score_paths(paths, root, dir_vs_files)

    report: List[str] = []
    last_selected = None
    # ancestors sort directly before all of their descendants
    for path in sorted(scores, key=_segments):
        if last_selected is not None and is_ancestor(last_selected, path):
            continue
        score = scores[path]
        if score != LEAF and score <= dir_vs_files:
            continue
        last_selected = path
        report.append(_relative(path, root))
    return report
