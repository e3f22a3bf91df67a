"""
Filesystem scanner for directory triggers.

Walks a directory tree and returns regular files, optionally bounded in
depth and pruned by a caller-supplied predicate.
"""

import logging
import os
from typing import Callable, List, Optional, Set

logger = logging.getLogger(__name__)


class FileScanner:
    """
    Polling filesystem scanner.

    Errors reading one directory (permission denied, directory vanished
    mid-scan, I/O errors) are logged and only that subtree is skipped.
    """

    def __init__(self, skip_hidden: bool = False, follow_symlinks: bool = False):
        """
        Initialize file scanner.

        Args:
            skip_hidden: Skip files/dirs starting with '.' (default: False)
            follow_symlinks: Follow symbolic links (default: False for safety)
        """
        self.skip_hidden = skip_hidden
        self.follow_symlinks = follow_symlinks

    def scan(
        self,
        root: str,
        max_depth: Optional[int] = None,
        prune: Optional[Callable[[str], bool]] = None,
    ) -> List[str]:
        """
        Scan a directory tree for regular files.

        Args:
            root: Absolute directory to start from
            max_depth: Deepest level to return files from (1 = direct
                children of root). None walks the whole tree.
            prune: Called with each directory path below root; returning
                True skips that directory and everything under it

        Returns:
            Absolute file paths in deterministic (sorted) order. Empty if
            root does not exist or is not a directory.
        """
        if not os.path.isdir(root):
            logger.debug(f"Scan root does not exist yet: {root}")
            return []

        candidates: List[str] = []
        self._scan_dir(root, 1, max_depth, prune, candidates, set())
        return sorted(candidates)

    def _scan_dir(
        self,
        directory: str,
        depth: int,
        max_depth: Optional[int],
        prune: Optional[Callable[[str], bool]],
        candidates: List[str],
        visited: Set[str],
    ) -> None:
        if max_depth is not None and depth > max_depth:
            return

        if self.follow_symlinks:
            # Symlinked directories can form cycles
            real = os.path.realpath(directory)
            if real in visited:
                return
            visited.add(real)

        subdirs: List[str] = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    # Skip hidden files/dirs
                    if self.skip_hidden and entry.name.startswith("."):
                        continue

                    # Skip based on symlink policy
                    if entry.is_symlink() and not self.follow_symlinks:
                        continue

                    if entry.is_dir(follow_symlinks=self.follow_symlinks):
                        subdirs.append(entry.path)
                    elif entry.is_file(follow_symlinks=self.follow_symlinks):
                        candidates.append(entry.path)
        except OSError as e:
            # Directory became inaccessible during scan
            logger.warning(f"Skipping unreadable directory {directory}: {e}")
            return

        for subdir in subdirs:
            if prune is not None and prune(subdir):
                logger.debug(f"Pruned directory: {subdir}")
                continue
            self._scan_dir(subdir, depth + 1, max_depth, prune, candidates, visited)
