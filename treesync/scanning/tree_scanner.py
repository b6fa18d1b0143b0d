"""Recursive tree scanning for synchronization.

This module provides the TreeScanner class, which enumerates every file below
a root directory and returns the canonical paths as a set.

Example:
    >>> from treesync.scanning import TreeScanner
    >>> scanner = TreeScanner()
    >>> files = scanner.scan_files("/data/photos/")
    >>> print(f"{len(files)} files")
"""

import logging
import os
from typing import List, Optional, Set

from .path_canonicalizer import PathCanonicalizer

logger = logging.getLogger(__name__)


class TreeScanner:
    """Enumerates canonical file paths under a root directory.

    Directories are walked but never included in the result. Symbolic links
    get no special treatment: ``os.walk`` lists links to files as files and
    does not descend into links to directories.

    Attributes:
        _canonicalizer: Canonicalizer applied to every discovered path.
        _errors: Error messages for subdirectories that could not be listed.
    """

    def __init__(self, canonicalizer: Optional[PathCanonicalizer] = None) -> None:
        self._canonicalizer = canonicalizer if canonicalizer is not None else PathCanonicalizer()
        self._errors: List[str] = []

    def scan_files(self, root: str) -> Set[str]:
        """Return the canonical paths of all files below ``root``.

        Args:
            root: Canonical path of an existing directory. Every returned path
                starts with this exact string.

        Returns:
            Set of canonical file paths.

        Raises:
            NotADirectoryError: If ``root`` is missing or not a directory.
        """
        self._require_directory(root)

        files: Set[str] = set()
        for dirpath, _dirnames, filenames in os.walk(root, onerror=self._record_error):
            for filename in filenames:
                files.add(self._canonical_child(dirpath, filename, is_dir=False))

        logger.debug(f"Scanned {root}: {len(files)} files")
        return files

    def scan_directories(self, root: str) -> Set[str]:
        """Return the canonical paths of all directories below ``root``.

        The root itself is not included. Each path ends with ``/``.
        """
        self._require_directory(root)

        directories: Set[str] = set()
        for dirpath, dirnames, _filenames in os.walk(root, onerror=self._record_error):
            for dirname in dirnames:
                directories.add(self._canonical_child(dirpath, dirname, is_dir=True))
        return directories

    def contains_files(self, directory: str, ignore: Optional[Set[str]] = None) -> bool:
        """Whether ``directory`` holds at least one file at any depth.

        Args:
            directory: Directory to inspect.
            ignore: Canonical file paths to disregard, e.g. files that a dry
                run pretends to have deleted.
        """
        for dirpath, _dirnames, filenames in os.walk(directory, onerror=self._record_error):
            for filename in filenames:
                if not ignore:
                    return True
                if self._canonical_child(dirpath, filename, is_dir=False) not in ignore:
                    return True
        return False

    def get_errors(self) -> List[str]:
        """Return a copy of the errors collected while walking."""
        return self._errors.copy()

    def clear_errors(self) -> None:
        self._errors.clear()

    def _canonical_child(self, dirpath: str, name: str, is_dir: bool) -> str:
        path = os.path.join(dirpath, name)
        canonical = self._canonicalizer.canonicalize(path, expand_variables=False)
        # Directory symlinks are listed but not followed; give them the
        # directory suffix explicitly so callers see one form.
        if is_dir and not canonical.endswith("/"):
            canonical += "/"
        return canonical

    def _record_error(self, error: OSError) -> None:
        message = f"Cannot list directory {error.filename}: {error.strerror or error}"
        logger.warning(message)
        self._errors.append(message)

    @staticmethod
    def _require_directory(root: str) -> None:
        if not os.path.isdir(root):
            raise NotADirectoryError(f"Scan root is not a directory: {root}")
