"""Scanning package for treesync.

This package turns directory trees into sets of canonical paths.
It contains two main pieces:

- PathCanonicalizer / canonicalize: Brings path strings into the single
  ``/``-separated, variable-expanded, directory-suffixed form that prefix
  based relative paths depend on.
- TreeScanner: Recursively enumerates the files below a root directory.

Example:
    >>> from treesync.scanning import TreeScanner, canonicalize
    >>>
    >>> root = canonicalize("/data/photos")
    >>> files = TreeScanner().scan_files(root)
"""

from .path_canonicalizer import PathCanonicalizer, canonicalize
from .tree_scanner import TreeScanner

__all__ = ["PathCanonicalizer", "TreeScanner", "canonicalize"]
