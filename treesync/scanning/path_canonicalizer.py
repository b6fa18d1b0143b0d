"""Path canonicalization for prefix-based relative path extraction.

Every path that flows through treesync is brought into one textual form:
forward slashes only, ``%NAME%`` environment references expanded, redundant
``.`` segments removed and existing directories terminated with ``/``.
Relative paths are later computed by stripping a root's literal prefix, so
both roots and scanned files must come out of this module.

Example:
    >>> from treesync.scanning import canonicalize
    >>> canonicalize("C:\\\\data\\\\.\\\\photos", environ={})
    'C:/data/photos'
"""

import logging
import os
import re
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

SEPARATOR = "/"

# %NAME% inside a single segment
_VARIABLE_PATTERN = re.compile(r"%([^%/]+)%")
_REPEATED_SEPARATORS = re.compile(r"/{2,}")
_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:/")


class PathCanonicalizer:
    """Normalizes path strings into treesync's canonical form.

    The environment used for variable expansion is injected so callers (and
    tests) never depend on the ambient process environment.

    Attributes:
        environ: Mapping consulted when expanding ``%NAME%`` references.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self.environ = environ if environ is not None else os.environ

    def canonicalize(self, path: str, expand_variables: bool = True) -> str:
        """Return the canonical form of ``path``.

        Args:
            path: Path as typed by a user, read from a task list or produced
                by a directory walk.
            expand_variables: Expand ``%NAME%`` references. Disabled for
                scanned file names, which may legitimately contain ``%``.

        Returns:
            The canonical path. Existing directories end with ``/``; files and
            paths that do not exist yet are left without a suffix.
        """
        canonical = self.normalize_separators(path)
        if expand_variables:
            canonical = self.normalize_separators(self.expand_variables(canonical))
        canonical = self.collapse_current_segments(canonical)
        return self.ensure_directory_suffix(canonical)

    def anchor(self, path: str, base: str) -> str:
        """Join a relative ``path`` onto ``base`` without resolving ``..``.

        Absolute paths (POSIX root, UNC share or drive letter) are returned
        with separators normalized and variables expanded.
        """
        expanded = self.normalize_separators(
            self.expand_variables(self.normalize_separators(path))
        )
        if self.is_absolute(expanded):
            return expanded
        base = self.normalize_separators(base)
        if not base.endswith(SEPARATOR):
            base += SEPARATOR
        return base + expanded

    @staticmethod
    def is_absolute(path: str) -> bool:
        return path.startswith(SEPARATOR) or bool(_DRIVE_PATTERN.match(path))

    @staticmethod
    def normalize_separators(path: str) -> str:
        """Replace backslashes with ``/`` and collapse repeated separators.

        A leading ``//`` (UNC share) is kept.
        """
        normalized = path.replace("\\", SEPARATOR)
        is_unc = normalized.startswith("//")
        normalized = _REPEATED_SEPARATORS.sub(SEPARATOR, normalized)
        if is_unc:
            normalized = SEPARATOR + normalized
        return normalized

    def expand_variables(self, path: str) -> str:
        """Substitute ``%NAME%`` references segment by segment.

        Unset variables expand to an empty string.
        """
        if "%" not in path:
            return path

        def substitute(match: "re.Match[str]") -> str:
            name = match.group(1)
            value = self.environ.get(name)
            if value is None:
                logger.debug(f"Environment variable not set, expanding to empty: {name}")
                return ""
            return value

        segments = path.split(SEPARATOR)
        return SEPARATOR.join(
            _VARIABLE_PATTERN.sub(substitute, segment) if "%" in segment else segment
            for segment in segments
        )

    @staticmethod
    def collapse_current_segments(path: str) -> str:
        """Drop ``.`` segments while keeping ``..`` segments verbatim.

        Works on whole segments, so ``..`` and names such as ``file.``
        are never touched.
        """
        if path.startswith("//"):
            prefix = "//"
        elif path.startswith(SEPARATOR):
            prefix = SEPARATOR
        else:
            prefix = ""

        segments = [s for s in path.split(SEPARATOR) if s not in ("", ".")]
        if not segments:
            return prefix or "."

        collapsed = prefix + SEPARATOR.join(segments)
        if path.endswith(SEPARATOR):
            collapsed += SEPARATOR
        return collapsed

    @staticmethod
    def ensure_directory_suffix(path: str) -> str:
        """Append ``/`` when ``path`` is an existing directory."""
        if not path.endswith(SEPARATOR) and os.path.isdir(path):
            return path + SEPARATOR
        return path


def canonicalize(
    path: str,
    environ: Optional[Mapping[str, str]] = None,
    expand_variables: bool = True,
) -> str:
    """Canonicalize ``path`` with a one-off PathCanonicalizer."""
    return PathCanonicalizer(environ=environ).canonicalize(
        path, expand_variables=expand_variables
    )
