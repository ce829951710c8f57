from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path normalization and directory materialization utilities used by
discovery and the compile workers. Acts as an abstraction over the 'os'
module to keep Windows and Unix-like behavior uniform.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def to_posix(path: str) -> str:
    """Replace backslash separators with forward slashes."""
    return path.replace("\\", "/")


def strip_extension(path: str) -> str:
    """Drop the final extension of a path, keeping its directory prefix."""
    root, _ = os.path.splitext(path)
    return root

# -----------------------------------------------------------------------------
# DIRECTORY MATERIALIZATION API
# -----------------------------------------------------------------------------

def ensure_dir(path: str) -> None:
    """
    Make sure a directory and all of its missing ancestors exist.

    No-op when the directory already exists. Otherwise the parent is
    ensured first, then the directory itself is created. A concurrent
    creator winning the race is tolerated; nothing is ever removed.

    Args:
        path: Directory to materialize.

    Raises:
        OSError: If the directory cannot be created, or the path exists
            and is not a directory.
    """
    if not path or os.path.isdir(path):
        return

    parent = os.path.dirname(os.path.abspath(path))
    if parent and parent != os.path.abspath(path):
        ensure_dir(parent)

    try:
        os.mkdir(path)
    except FileExistsError:
        if not os.path.isdir(path):
            raise
