"""Filesystem path helpers.

Expands user-supplied path patterns into concrete file lists and
locates the per-user cache directory that holds reference data.
"""

import os
from getpass import getuser
from glob import glob, has_magic
from pathlib import Path
from tempfile import gettempdir
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import Iterable

CACHE_NAME = 'pytest-csl'


def expand_globs(patterns: 'Iterable[str | os.PathLike[str]] | None',
                 base: Path | None = None) -> list[Path]:
    """Expand path patterns into an ordered list of paths.

    Relative patterns are anchored at `base` when given. Literal paths
    are kept only when they exist. Each pattern contributes its matches
    sorted; patterns keep their order and a path matched twice is
    listed once, at its first position.

    Args:
        patterns: Path patterns, `**` is supported.
        base: Directory relative patterns are resolved against.

    Returns:
        Matching paths.
    """
    paths: dict[Path, None] = {}

    for pattern in patterns or ():
        pattern = Path(pattern).expanduser()
        if base is not None and not pattern.is_absolute():
            pattern = base / pattern

        if has_magic(str(pattern)):
            matches = sorted(Path(item) for item in glob(str(pattern), recursive=True))
        elif pattern.exists():
            matches = [pattern]
        else:
            matches = []

        for item in matches:
            paths.setdefault(item, None)

    return list(paths)


def _user_name() -> str:
    try:
        user = getuser()
    except (KeyError, OSError):
        user = ''

    return user.replace('\\', '') or str(uuid4())


def default_cache_dir() -> Path:
    """Return the platform cache directory for reference data.

    Honours `XDG_CACHE_HOME`, then the user's home `.cache`, and finally
    a per-user directory under the system temporary directory.
    """
    if raw := os.environ.get('XDG_CACHE_HOME'):
        return Path(raw).expanduser() / CACHE_NAME

    try:
        home = Path.home()
    except RuntimeError:
        return Path(gettempdir()) / _user_name() / '.cache' / CACHE_NAME

    return home / '.cache' / CACHE_NAME
