"""Path-string helpers and simple directory/list-file utilities."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterable


def _last_sep(path: str) -> int:
    return max(path.rfind("\\"), path.rfind("/"))


def _trimmed_end(path: str) -> int:
    return len(path.rstrip(" "))


def _slice(path: str, start: int, end: int) -> str:
    return path[start:] if end < start else path[start:end]


def get_folder(path: str) -> str:
    """Directory part of ``path`` including the trailing separator."""
    return path[: _last_sep(path) + 1]


def get_name(path: str) -> str:
    """File name part of ``path`` with trailing spaces removed."""
    return _slice(path, _last_sep(path) + 1, _trimmed_end(path))


def get_name_ne(path: str) -> str:
    """File name part of ``path`` without its extension."""
    start = _last_sep(path) + 1
    dot = path.rfind(".")
    if dot >= 0:
        return _slice(path, start, dot)
    return _slice(path, start, _trimmed_end(path))


def get_path_ne(path: str) -> str:
    """Whole ``path`` without its extension."""
    dot = path.rfind(".")
    if dot >= 0:
        return path[:dot]
    return path[: _trimmed_end(path)]


def get_extension(name: str) -> str:
    """Extension of ``name`` including the dot; raises ValueError if none."""
    dot = name.rfind(".")
    if dot < 0:
        raise ValueError(f"no extension in {name!r}")
    return name[dot:]


def make_dirs(path: str) -> bool:
    """Create ``path`` and its parents; True if the directory was created now."""
    if not path:
        return False
    target = Path(path.replace("\\", "/"))
    if target.is_dir():
        return False
    target.mkdir(parents=True, exist_ok=True)
    return True


def _entries(folder: str) -> list[os.DirEntry]:
    with os.scandir(folder or ".") as it:
        return [e for e in it if not e.name.startswith(".")]


def get_sub_folders(folder: str) -> list[str]:
    """Names of the non-hidden sub-directories of ``folder``, sorted."""
    return sorted(e.name for e in _entries(folder) if e.is_dir(follow_symlinks=False))


def get_names(pattern: str) -> list[str]:
    """Names of regular files matching a wildcard such as ``"dir/*.jpg"``, sorted."""
    folder = get_folder(pattern)
    name_pattern = pattern[len(folder):] or "*"
    return sorted(
        e.name
        for e in _entries(folder)
        if e.is_file(follow_symlinks=False) and fnmatch.fnmatch(e.name, name_pattern)
    )


def get_names_recursive(root: str, pattern: str) -> list[str]:
    """Files matching ``pattern`` under ``root`` and its sub-directories.

    ``root`` should end with a separator; names in sub-directories are
    returned relative to ``root``.
    """
    names = get_names(root + pattern)
    for sub in get_sub_folders(root):
        sub_dir = sub + "/"
        names.extend(sub_dir + n for n in get_names_recursive(root + sub_dir, pattern))
    return names


def get_names_ne(pattern: str) -> list[str]:
    """Like :func:`get_names` but without file extensions."""
    return [get_name_ne(n) for n in get_names(pattern)]


def get_names_ne_recursive(root: str, pattern: str) -> list[str]:
    """Like :func:`get_names_recursive` with the pattern's extension removed."""
    ext_len = len(get_extension(pattern))
    return [n[: len(n) - ext_len] for n in get_names_recursive(root, pattern)]


def load_str_list(path: str) -> list[str]:
    """Read lines up to the first empty one; a missing file gives an empty list."""
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            text = fh.read()
    except OSError:
        return []
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    result = []
    for line in lines:
        if not line:
            break
        result.append(line[:-1] if line.endswith("\r") else line)
    return result


def write_str_list(path: str, lines: Iterable[str]) -> None:
    """Write each string on its own line."""
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.writelines(f"{line}\n" for line in lines)