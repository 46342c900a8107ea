import os
import re
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, TypeVar

import pathspec

from dtsbundle.consts import DTS_SUFFIX

T = TypeVar("T")

_BOM = "\ufeff"
_INDENT_RE = re.compile(r"^(?:( )+|\t+)")


def abs_path(path: str | Path) -> str:
    """Absolute, normalized file identity used as the key for parse records."""
    return os.path.normpath(os.path.abspath(str(path)))


def posix_relpath(path: str, start: str) -> str:
    """Return *path* relative to *start* with forward slashes."""
    return os.path.relpath(path, start).replace("\\", "/")


def push_unique(items: List[T], value: T) -> List[T]:
    if value not in items:
        items.append(value)
    return items


def read_declaration(path: str) -> str:
    """
    Read a declaration file as UTF-8, dropping a byte-order-mark and any
    trailing whitespace.
    """
    with open(path, "r", encoding="utf-8") as f:
        code = f.read()
    if code.startswith(_BOM):
        code = code[len(_BOM) :]
    return code.rstrip()


def discover_source_typings(base_dir: str) -> List[str]:
    """Return all `*.d.ts` files under *base_dir*, sorted by path."""
    root = Path(base_dir)
    return sorted(
        abs_path(p) for p in root.rglob(f"*{DTS_SUFFIX}") if p.is_file()
    )


def detect_indent(text: str) -> Optional[str]:
    """
    Return the dominant indentation unit of *text* (e.g. "    " or "\\t"),
    or None when no line is indented.

    Every change of indentation between consecutive non-blank lines counts as
    one use of that width; unchanged lines add weight to the last width seen.
    The most used width wins, weight breaks ties. JSDoc continuation lines
    (" * text") are offset by one space and do not count.
    """
    tabs = 0
    spaces = 0
    prev = 0
    stats: dict[int, List[int]] = {}
    current: Optional[List[int]] = None

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("*"):
            continue

        m = _INDENT_RE.match(line)
        if m is None:
            prev = 0
            continue

        width = len(m.group(0))
        if m.group(1):
            spaces += 1
        else:
            tabs += 1

        diff = width - prev
        prev = width

        if diff == 0:
            if current is not None:
                current[1] += 1
            continue

        current = stats.setdefault(abs(diff), [0, 0])
        current[0] += 1

    best: Optional[Tuple[int, int, int]] = None
    for amount, (used, weight) in stats.items():
        if best is None or used > best[1] or (used == best[1] and weight > best[2]):
            best = (amount, used, weight)

    if best is None:
        return None

    unit = "\t" if tabs >= spaces else " "
    return unit * best[0]


def build_exclude_predicate(exclude: Any) -> Callable[[str], bool]:
    """
    Turn the `exclude` option into a predicate over base-relative posix paths.

    Accepts a callable, a regular expression (string or compiled) searched in
    the path, or a list of gitwildmatch patterns.
    """
    if exclude is None:
        return lambda _path: False

    if callable(exclude):
        return lambda path: bool(exclude(path))

    if isinstance(exclude, str):
        exclude = re.compile(exclude)

    if isinstance(exclude, re.Pattern):
        pattern = exclude
        return lambda path: pattern.search(path) is not None

    spec = pathspec.PathSpec.from_lines("gitwildmatch", list(exclude))
    return spec.match_file
