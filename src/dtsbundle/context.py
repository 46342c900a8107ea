import os
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from dtsbundle.consts import DTS_SUFFIX
from dtsbundle.helpers import (
    abs_path,
    build_exclude_predicate,
    discover_source_typings,
    push_unique,
)
from dtsbundle.logger import Tracer
from dtsbundle.settings import BundleSettings

_DTS_SUFFIX_RE = re.compile(re.escape(DTS_SUFFIX) + "$")


class ModuleNamer:
    """
    Derives module names from file paths.

    - module name: path relative to the base directory without `.d.ts`
    - exported name: the root name for the main file, otherwise
      `<prefix><root><sep><module name>`
    - library name: `<prefix><root><sep><prefix><sep><identifier>`, used for
      ambient modules pulled into the bundle
    """

    def __init__(
        self, base_dir: str, main_file: str, root_name: str, prefix: str, separator: str
    ) -> None:
        self.base_dir = base_dir
        self.main_file = main_file
        self.root_name = root_name
        self.prefix = prefix
        self.separator = separator

    def module_name(self, file: str) -> str:
        stem = os.path.join(
            os.path.dirname(file), _DTS_SUFFIX_RE.sub("", os.path.basename(file))
        )
        return os.path.relpath(stem, self.base_dir)

    def exported_name(self, file: str) -> str:
        if file == self.main_file:
            return self.root_name
        return self.prefix + self.root_name + self.separator + self.cleanup(
            self.module_name(file)
        )

    def library_name(self, identifier: str) -> str:
        return (
            self.prefix
            + self.root_name
            + self.separator
            + self.prefix
            + self.separator
            + identifier
        )

    def cleanup(self, name: str) -> str:
        name = name.replace("..", "--")
        return re.sub(r"[\\/]", lambda _m: self.separator, name)


def calc_out_file(out: str, base_dir: str) -> str:
    """
    Resolve the output path: relative to *base_dir* unless absolute, or
    relative to the current directory when it starts with "~/".
    """
    out = out.replace("/", os.sep)
    if out.startswith("~" + os.sep):
        return abs_path(out[2:])
    return abs_path(os.path.join(base_dir, out))


@dataclass
class BundleContext:
    """Options resolved once at the start of a run, plus run-wide lookups."""

    settings: BundleSettings
    base_dir: str
    main_file: str
    out_file: str
    namer: ModuleNamer
    is_excluded: Callable[[str], bool]
    trace: Tracer
    source_typings: List[str] = field(default_factory=list)
    external_typings: List[str] = field(default_factory=list)
    _source_set: Set[str] = field(default_factory=set, repr=False)

    def __post_init__(self) -> None:
        self._source_set = set(self.source_typings)

    def in_source_typings(self, file: str) -> bool:
        return file in self._source_set

    def add_external_typing(self, file: str) -> None:
        push_unique(self.external_typings, file)

    @property
    def newline(self) -> str:
        return self.settings.newline

    @property
    def indent(self) -> str:
        return self.settings.indent


def create_context(
    settings: BundleSettings, source_typings: Optional[List[str]] = None
) -> BundleContext:
    """
    Resolve paths and helpers for *settings*. Source typings are discovered
    under the base directory unless given.
    """
    base_dir = abs_path(settings.base_dir or os.path.dirname(settings.main) or ".")
    main_file = abs_path(settings.main.replace("/", os.sep))
    out_file = calc_out_file(settings.out or settings.name + DTS_SUFFIX, base_dir)

    if source_typings is None:
        source_typings = discover_source_typings(base_dir)

    return BundleContext(
        settings=settings,
        base_dir=base_dir,
        main_file=main_file,
        out_file=out_file,
        namer=ModuleNamer(
            base_dir, main_file, settings.name, settings.prefix, settings.separator
        ),
        is_excluded=build_exclude_predicate(settings.exclude),
        trace=Tracer(settings.verbose),
        source_typings=list(source_typings),
    )
