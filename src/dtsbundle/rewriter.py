from typing import Callable, Iterable, Optional, Set

from dtsbundle import matchers
from dtsbundle.context import BundleContext
from dtsbundle.graph import ExportMap
from dtsbundle.models import ModLine, ParseRecord


def replace_import(line: str, replacer: Callable[[str], Optional[str]]) -> str:
    imp = matchers.match_import(line)
    if imp is None or not matchers.is_identifier(imp.specifier):
        return line
    name = replacer(imp.specifier)
    return line if name is None else imp.with_specifier(name)


def replace_module_declaration(
    line: str, replacer: Callable[[str], Optional[str]]
) -> str:
    decl = matchers.match_module_declaration(line)
    if decl is None or not matchers.is_identifier(decl.name):
        return line
    name = replacer(decl.name)
    return line if name is None else decl.with_name(name)


def rewrite_external_modules(
    ctx: BundleContext, used: Iterable[ParseRecord], export_map: ExportMap
) -> None:
    """
    Give every ambient module that made it into the bundle a library-unique
    name, and point the imports of those modules at it.

    Only `ModLine.modified` is written, computed from the untouched
    `original`, so running the pass again yields the same result.
    """
    used = list(used)
    used_files: Set[str] = {p.file for p in used}

    def lib_name(identifier: str) -> Optional[str]:
        owner = export_map.get(identifier)
        if owner is None or owner.file not in used_files:
            return None
        return ctx.namer.library_name(identifier)

    ctx.trace("rewriting global external modules")
    for parse in used:
        for line in parse.declaration_refs:
            _rewrite(ctx, line, replace_module_declaration(line.original, lib_name))
        for line in parse.import_line_refs:
            _rewrite(ctx, line, replace_import(line.original, lib_name))


def _rewrite(ctx: BundleContext, line: ModLine, text: str) -> None:
    line.modified = text
    ctx.trace("rewrite", original=line.original, modified=line.modified)
