from collections import deque
from typing import Deque, Set

from dtsbundle.context import BundleContext
from dtsbundle.graph import ExportMap, ParseGraph
from dtsbundle.helpers import posix_relpath, push_unique
from dtsbundle.models import InclusionResult, ParseRecord


def resolve_inclusions(
    ctx: BundleContext, graph: ParseGraph, export_map: ExportMap
) -> InclusionResult:
    """
    Walk the parsed files again, starting at the main file, and decide which
    of them end up in the bundle.

    Imports of bare module names are followed only when externals are
    enabled; otherwise the declaring file is reported as an external
    dependency. The externals flag is checked before the exclusion filter,
    so the filter only ever narrows what externals would pull in. Relative
    imports are followed unless the exclusion filter matches.
    """
    ctx.trace("determining typings to include")

    result = InclusionResult()
    queue: Deque[ParseRecord] = deque([graph.main])
    seen: Set[str] = set()

    while queue:
        parse = queue.popleft()
        if parse.file in seen:
            continue
        seen.add(parse.file)

        ctx.trace("include", name=parse.name, file=parse.file)
        result.used.append(parse)

        for name in parse.external_imports:
            owner = export_map.get(name)
            if not ctx.settings.externals:
                ctx.trace("exclude external", module=name)
                push_unique(result.external_dependencies, owner.file if owner else name)
                continue
            if owner is None:
                ctx.trace.warning("external module declaration not found", module=name)
                push_unique(result.external_dependencies, name)
                continue
            if ctx.is_excluded(posix_relpath(owner.file, ctx.base_dir)):
                ctx.trace("exclude external filter", module=name)
                push_unique(result.excluded, owner.file)
                continue
            ctx.trace("include external", module=name)
            queue.append(owner)

        for file in parse.relative_imports:
            dep = graph.files[file]
            if ctx.is_excluded(posix_relpath(dep.file, ctx.base_dir)):
                ctx.trace("exclude internal filter", file=file)
                push_unique(result.excluded, dep.file)
                continue
            ctx.trace("import relative", file=file)
            queue.append(dep)

    for file, parse in graph.files.items():
        if parse.file_exists:
            continue
        if result.is_used(file):
            ctx.trace.warning("included file NOT FOUND", file=file)
            result.included_not_found.append(file)
        else:
            ctx.trace("not used file not found", file=file)
            result.not_included_not_found.append(file)

    return result
