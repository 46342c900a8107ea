from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Optional, Set

from dtsbundle.context import BundleContext
from dtsbundle.models import ParseRecord
from dtsbundle.parser import parse_file

# ambient module name -> record of the file declaring it
ExportMap = Dict[str, ParseRecord]


@dataclass
class ParseGraph:
    main: ParseRecord
    files: Dict[str, ParseRecord] = field(default_factory=dict)

    def get(self, file: str) -> Optional[ParseRecord]:
        return self.files.get(file)


def walk_files(ctx: BundleContext) -> ParseGraph:
    """
    Parse the main file and, breadth first, every file reachable through
    references and relative imports. Each file is parsed exactly once, so
    cyclic references terminate.
    """
    ctx.trace("parsing files", main=ctx.main_file)

    queue: Deque[str] = deque([ctx.main_file])
    seen: Set[str] = set()
    files: Dict[str, ParseRecord] = {}

    while queue:
        target = queue.popleft()
        if target in seen:
            continue
        seen.add(target)

        parse = parse_file(ctx, target)
        files[parse.file] = parse

        for dep in (*parse.refs, *parse.relative_imports):
            if dep not in seen and dep not in queue:
                queue.append(dep)

    return ParseGraph(main=files[ctx.main_file], files=files)


def build_export_map(graph: ParseGraph, ctx: Optional[BundleContext] = None) -> ExportMap:
    """
    Map every declared ambient module name to its file. Two files declaring
    the same module cannot be told apart later, so that is an error.
    """
    if ctx is not None:
        ctx.trace("mapping exports")

    export_map: ExportMap = {}
    for parse in graph.files.values():
        for name in parse.exports:
            if name in export_map:
                raise ValueError(
                    f"already got export for: {name} "
                    f"({export_map[name].file} and {parse.file})"
                )
            export_map[name] = parse
            if ctx is not None:
                ctx.trace("export", name=name, file=parse.file)
    return export_map
