import os

from dtsbundle.context import BundleContext, create_context
from dtsbundle.emitter import build_content, remove_sources, write_output
from dtsbundle.graph import build_export_map, walk_files
from dtsbundle.models import BundleResult, InclusionResult
from dtsbundle.resolver import resolve_inclusions
from dtsbundle.rewriter import rewrite_external_modules
from dtsbundle.settings import BundleSettings


def bundle(settings: BundleSettings) -> BundleResult:
    """
    Bundle the declaration file `settings.main` and everything it pulls in
    into a single file exposing the module `settings.name`.

    Phases run strictly one after another: parse every reachable file, map
    ambient module names to files, decide which files are included, rename
    included ambient modules, then emit. All reads happen while parsing;
    nothing is written before emission, and nothing at all when a fatal
    error is raised on the way.
    """
    main_file = os.path.abspath(settings.main)
    if not os.path.exists(main_file):
        raise FileNotFoundError(f"main does not exist: {main_file}")

    ctx = create_context(settings)
    _trace_settings(ctx)

    graph = walk_files(ctx)
    export_map = build_export_map(graph, ctx)
    inclusion = resolve_inclusions(ctx, graph, export_map)
    rewrite_external_modules(ctx, inclusion.used, export_map)

    content = build_content(ctx, inclusion)

    emitted = _should_emit(ctx, inclusion)
    if emitted:
        write_output(ctx, content)
        if settings.remove_source:
            remove_sources(ctx)
    else:
        ctx.trace.warning(
            "no output emitted, referenced files were not found",
            included=inclusion.included_not_found,
            not_included=inclusion.not_included_not_found,
        )

    if settings.verbose:
        _trace_statistics(ctx, inclusion)

    return BundleResult(
        emitted=emitted,
        out_file=ctx.out_file,
        content=content,
        used_files=[p.file for p in inclusion.used],
        excluded_files=list(inclusion.excluded),
        external_dependencies=list(inclusion.external_dependencies),
        included_not_found=list(inclusion.included_not_found),
        not_included_not_found=list(inclusion.not_included_not_found),
    )


def _should_emit(ctx: BundleContext, inclusion: InclusionResult) -> bool:
    settings = ctx.settings
    if inclusion.included_not_found and not settings.emit_on_included_file_not_found:
        return False
    if (
        inclusion.not_included_not_found
        and not settings.emit_on_no_included_file_not_found
    ):
        return False
    return True


def _trace_settings(ctx: BundleContext) -> None:
    s = ctx.settings
    ctx.trace(
        "settings",
        main=s.main,
        name=s.name,
        out=s.out,
        base_dir=ctx.base_dir,
        main_file=ctx.main_file,
        out_file=ctx.out_file,
        externals=s.externals,
        exclude=s.exclude,
        remove_source=s.remove_source,
    )
    ctx.trace("source typings", files=ctx.source_typings)


def _trace_statistics(ctx: BundleContext, inclusion: InclusionResult) -> None:
    def split(files):
        used = [p for p in files if inclusion.is_used(p)]
        unused = [p for p in files if not inclusion.is_used(p)]
        return used, unused

    used_src, unused_src = split(ctx.source_typings)
    used_ext, unused_ext = split(ctx.external_typings)
    ctx.trace("used source typings", files=used_src)
    ctx.trace("unused source typings", files=unused_src)
    ctx.trace("excluded typings", files=inclusion.excluded)
    ctx.trace("used external typings", files=used_ext)
    ctx.trace("unused external typings", files=unused_ext)
    ctx.trace("external dependencies", files=inclusion.external_dependencies)
