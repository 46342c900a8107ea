import os
import re
from typing import Callable, List

from dtsbundle import matchers
from dtsbundle.consts import DTS_SUFFIX, NO_HEADER, TOOL_NAME, VERSION
from dtsbundle.context import BundleContext
from dtsbundle.helpers import posix_relpath, read_declaration
from dtsbundle.models import InclusionResult, ModLine, ParseRecord


def get_indenter(actual: str, use: str) -> Callable[[ModLine], str]:
    """
    Return a function rendering a line with its leading run of *actual*
    indentation units replaced by as many *use* units. Whitespace after the
    first non-indent character is left alone.
    """
    if actual == use or not actual:
        return lambda line: line.text

    leading = re.compile("^(?:" + re.escape(actual) + ")+")

    def _indent(line: ModLine) -> str:
        return leading.sub(
            lambda m: use * (len(m.group(0)) // len(actual)), line.text, count=1
        )

    return _indent


def build_header(ctx: BundleContext, inclusion: InclusionResult) -> str:
    newline = ctx.newline
    header_path = ctx.settings.header_path

    content = ""
    if header_path is None:
        content += f"// Generated by {TOOL_NAME} v{VERSION}" + newline
    elif header_path != NO_HEADER:
        text = read_declaration(header_path)
        if text:
            content += newline.join(re.split(r"\r?\n", text)) + newline

    if inclusion.external_dependencies:
        content += "// Dependencies for this module:" + newline
        for dep in inclusion.external_dependencies:
            rel = posix_relpath(dep, ctx.base_dir) if os.path.isabs(dep) else dep
            if ctx.settings.reference_externals:
                content += matchers.format_reference(rel) + newline
            else:
                content += "//   " + rel + newline

    return content


def format_module(ctx: BundleContext, name: str, lines: List[str]) -> str:
    newline = ctx.newline
    indent = ctx.indent

    body = newline.join(indent + line if line else line for line in lines)
    transform = ctx.settings.transform_module_body
    if transform is not None:
        body = transform(body, name)

    return "declare module '" + name + "' {" + newline + body + newline + "}" + newline


def format_parse(ctx: BundleContext, parse: ParseRecord) -> str:
    indenter = get_indenter(parse.indent, ctx.indent)
    lines = [indenter(line) for line in parse.lines]

    if ctx.in_source_typings(parse.file) and not ctx.settings.output_as_module_folder:
        return format_module(ctx, parse.exp, lines)

    # external typings already carry their own `declare module` blocks
    return ctx.newline.join(lines) + ctx.newline


def build_content(ctx: BundleContext, inclusion: InclusionResult) -> str:
    ctx.trace("building output")

    content = build_header(ctx, inclusion)
    content += ctx.newline
    content += (
        ctx.newline.join(format_parse(ctx, parse) for parse in inclusion.used)
        + ctx.newline
    )
    return content


def write_output(ctx: BundleContext, content: str) -> None:
    ctx.trace("writing output", file=ctx.out_file)
    os.makedirs(os.path.dirname(ctx.out_file), exist_ok=True)
    with open(ctx.out_file, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def remove_sources(ctx: BundleContext) -> List[str]:
    """Delete the source typings, never the output file. Returns deleted paths."""
    ctx.trace("removing source typings")
    removed: List[str] = []
    for p in ctx.source_typings:
        if p != ctx.out_file and p.endswith(DTS_SUFFIX) and os.path.isfile(p):
            ctx.trace("remove", file=p)
            os.unlink(p)
            removed.append(p)
    return removed
