import os
import re
from typing import List, Optional

from dtsbundle import matchers
from dtsbundle.consts import DTS_SUFFIX, INDEX_FILE
from dtsbundle.context import BundleContext
from dtsbundle.helpers import abs_path, detect_indent, push_unique, read_declaration
from dtsbundle.models import LineRole, ModLine, ParseRecord


def resolve_import_target(base_dir: str, specifier: str) -> str:
    """
    Map a relative import specifier to the declaration file it refers to.

    `./foo` resolves to `foo.d.ts`; when that file does not exist but `foo`
    is a directory holding `index.d.ts`, the index file is used instead.
    A `.js` extension on the specifier is ignored.
    """
    if specifier.endswith(".js"):
        specifier = specifier[: -len(".js")]
    target = abs_path(os.path.join(base_dir, specifier))
    if target.endswith(DTS_SUFFIX) and os.path.isfile(target):
        return target

    candidate = target + DTS_SUFFIX
    if os.path.isfile(candidate):
        return candidate

    index = os.path.join(target, INDEX_FILE)
    if os.path.isdir(target) and os.path.isfile(index):
        return index

    return candidate


class DeclarationParser:
    """
    Parses one declaration file into a ParseRecord.

    Lines are classified one by one. Block comments are buffered: plain ones
    are dropped, JSDoc blocks are held back and emitted in front of the next
    line that is kept. Line comments and private members are dropped, triple
    slash references are collected, imports and ambient module declarations
    are recorded for the dependency walk and the renaming pass.
    """

    def __init__(self, ctx: BundleContext, file: str) -> None:
        self.ctx = ctx
        self.file = file
        self.dir = os.path.dirname(file)
        self.record = ParseRecord(
            file=file,
            name=ctx.namer.module_name(file),
            exp=ctx.namer.exported_name(file),
            indent=ctx.indent,
        )
        self._is_source = ctx.in_source_typings(file)
        self._block: List[str] = []
        self._in_block = False
        self._queued_jsdoc: Optional[List[str]] = None

    def parse(self) -> ParseRecord:
        res = self.record
        self.ctx.trace("parse file", name=res.name, file=res.file)

        if not os.path.exists(self.file):
            self.ctx.trace("file not found", file=self.file)
            res.file_exists = False
            return res

        code = read_declaration(self.file)
        res.indent = detect_indent(code) or self.ctx.indent

        for line in re.split(r"\r?\n", code):
            self._process_line(line)

        return res

    def _emit(self, line: str, role: LineRole = LineRole.PLAIN) -> ModLine:
        mod_line = ModLine(original=line, role=role)
        self.record.lines.append(mod_line)
        return mod_line

    # --- comments -----------------------------------------------------
    def _pop_block(self) -> None:
        if self._block and matchers.is_jsdoc_start(self._block[0]):
            # hold until we know whether the next line is kept
            self._queued_jsdoc = self._block
        self._block = []
        self._in_block = False

    def _pop_jsdoc(self) -> None:
        if self._queued_jsdoc is None:
            return
        for line in self._queued_jsdoc:
            self._emit(matchers.fix_jsdoc_line(line))
        self._queued_jsdoc = None

    # --- line dispatch ------------------------------------------------
    def _process_line(self, line: str) -> None:
        if matchers.is_block_comment_end(line):
            self._block.append(line)
            self._pop_block()
            return

        if matchers.is_block_comment_start(line):
            self._block.append(line)
            self._in_block = True
            if matchers.closes_block_comment(line):
                self._pop_block()
            return

        if self._in_block:
            self._block.append(line)
            return

        if matchers.is_blank(line):
            self._emit("")
            return

        ref = matchers.match_reference(line)
        if ref is not None:
            self._handle_reference(ref)
            return

        # regular comments are not supported by the declaration compiler
        if matchers.is_line_comment(line):
            return

        if matchers.is_private_member(line):
            self._queued_jsdoc = None
            return

        self._pop_jsdoc()

        imp = matchers.match_import(line)
        if imp is not None:
            self._handle_import(line, imp)
            return

        decl = matchers.match_module_declaration(line)
        if decl is not None:
            self._handle_module_declaration(line, decl)
            return

        line = matchers.strip_public(line)
        if self._is_source:
            # the whole file is wrapped into a `declare module` block later on
            line = matchers.strip_declare(line)
        self._emit(line)

    def _handle_reference(self, ref: matchers.ReferenceMatch) -> None:
        ref_path = abs_path(os.path.join(self.dir, ref.path))
        if self.ctx.in_source_typings(ref_path):
            self.ctx.trace("reference source typing", ref=ref.path, file=ref_path)
        else:
            self.ctx.trace("reference external typing", ref=ref.path, file=ref_path)
            self.ctx.add_external_typing(ref_path)
        push_unique(self.record.refs, ref_path)

    def _handle_import(self, line: str, imp: matchers.ImportMatch) -> None:
        res = self.record
        if imp.is_file:
            target = resolve_import_target(self.dir, imp.specifier)
            self.ctx.trace("import relative", module=imp.specifier, file=target)
            push_unique(res.relative_imports, target)
            if self.ctx.settings.output_as_module_folder:
                # bundled files share one module in a module folder
                return
            mod_line = self._emit(line, LineRole.RELATIVE_IMPORT)
            mod_line.modified = imp.with_specifier(self.ctx.namer.exported_name(target))
            return

        self.ctx.trace("import external", module=imp.specifier)
        push_unique(res.external_imports, imp.specifier)
        mod_line = self._emit(line, LineRole.EXTERNAL_IMPORT)
        if self.ctx.settings.externals:
            res.import_line_refs.append(mod_line)

    def _handle_module_declaration(
        self, line: str, decl: matchers.ModuleDeclarationMatch
    ) -> None:
        if self._is_source:
            # augmentation of an existing module, keep its name
            self.ctx.trace("augment module", module=decl.name)
            if not self.ctx.settings.output_as_module_folder:
                line = decl.without_declare()
            self._emit(line, LineRole.MODULE_DECLARATION)
            return

        self.ctx.trace("declare module", module=decl.name)
        push_unique(self.record.exports, decl.name)
        mod_line = self._emit(line, LineRole.MODULE_DECLARATION)
        self.record.declaration_refs.append(mod_line)


def parse_file(ctx: BundleContext, file: str) -> ParseRecord:
    return DeclarationParser(ctx, file).parse()
