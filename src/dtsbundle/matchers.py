"""
Line classification for declaration files.

Every matcher looks at a single physical line and is free of side effects.
Matchers that extract something return a small tagged tuple (or None when
the line does not match); the rest return a plain bool.
"""

import re
from enum import Enum
from typing import NamedTuple, Optional, Pattern

BLANK_RE: Pattern = re.compile(r"^\s*$")
BLOCK_COMMENT_START_RE: Pattern = re.compile(r"^[ \t]*/\*")
BLOCK_COMMENT_END_RE: Pattern = re.compile(r"^[ \t]*\*+/")
BLOCK_COMMENT_CLOSED_RE: Pattern = re.compile(r"\*+/[ \t]*$")
JSDOC_START_RE: Pattern = re.compile(r"^[ \t]*/\*\*")
JSDOC_BODY_RE: Pattern = re.compile(r"^([ \t]*)(\*.*)")
REFERENCE_RE: Pattern = re.compile(
    r"""^[ \t]*///[ \t]*<reference[ \t]+path=(["'])(.*?)\1?[ \t]*/>.*$"""
)
LINE_COMMENT_RE: Pattern = re.compile(r"^[ \t]*//")
PRIVATE_RE: Pattern = re.compile(r"^[ \t]*(?:static )?private (?:static )?")
PUBLIC_RE: Pattern = re.compile(r"^([ \t]*)(static |)(public |)(static |)(.*)$", re.S)
DECLARE_RE: Pattern = re.compile(r"^(export )?declare ")

# import foo = require('foo');  export import foo = require('./foo');
IMPORT_REQUIRE_RE: Pattern = re.compile(
    r"""^([ \t]*(?:export )?(?:import .+? )= require\()(['"])(.+?)(\2\);.*)$"""
)
# import x from 'foo';  import * as x from 'foo';  export * from './foo';
IMPORT_FROM_RE: Pattern = re.compile(
    r"^([ \t]*(?:import|export)[ \t]+(?:type[ \t]+)?"
    r"(?:\*(?:[ \t]+as[ \t]+[\w$]+)?"
    r"|[\w$]+(?:[ \t]*,[ \t]*(?:\{[^}]*\}|\*[ \t]+as[ \t]+[\w$]+))?"
    r"|\{[^}]*\})"
    r"[ \t]*from[ \t]*)"
    r"""(['"])([^'"]+)(\2.*)$"""
)
# import './polyfill';
IMPORT_BARE_RE: Pattern = re.compile(
    r"""^([ \t]*import[ \t]+)(['"])([^'"]+)(\2.*)$"""
)
MODULE_DECLARATION_RE: Pattern = re.compile(
    r"""^([ \t]*declare module )(['"])(.+?)(\2[ \t]*\{?.*)$"""
)

IDENTIFIER_RE: Pattern = re.compile(r"^\w+(?:[.-]\w+)*$")
# starts with a dot, a slash or a windows drive letter
FILE_SPECIFIER_RE: Pattern = re.compile(r"^(?:[./].*|.:.*)$")


class ImportStyle(str, Enum):
    REQUIRE = "require"
    FROM = "from"
    SIDE_EFFECT = "side_effect"


class ReferenceMatch(NamedTuple):
    path: str


class ImportMatch(NamedTuple):
    lead: str
    quote: str
    specifier: str
    trail: str
    style: ImportStyle

    @property
    def is_file(self) -> bool:
        return is_file_specifier(self.specifier)

    def with_specifier(self, specifier: str) -> str:
        return self.lead + self.quote + specifier + self.trail


class ModuleDeclarationMatch(NamedTuple):
    lead: str
    quote: str
    name: str
    trail: str

    def with_name(self, name: str) -> str:
        return self.lead + self.quote + name + self.trail

    def without_declare(self) -> str:
        """The line as a nested `module 'x' {` block."""
        return self.lead.replace("declare ", "", 1) + self.quote + self.name + self.trail


def is_blank(line: str) -> bool:
    return BLANK_RE.match(line) is not None


def is_block_comment_start(line: str) -> bool:
    return BLOCK_COMMENT_START_RE.match(line) is not None


def is_block_comment_end(line: str) -> bool:
    return BLOCK_COMMENT_END_RE.match(line) is not None


def closes_block_comment(line: str) -> bool:
    """True when a block comment opened on *line* also ends on it."""
    return BLOCK_COMMENT_CLOSED_RE.search(line) is not None


def is_jsdoc_start(line: str) -> bool:
    return JSDOC_START_RE.match(line) is not None


def fix_jsdoc_line(line: str) -> str:
    # tsc emits " * foo" continuation lines one space short
    m = JSDOC_BODY_RE.match(line)
    if m:
        return m.group(1) + " " + m.group(2)
    return line


def match_reference(line: str) -> Optional[ReferenceMatch]:
    m = REFERENCE_RE.match(line)
    if m:
        return ReferenceMatch(path=m.group(2))
    return None


def is_line_comment(line: str) -> bool:
    return LINE_COMMENT_RE.match(line) is not None


def is_private_member(line: str) -> bool:
    return PRIVATE_RE.match(line) is not None


def match_import(line: str) -> Optional[ImportMatch]:
    m = IMPORT_REQUIRE_RE.match(line)
    if m:
        return ImportMatch(*m.groups(), style=ImportStyle.REQUIRE)
    m = IMPORT_FROM_RE.match(line)
    if m:
        return ImportMatch(*m.groups(), style=ImportStyle.FROM)
    m = IMPORT_BARE_RE.match(line)
    if m:
        return ImportMatch(*m.groups(), style=ImportStyle.SIDE_EFFECT)
    return None


def match_module_declaration(line: str) -> Optional[ModuleDeclarationMatch]:
    m = MODULE_DECLARATION_RE.match(line)
    if m:
        return ModuleDeclarationMatch(*m.groups())
    return None


def is_file_specifier(specifier: str) -> bool:
    return FILE_SPECIFIER_RE.match(specifier) is not None


def is_identifier(name: str) -> bool:
    return IDENTIFIER_RE.match(name) is not None


def strip_public(line: str) -> str:
    m = PUBLIC_RE.match(line)
    if not m:
        return line
    sp, static1, _public, static2, rest = m.groups()
    return sp + static1 + static2 + rest


def strip_declare(line: str) -> str:
    """Drop a leading `declare` keyword, keeping `export`."""
    return DECLARE_RE.sub(r"\1", line, count=1)


def format_reference(path: str) -> str:
    return '/// <reference path="' + path.replace("\\", "/") + '" />'
