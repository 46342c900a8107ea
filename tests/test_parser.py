from pathlib import Path

from dtsbundle.models import LineRole
from dtsbundle.parser import parse_file, resolve_import_target


def _texts(parse):
    return [line.text for line in parse.lines]


def test_parse_entry_file(sample, make_ctx):
    root = sample("basic")
    ctx = make_ctx(root / "src" / "index.d.ts")

    parse = parse_file(ctx, ctx.main_file)

    assert parse.file_exists
    assert parse.name == "index"
    assert parse.exp == "mylib"
    assert parse.indent == "    "
    assert parse.refs == [str(root / "typings" / "some-pkg.d.ts")]
    assert parse.relative_imports == [str(root / "src" / "lib" / "helper.d.ts")]
    assert parse.external_imports == ["some-pkg"]
    assert parse.exports == []
    # externals are off, nothing to rename later
    assert parse.import_line_refs == []

    assert _texts(parse) == [
        "import helper = require('__mylib/lib/helper');",
        "import pkg = require('some-pkg');",
        "export class Foo {",
        "    name: string;",
        "    /**",
        "      * Runs the foo.",
        "      */",
        "    run(): helper.Result;",
        "    get(): pkg.Thing;",
        "}",
    ]
    # the source text of rewritten lines is kept
    assert parse.lines[0].original == "import helper = require('./lib/helper');"
    assert parse.lines[0].role is LineRole.RELATIVE_IMPORT
    assert parse.lines[1].role is LineRole.EXTERNAL_IMPORT

    # the reference points outside of the base directory
    assert ctx.external_typings == [str(root / "typings" / "some-pkg.d.ts")]


def test_parse_external_typing_keeps_declare(sample, make_ctx):
    root = sample("basic")
    ctx = make_ctx(root / "src" / "index.d.ts", externals=True)

    parse = parse_file(ctx, str(root / "typings" / "some-pkg.d.ts"))

    assert parse.exports == ["some-pkg"]
    assert _texts(parse) == [
        'declare module "some-pkg" {',
        "    export interface Thing {",
        "        id: number;",
        "    }",
        "}",
    ]
    assert parse.declaration_refs == [parse.lines[0]]
    assert parse.lines[0].role is LineRole.MODULE_DECLARATION


def test_parse_marks_external_imports_when_externals_enabled(sample, make_ctx):
    root = sample("basic")
    ctx = make_ctx(root / "src" / "index.d.ts", externals=True)

    parse = parse_file(ctx, ctx.main_file)

    assert [line.original for line in parse.import_line_refs] == [
        "import pkg = require('some-pkg');"
    ]


def test_private_member_drops_queued_jsdoc(tree, make_ctx):
    root = tree(
        {
            "index.d.ts": (
                "export declare class A {\n"
                "    /** Visible. */\n"
                "    visible(): void;\n"
                "    /**\n"
                "     * Secret.\n"
                "     */\n"
                "    private secret;\n"
                "    /* plain block comment */\n"
                "    // line comment\n"
                "    public other: number;\n"
                "}\n"
            )
        }
    )
    ctx = make_ctx(root / "index.d.ts")
    parse = parse_file(ctx, ctx.main_file)

    assert _texts(parse) == [
        "export class A {",
        "    /** Visible. */",
        "    visible(): void;",
        "    other: number;",
        "}",
    ]


def test_blank_lines_and_crlf(tree, make_ctx):
    root = tree({"index.d.ts": "export declare var a: number;\r\n\r\nexport declare var b: string;\r\n"})
    ctx = make_ctx(root / "index.d.ts")
    parse = parse_file(ctx, ctx.main_file)

    assert _texts(parse) == ["export var a: number;", "", "export var b: string;"]


def test_missing_file_is_recorded(tmp_path: Path, tree, make_ctx):
    root = tree({"index.d.ts": "export declare var a: number;\n"})
    ctx = make_ctx(root / "index.d.ts")

    parse = parse_file(ctx, str(tmp_path / "missing.d.ts"))

    assert parse.file_exists is False
    assert parse.lines == []
    assert parse.indent == ctx.indent


def test_module_folder_drops_relative_import_lines(sample, make_ctx):
    root = sample("basic")
    ctx = make_ctx(root / "src" / "index.d.ts", output_as_module_folder=True)

    parse = parse_file(ctx, ctx.main_file)

    assert parse.relative_imports == [str(root / "src" / "lib" / "helper.d.ts")]
    assert "import helper = require('__mylib/lib/helper');" not in _texts(parse)


def test_resolve_import_target(tree):
    root = tree(
        {
            "a.d.ts": "",
            "dir/index.d.ts": "",
        }
    )
    assert resolve_import_target(str(root), "./a") == str(root / "a.d.ts")
    assert resolve_import_target(str(root), "./a.js") == str(root / "a.d.ts")
    assert resolve_import_target(str(root), "./dir") == str(root / "dir" / "index.d.ts")
    assert resolve_import_target(str(root), "./nope") == str(root / "nope.d.ts")


def test_side_effect_import_is_followed(tree, make_ctx):
    root = tree(
        {
            "index.d.ts": 'import "./lib/subF";\nexport declare function a(): void;\n',
            "lib/subF.d.ts": "export declare function f(): void;\n",
        }
    )
    ctx = make_ctx(root / "index.d.ts")

    parse = parse_file(ctx, ctx.main_file)

    assert parse.relative_imports == [str(root / "lib" / "subF.d.ts")]
    assert _texts(parse) == ['import "__mylib/lib/subF";', "export function a(): void;"]


def test_module_augmentation_in_source_typing(sample, make_ctx):
    root = sample("ambient")
    ctx = make_ctx(root / "src" / "index.d.ts")

    parse = parse_file(ctx, str(root / "src" / "ambient1.d.ts"))

    # augmentations are not exports of the file and are never renamed
    assert parse.exports == []
    assert parse.declaration_refs == []
    assert _texts(parse) == [
        "module 'mymodule' {",
        "    interface MyInterface {",
        "        prop1: string;",
        "    }",
        "}",
        "export interface Sup1 {",
        "}",
    ]
