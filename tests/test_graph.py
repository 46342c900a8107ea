import pytest

from dtsbundle.graph import build_export_map, walk_files


def test_walk_collects_references_and_imports(sample, make_ctx):
    root = sample("basic")
    ctx = make_ctx(root / "src" / "index.d.ts")

    graph = walk_files(ctx)

    assert graph.main.file == ctx.main_file
    assert list(graph.files) == [
        str(root / "src" / "index.d.ts"),
        str(root / "typings" / "some-pkg.d.ts"),
        str(root / "src" / "lib" / "helper.d.ts"),
    ]

    export_map = build_export_map(graph)
    assert set(export_map) == {"some-pkg"}
    assert export_map["some-pkg"].file == str(root / "typings" / "some-pkg.d.ts")


def test_walk_terminates_on_cycles(tree, make_ctx):
    root = tree(
        {
            "index.d.ts": '/// <reference path="a.d.ts" />\nimport b = require("./b");\n',
            "a.d.ts": '/// <reference path="index.d.ts" />\n/// <reference path="a.d.ts" />\n',
            "b.d.ts": 'import a = require("./index");\nexport declare var b: number;\n',
        }
    )
    ctx = make_ctx(root / "index.d.ts")

    graph = walk_files(ctx)

    assert sorted(graph.files) == sorted(
        [str(root / "index.d.ts"), str(root / "a.d.ts"), str(root / "b.d.ts")]
    )


def test_walk_records_missing_files(tree, make_ctx):
    root = tree({"index.d.ts": 'import gone = require("./gone");\n'})
    ctx = make_ctx(root / "index.d.ts")

    graph = walk_files(ctx)

    missing = graph.files[str(root / "gone.d.ts")]
    assert missing.file_exists is False


def test_duplicate_ambient_export_is_fatal(tree, make_ctx):
    root = tree(
        {
            "src/index.d.ts": (
                '/// <reference path="../typings/one.d.ts" />\n'
                '/// <reference path="../typings/two.d.ts" />\n'
                "export declare var a: number;\n"
            ),
            "typings/one.d.ts": 'declare module "dup" {\n    export var x: number;\n}\n',
            "typings/two.d.ts": 'declare module "dup" {\n    export var y: number;\n}\n',
        }
    )
    ctx = make_ctx(root / "src" / "index.d.ts")
    graph = walk_files(ctx)

    with pytest.raises(ValueError, match="already got export for: dup"):
        build_export_map(graph)


@pytest.mark.parametrize("count", [2, 3, 5])
def test_colliding_declarations_always_fail(tree, make_ctx, count):
    files = {
        "src/index.d.ts": "".join(
            f'/// <reference path="../typings/t{i}.d.ts" />\n' for i in range(count)
        )
    }
    for i in range(count):
        files[f"typings/t{i}.d.ts"] = (
            f'declare module "m{i}" {{\n}}\ndeclare module "shared" {{\n}}\n'
        )
    root = tree(files)
    graph = walk_files(make_ctx(root / "src" / "index.d.ts"))

    with pytest.raises(ValueError):
        build_export_map(graph)


def test_augmentations_do_not_collide_with_declaration(sample, make_ctx):
    root = sample("ambient")
    graph = walk_files(make_ctx(root / "src" / "index.d.ts"))

    export_map = build_export_map(graph)

    assert list(export_map) == ["mymodule"]
    assert export_map["mymodule"].file == str(root / "typings" / "mymodule.d.ts")
