#!/usr/bin/env python3
import logging
import sys
from typing import Any, Dict, Optional, Tuple

import click
from pydantic import ValidationError

from dtsbundle.bundle import bundle
from dtsbundle.consts import TOOL_NAME, VERSION
from dtsbundle.logger import logger
from dtsbundle.settings import NewlineStyle, load_settings


def _setup_logging(verbose: bool) -> None:
    # Ensure stdlib logger emits records so structlog output is visible
    level = logging.INFO if verbose else logging.WARNING
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        # structlog renders the final message; keep stdlib formatter simple.
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    else:
        for handler in root.handlers:
            handler.setLevel(level)


def _flag(name: str, help_text: str):
    return click.option(f"--{name}/--no-{name}", default=None, help=help_text)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(VERSION, prog_name=TOOL_NAME)
@click.option(
    "--config-json",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a JSON config file. Loaded first, other options override it.",
)
@click.option("--name", default=None, help="Name of the module, as in package.json. *required")
@click.option("--main", default=None, help="Path to the entry-point declaration file. *required")
@click.option(
    "--base-dir",
    default=None,
    help="Base directory used for discovering type declarations.",
)
@click.option(
    "--out",
    default=None,
    help="Path of the output file. Relative to base-dir unless absolute.",
)
@_flag("externals", 'Include typings outside of the "base-dir" (i.e. like node.d.ts).')
@_flag(
    "reference-externals",
    'Reference external modules as <reference path="..." /> tags.',
)
@_flag("remove-source", 'Delete all source typings (i.e. "<base-dir>/**/*.d.ts").')
@click.option(
    "--newline",
    type=click.Choice([s.value for s in NewlineStyle], case_sensitive=False),
    default=None,
    help="Newline style to use in the output file.",
)
@click.option("--indent", default=None, help="Indentation to use in the output file.")
@click.option("--prefix", default=None, help="Prefix for rewriting module names.")
@click.option(
    "--separator", default=None, help='Separator for rewriting module "path" names.'
)
@click.option(
    "--exclude",
    multiple=True,
    help="Glob pattern (relative to base-dir) of typings to exclude. Repeatable.",
)
@_flag(
    "verbose",
    "Print detailed info about all references and includes/excludes.",
)
@_flag(
    "emit-on-included-file-not-found",
    "Emit although included files were not found.",
)
@_flag(
    "emit-on-no-included-file-not-found",
    "Emit although files that are not included were not found.",
)
@_flag(
    "output-as-module-folder",
    "Output as module folder format (no declare module).",
)
@click.option(
    "--header-path",
    default=None,
    help='Path to a file that contains the header, or "none" for no header.',
)
def main(
    config_json: Optional[str],
    newline: Optional[str],
    exclude: Tuple[str, ...],
    **options: Any,
) -> None:
    """
    Bundle a tree of TypeScript declaration files into a single .d.ts file.
    """
    click.echo(f"{TOOL_NAME} version {VERSION}")

    overrides: Dict[str, Any] = {k: v for k, v in options.items() if v is not None}
    if newline is not None:
        overrides["newline"] = NewlineStyle(newline).to_newline()
    if exclude:
        overrides["exclude"] = list(exclude)

    try:
        settings = load_settings(json_file=config_json, **overrides)
    except ValidationError as e:
        missing = {
            str(err["loc"][0]) for err in e.errors() if err["type"] == "missing"
        }
        if missing & {"name", "main"}:
            click.echo(
                "'name' and 'main' parameters are required. See --help for the option list."
            )
        else:
            click.echo(f"Invalid options: {e}")
        raise SystemExit(1)

    _setup_logging(settings.verbose)

    try:
        result = bundle(settings)
    except (FileNotFoundError, ValueError) as e:
        click.echo(str(e))
        raise SystemExit(1)

    if not result.emitted:
        click.echo("Result not emitted - use verbose to see details.")
        raise SystemExit(1)

    logger.info("bundle written", out=result.out_file, files=len(result.used_files))


if __name__ == "__main__":
    main()
