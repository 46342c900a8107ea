import os
import re
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    SettingsConfigDict,
)

from dtsbundle.consts import (
    DEFAULT_INDENT,
    DEFAULT_PREFIX,
    DEFAULT_SEPARATOR,
    ENV_PREFIX,
)


class NewlineStyle(str, Enum):
    """Newline styles accepted on the command line."""

    UNIX = "unix"
    WINDOWS = "windows"
    CURRENT_OS_DEFAULT = "currentOsDefault"

    def to_newline(self) -> str:
        if self is NewlineStyle.UNIX:
            return "\n"
        if self is NewlineStyle.WINDOWS:
            return "\r\n"
        return os.linesep


class BundleSettings(BaseSettings):
    """Options for a single bundle run."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    main: str = Field(
        ...,
        min_length=1,
        description="Path to the entry-point declaration file (e.g. build/index.d.ts).",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Name of the bundled root module, usually the package name.",
    )
    base_dir: Optional[str] = Field(
        default=None,
        description=(
            "Base directory used for discovering source typings. "
            "Defaults to the directory of `main`."
        ),
    )
    out: Optional[str] = Field(
        default=None,
        description=(
            "Path of the output file, relative to `base_dir` unless absolute. "
            'A leading "~/" makes it relative to the current working directory. '
            "Defaults to `<name>.d.ts`."
        ),
    )
    newline: str = Field(
        default=os.linesep, description="Newline string used in the output file."
    )
    indent: str = Field(
        default=DEFAULT_INDENT, description="Indentation unit used in the output file."
    )
    prefix: str = Field(
        default=DEFAULT_PREFIX, description="Prefix for rewritten module names."
    )
    separator: str = Field(
        default=DEFAULT_SEPARATOR,
        description='Separator for rewritten module "path" names.',
    )
    externals: bool = Field(
        default=False,
        description=(
            "If True, typings outside of `base_dir` (e.g. node.d.ts) that are "
            "imported by name are included in the bundle."
        ),
    )
    exclude: Optional[Any] = Field(
        default=None,
        description=(
            "Filter excluding typings from the bundle: a callable, a regular "
            "expression, or a list of gitwildmatch patterns. Matched against the "
            "path relative to `base_dir`."
        ),
    )
    remove_source: bool = Field(
        default=False,
        description="If True, delete all source typings (<base_dir>/**/*.d.ts) after bundling.",
    )
    reference_externals: bool = Field(
        default=False,
        description=(
            'If True, external dependencies are listed as <reference path="..." /> '
            "tags instead of comments."
        ),
    )
    verbose: bool = Field(
        default=False,
        description="Log detailed info about all references and includes/excludes.",
    )
    emit_on_included_file_not_found: bool = Field(
        default=True,
        description="If False, no output is written when an included file was not found.",
    )
    emit_on_no_included_file_not_found: bool = Field(
        default=True,
        description=(
            "If False, no output is written when a referenced file that is not "
            "included was not found."
        ),
    )
    output_as_module_folder: bool = Field(
        default=False,
        description=(
            "If True, source typings are emitted without a wrapping `declare module` "
            "block and imports of bundled files are removed."
        ),
    )
    header_path: Optional[str] = Field(
        default=None,
        description=(
            'Path to a file whose content replaces the generated header. "none" '
            "removes the header."
        ),
    )
    transform_module_body: Optional[Callable[[str, str], str]] = Field(
        default=None,
        exclude=True,
        description=(
            "Callable receiving (body, exported_name) of every generated module "
            "block and returning the body to emit."
        ),
    )

    @field_validator("separator")
    @classmethod
    def _check_separator(cls, value: str) -> str:
        if not value:
            raise ValueError('option "separator" must have non-zero length')
        return value

    @field_validator("exclude")
    @classmethod
    def _check_exclude(cls, value: Any) -> Any:
        if value is None or callable(value) or isinstance(value, (str, re.Pattern)):
            return value
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return list(value)
        raise ValueError(
            'option "exclude" must be a callable, a regular expression or a list of patterns'
        )


def load_settings(
    env_prefix: Optional[str] = None,
    json_file: Optional[str] = None,
    **kwargs,
) -> BundleSettings:
    """
    Build BundleSettings from an optional JSON config file, environment
    variables and explicit keyword overrides (highest priority).
    """
    config_dict = SettingsConfigDict(
        env_prefix=env_prefix or ENV_PREFIX,
        json_file=json_file,
        extra="ignore",
    )

    class Settings(BundleSettings):
        model_config = config_dict

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls,
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ):
            return (
                init_settings,
                env_settings,
                JsonConfigSettingsSource(settings_cls),
            )

    return Settings(**kwargs)
