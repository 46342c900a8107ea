from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class LineRole(str, Enum):
    PLAIN = "plain"
    RELATIVE_IMPORT = "relative_import"  # import of a bundled file, rewritten at parse time
    EXTERNAL_IMPORT = "external_import"  # import of a bare module name
    MODULE_DECLARATION = "module_declaration"  # declare module "name" {


@dataclass(eq=False)
class ModLine:
    """
    One emitted line. `original` is never touched once parsed; renaming
    passes only ever set `modified`.
    """

    original: str
    modified: Optional[str] = None
    role: LineRole = LineRole.PLAIN

    @property
    def text(self) -> str:
        return self.modified if self.modified is not None else self.original


@dataclass(eq=False)
class ParseRecord:
    file: str  # absolute path, unique per run
    name: str  # module name derived from the path relative to base_dir
    exp: str  # name the contents are exported under in the bundle
    indent: str  # indentation unit detected in the source
    refs: List[str] = field(default_factory=list)  # triple-slash references
    external_imports: List[str] = field(default_factory=list)  # "events"
    relative_imports: List[str] = field(default_factory=list)  # "./foo" resolved
    exports: List[str] = field(default_factory=list)  # declare module "x"
    lines: List[ModLine] = field(default_factory=list)
    # non-owning views into `lines` for the renaming pass
    import_line_refs: List[ModLine] = field(default_factory=list)
    declaration_refs: List[ModLine] = field(default_factory=list)
    file_exists: bool = True


@dataclass
class InclusionResult:
    used: List[ParseRecord] = field(default_factory=list)
    excluded: List[str] = field(default_factory=list)
    # files (or bare names when no declaring file is known) left out of the bundle
    external_dependencies: List[str] = field(default_factory=list)
    included_not_found: List[str] = field(default_factory=list)
    not_included_not_found: List[str] = field(default_factory=list)

    def is_used(self, file: str) -> bool:
        return any(p.file == file for p in self.used)


class BundleResult(BaseModel):
    """Outcome of a bundle run."""

    emitted: bool = Field(..., description="True when the output file was written.")
    out_file: str = Field(..., description="Absolute path of the output file.")
    content: Optional[str] = Field(
        default=None, description="The bundled declaration text."
    )
    used_files: List[str] = Field(
        default_factory=list, description="Files included in the bundle, in output order."
    )
    excluded_files: List[str] = Field(
        default_factory=list, description="Files left out because of the exclusion filter."
    )
    external_dependencies: List[str] = Field(
        default_factory=list,
        description="External typings the bundle depends on but does not include.",
    )
    included_not_found: List[str] = Field(default_factory=list)
    not_included_not_found: List[str] = Field(default_factory=list)
