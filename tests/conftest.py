import shutil
from pathlib import Path
from typing import Callable, Dict

import pytest

from dtsbundle.context import BundleContext, create_context
from dtsbundle.settings import BundleSettings

SAMPLES_DIR = Path(__file__).parent / "samples"


@pytest.fixture
def sample(tmp_path: Path) -> Callable[[str], Path]:
    """Copy a sample tree into tmp_path and return its root."""

    def _copy(name: str) -> Path:
        dst = tmp_path / name
        shutil.copytree(SAMPLES_DIR / name, dst)
        return dst

    return _copy


@pytest.fixture
def tree(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    """Write {relative path: content} files under tmp_path and return it."""

    def _write(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def make_ctx() -> Callable[..., BundleContext]:
    """Build a BundleContext for an entry file, with unix newlines by default."""

    def _make(main: Path, name: str = "mylib", **options) -> BundleContext:
        options.setdefault("newline", "\n")
        return create_context(BundleSettings(main=str(main), name=name, **options))

    return _make
