from __future__ import annotations

from pathlib import Path

import pytest

from sightline import ingest
from sightline.exceptions import NeverThrown
from sightline.ingest.adapter_contract import LanguageAdapter
from sightline.ingest.python_adapter import PythonAdapter
from sightline.ingest.registry import (
    adapter_for_extension,
    adapter_for_language,
    adapter_for_path,
    registered_languages,
)


def test_adapter_for_path_uses_explicit_language_id(tmp_path: Path) -> None:
    adapter = adapter_for_path(tmp_path / "module.txt", language_id="Python")
    assert isinstance(adapter, PythonAdapter)


def test_adapter_for_path_prefers_extension_and_falls_back_to_default(tmp_path: Path) -> None:
    assert isinstance(adapter_for_path(tmp_path / "module.PY"), PythonAdapter)
    assert isinstance(adapter_for_path(tmp_path / "Makefile"), PythonAdapter)
    assert isinstance(adapter_for_path(tmp_path / "notes.md"), PythonAdapter)
    assert adapter_for_extension(".py") is adapter_for_language("python")
    assert adapter_for_extension(".rs") is None


def test_unknown_language_is_an_invariant_violation(tmp_path: Path) -> None:
    with pytest.raises(NeverThrown) as exc_info:
        adapter_for_path(tmp_path / "x.py", language_id="cobol")
    assert exc_info.value.env_payload["registered"] == "python"


def test_package_exports_the_registry() -> None:
    assert registered_languages() == ["python"]
    adapter = ingest.adapter_for_path(Path("module.py"))
    assert isinstance(adapter, LanguageAdapter)
    assert adapter.language_id == "python"
