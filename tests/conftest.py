from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from sightline.ingest.python_adapter import PythonAdapter
from tests.artifact_builders import Program


@pytest.fixture
def program() -> Program:
    return Program()


@pytest.fixture
def parse_python():
    def _parse(source: str, *, module_name: str = "svc"):
        return PythonAdapter().parse_source(source, module_name=module_name)

    return _parse
