"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path
from typing import List

import pytest
import yaml

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from schemagate.lib.table_schema import TableSchema  # noqa: E402
from tests.helpers import create_schema  # noqa: E402


@pytest.fixture
def base_schemas() -> List[TableSchema]:
    """Three tables: one family, three families, none."""
    return [
        create_schema("table1", "table1_1"),
        create_schema("table2", "table2_1", "table2_2", "table2_3"),
        create_schema("table3"),
    ]


@pytest.fixture(autouse=True)
def clean_schemagate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep SCHEMAGATE_* variables and stray .env files out of tests."""
    for key in list(os.environ):
        if key.startswith("SCHEMAGATE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_definition(tmp_path: Path):
    """Write a definition document to a YAML file and return its path."""

    def _write(data, name: str = "definition.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write
