"""Conftest for unit tests - automatically mark all tests as unit tests."""

from pathlib import Path

import pytest

from diagram_file_store.adapters.diagram_store import DiagramFileStore


def pytest_collection_modifyitems(config, items):
    """Automatically mark all tests in the unit directory as unit tests."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def solution_dir(tmp_path: Path) -> Path:
    """Empty solution root on disk."""
    path = tmp_path / "solution"
    path.mkdir()
    return path


@pytest.fixture
def trash_dir(tmp_path: Path) -> Path:
    """Empty trash directory on disk."""
    path = tmp_path / "trash"
    path.mkdir()
    return path


@pytest.fixture
def store(trash_dir: Path) -> DiagramFileStore:
    """Store on the local disk with an existing trash directory."""
    return DiagramFileStore(trash_dir)


@pytest.fixture
def write_diagram():
    """Factory creating ``<name>.bpmn`` files on disk."""

    def _write(directory: Path, name: str, xml: str) -> Path:
        path = directory / f"{name}.bpmn"
        path.write_text(xml, encoding="utf-8")
        return path

    return _write
