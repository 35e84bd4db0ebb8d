"""Adapters layer - store and filesystem implementations.

Following Cosmic Python Chapter 2: Repository Pattern
The store hides where diagrams live; the filesystem capability hides how the
disk is reached.
"""

from .diagram_store import AbstractDiagramStore, DiagramFileStore
from .filesystem import AbstractFileSystem, FakeFileSystem, LocalFileSystem


__all__ = [
    "AbstractDiagramStore",
    "AbstractFileSystem",
    "DiagramFileStore",
    "FakeFileSystem",
    "LocalFileSystem",
]
