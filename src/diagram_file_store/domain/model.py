"""Domain model - diagram and solution value objects.

Diagrams and solutions are transient transfer objects built per call; their
only persisted identity is the backing file. Uses Pydantic dataclasses so
malformed values fail at construction.
"""

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic.dataclasses import dataclass


DIAGRAM_FILE_EXTENSION = ".bpmn"


@dataclass(frozen=True)
class Identity:
    """Opaque caller identity threaded through the store.

    The store never inspects it; callers may pass any object in its place.
    """

    token: str = ""
    user_id: str | None = None


@dataclass
class Diagram:
    """A single BPMN diagram.

    ``uri`` is both location and identity. It equals
    ``join(root, name + DIAGRAM_FILE_EXTENSION)`` for every diagram the store
    hands out; ``id`` mirrors it when the diagram was read by name.
    """

    name: str = Field(min_length=1)
    uri: str = Field(min_length=1)
    xml: str = ""
    id: str | None = None


@dataclass
class Solution:
    """Ordered collection of diagrams opened from one root directory."""

    diagrams: list[Diagram] = Field(default_factory=list)
    name: str = ""
    uri: str = ""


@dataclass(frozen=True)
class SolutionSession:
    """Immutable handle for the currently opened solution root."""

    root: Path
    identity: Any = None

    def path_for(self, diagram_name: str) -> Path:
        """Canonical path of the diagram named ``diagram_name`` under this root."""
        return self.root / f"{diagram_name}{DIAGRAM_FILE_EXTENSION}"
