"""Service layer - Use case orchestration.

Following Cosmic Python Chapter 4: Service Layer
- Orchestrates solution-level use cases
- Works with the domain model through the diagram store
"""

import logging
from pathlib import Path
from typing import Any

from diagram_file_store.adapters.diagram_store import AbstractDiagramStore
from diagram_file_store.domain import Diagram, Solution


logger = logging.getLogger(__name__)


async def open_solution(
    store: AbstractDiagramStore,
    path: str | Path,
    identity: Any = None,
) -> Solution:
    """Open a solution root and load all of its diagrams.

    Args:
        store: Store to open the solution in
        path: Solution root directory
        identity: Caller identity threaded through the store

    Returns:
        Solution named after the root directory
    """
    session = await store.open_path(path, identity)
    diagrams = await store.get_diagrams()

    return Solution(diagrams=diagrams, name=session.root.name, uri=str(session.root))


async def save_solution_as(store: AbstractDiagramStore, solution: Solution, path: str | Path) -> Solution:
    """Save a solution into another root directory.

    Each diagram is re-pointed at the new root before saving, since the store
    refuses to save a diagram away from its canonical location.
    """
    identity = store.session.identity if store.session else None
    session = await store.open_path(path, identity)

    relocated = [
        Diagram(name=diagram.name, uri=str(session.path_for(diagram.name)), xml=diagram.xml)
        for diagram in solution.diagrams
    ]
    target = Solution(diagrams=relocated, name=session.root.name, uri=str(session.root))
    await store.save_solution(target)

    logger.info("Saved solution %s as %s", solution.name or solution.uri, session.root)
    return target


async def rename_diagram(store: AbstractDiagramStore, diagram: Diagram, new_name: str) -> Diagram:
    """Rename a diagram, returning it as re-read from disk."""
    if new_name == diagram.name:
        return diagram

    renamed = await store.rename_diagram(diagram, new_name)
    logger.info("Diagram %s renamed to %s", diagram.name, renamed.name)
    return renamed


async def delete_diagram(store: AbstractDiagramStore, diagram: Diagram) -> Path:
    """Soft-delete a diagram into the store's trash."""
    trash_path = await store.delete_diagram(diagram)
    logger.info("Diagram %s moved to trash as %s", diagram.name, trash_path.name)
    return trash_path
