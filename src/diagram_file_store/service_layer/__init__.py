"""Service layer - Business logic orchestration.

Following Cosmic Python Chapter 4:
- Service layer orchestrates use cases
- Works with domain model and the diagram store
"""

from .services import (
    delete_diagram,
    open_solution,
    rename_diagram,
    save_solution_as,
)


__all__ = [
    "delete_diagram",
    "open_solution",
    "rename_diagram",
    "save_solution_as",
]
