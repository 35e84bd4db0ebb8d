"""Domain layer - diagram value objects and the error taxonomy.

No dependencies on infrastructure: nothing here touches the filesystem.
"""

from diagram_file_store.domain.errors import (
    BadRequestError,
    InternalServerError,
    NotFoundError,
    StoreError,
)
from diagram_file_store.domain.model import (
    DIAGRAM_FILE_EXTENSION,
    Diagram,
    Identity,
    Solution,
    SolutionSession,
)


__all__ = [
    "DIAGRAM_FILE_EXTENSION",
    "BadRequestError",
    "Diagram",
    "Identity",
    "InternalServerError",
    "NotFoundError",
    "Solution",
    "SolutionSession",
    "StoreError",
]
