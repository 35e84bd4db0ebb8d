"""Filesystem-backed diagram store.

Diagrams are ``<name>.bpmn`` files directly inside the open solution root.
Deleted diagrams are moved into a separately configured trash directory.
"""

from abc import ABC, abstractmethod
from functools import partial
import logging
from pathlib import Path
from typing import Any, Self

from diagram_file_store.adapters.filesystem import AbstractFileSystem, LocalFileSystem
from diagram_file_store.config import Settings
from diagram_file_store.domain.errors import BadRequestError, InternalServerError, NotFoundError, StoreError
from diagram_file_store.domain.model import DIAGRAM_FILE_EXTENSION, Diagram, Solution, SolutionSession
from diagram_file_store.observability.context import get_trace_context, set_trace_context
from diagram_file_store.observability.tracing import create_span
from diagram_file_store.utils.concurrency import gather_all


logger = logging.getLogger(__name__)


class AbstractDiagramStore(ABC):
    """Abstract store for the diagrams of one solution."""

    @property
    @abstractmethod
    def session(self) -> SolutionSession | None:
        """Currently opened solution, if any."""
        raise NotImplementedError

    @abstractmethod
    async def open_path(self, pathspec: str | Path, identity: Any = None) -> SolutionSession:
        """Open ``pathspec`` as the solution root for all later operations."""
        raise NotImplementedError

    @abstractmethod
    async def get_diagrams(self) -> list[Diagram]:
        """List every diagram in the solution root."""
        raise NotImplementedError

    @abstractmethod
    async def get_diagram_by_name(self, name: str) -> Diagram:
        """Read a single diagram by name."""
        raise NotImplementedError

    @abstractmethod
    async def save_diagram(self, diagram: Diagram, new_path: str | Path | None = None) -> None:
        """Write a diagram back to its own location or to ``new_path``."""
        raise NotImplementedError

    @abstractmethod
    async def save_solution(self, solution: Solution, new_root: str | Path | None = None) -> None:
        """Save every diagram of a solution, optionally re-opening at ``new_root`` first."""
        raise NotImplementedError

    @abstractmethod
    async def delete_diagram(self, diagram: Diagram) -> Path:
        """Move a diagram into the trash.

        Returns:
            Path the diagram now lives at inside the trash
        """
        raise NotImplementedError

    @abstractmethod
    async def rename_diagram(self, diagram: Diagram, new_name: str) -> Diagram:
        """Rename a diagram's file and return the re-read diagram."""
        raise NotImplementedError


class DiagramFileStore(AbstractDiagramStore):
    """Diagram store backed by a directory of ``.bpmn`` files.

    Holds the open ``SolutionSession`` as its only mutable state. The trash
    directory is fixed for the lifetime of the store and is never created
    implicitly; neither are solution directories.
    """

    def __init__(
        self,
        trash_dir: Path,
        filesystem: AbstractFileSystem | None = None,
        *,
        encoding: str = "utf-8",
    ):
        """Initialize the store.

        Args:
            trash_dir: Directory receiving soft-deleted diagrams
            filesystem: Filesystem capability; the local disk when omitted
            encoding: Text encoding of diagram files
        """
        self.trash_dir = Path(trash_dir).expanduser()
        self.filesystem = filesystem or LocalFileSystem()
        self.encoding = encoding
        self._session: SolutionSession | None = None

    @classmethod
    def from_settings(cls, settings: Settings, filesystem: AbstractFileSystem | None = None) -> Self:
        return cls(settings.trash_dir, filesystem, encoding=settings.file_encoding)

    @property
    def session(self) -> SolutionSession | None:
        return self._session

    async def open_path(self, pathspec: str | Path, identity: Any = None) -> SolutionSession:
        root = Path(pathspec)
        with create_span("diagram_store.open_path", attributes={"diagram_store.root": str(root)}):
            await self._check_for_directory(root)

            session = SolutionSession(root=root, identity=identity)
            self._session = session

        ctx = get_trace_context()
        set_trace_context(ctx["trace_id"], ctx["span_id"], solution_root=str(root))
        logger.info("Opened solution root %s", root)
        return session

    async def get_diagrams(self) -> list[Diagram]:
        session = self._require_session()
        with create_span("diagram_store.get_diagrams", attributes={"diagram_store.root": str(session.root)}) as span:
            try:
                entries = await self.filesystem.list_dir(session.root)
            except FileNotFoundError as e:
                raise NotFoundError(f"'{session.root}' does not exist.", additional_information=e) from e

            diagram_files = [
                entry
                for entry in entries
                if entry.endswith(DIAGRAM_FILE_EXTENSION) and len(entry) > len(DIAGRAM_FILE_EXTENSION)
            ]
            reads = [
                partial(
                    self._read_diagram,
                    session.root / file_name,
                    file_name[: -len(DIAGRAM_FILE_EXTENSION)],
                )
                for file_name in diagram_files
            ]
            diagrams = await gather_all(reads)
            span.set_attribute("diagram_store.diagram_count", len(diagrams))

        logger.debug("Read %d diagrams from %s", len(diagrams), session.root)
        return diagrams

    async def get_diagram_by_name(self, name: str) -> Diagram:
        session = self._require_session()
        path = session.path_for(name)
        with create_span("diagram_store.get_diagram_by_name", attributes={"diagram.name": name}):
            xml = await self._read(path)

        return Diagram(name=name, uri=str(path), xml=xml, id=str(path))

    async def save_diagram(self, diagram: Diagram, new_path: str | Path | None = None) -> None:
        with create_span("diagram_store.save_diagram", attributes={"diagram.name": diagram.name}):
            if new_path is None:
                session = self._require_session()
                expected_uri = str(session.path_for(diagram.name))

                if expected_uri != diagram.uri:
                    logger.warning(
                        "Refusing to save diagram %s: uri %s differs from expected %s",
                        diagram.name,
                        diagram.uri,
                        expected_uri,
                    )
                    raise BadRequestError(
                        "Target location (URI) of diagram was changed; moving a diagram via save is not supported.",
                        additional_information={"expected_uri": expected_uri, "uri": diagram.uri},
                    )
                target = Path(diagram.uri)
            else:
                target = Path(new_path)

            await self._check_writability(target)

            try:
                await self.filesystem.write_text(target, diagram.xml, encoding=self.encoding)
            except OSError as e:
                logger.error(f"Failed to save diagram {diagram.name} to {target}: {e}", exc_info=True)
                raise InternalServerError("Unable to save diagram.", additional_information=e) from e

    async def save_solution(self, solution: Solution, new_root: str | Path | None = None) -> None:
        if new_root is not None:
            identity = self._session.identity if self._session else None
            await self.open_path(new_root, identity)

        session = self._require_session()
        with create_span(
            "diagram_store.save_solution",
            attributes={"diagram_store.root": str(session.root), "diagram_store.diagram_count": len(solution.diagrams)},
        ):
            # Completed saves stay on disk when a sibling fails
            saves = [partial(self.save_diagram, diagram) for diagram in solution.diagrams]
            await gather_all(saves, cancel_on_error=False)

        logger.info("Saved %d diagrams to %s", len(solution.diagrams), session.root)

    async def delete_diagram(self, diagram: Diagram) -> Path:
        with create_span("diagram_store.delete_diagram", attributes={"diagram.name": diagram.name}) as span:
            try:
                await self._check_for_directory(self.trash_dir)
            except StoreError as e:
                logger.warning(f"Trash folder {self.trash_dir} is unusable: {e}")
                raise BadRequestError("Trash folder is not writable.", additional_information=e) from e

            # Not atomic with the rename below: concurrent deletes of equally
            # named diagrams can race for the same slot.
            trash_path = await self._find_free_trash_path(diagram.name)
            await self._move(Path(diagram.uri), trash_path)
            span.set_attribute("diagram_store.trash_path", str(trash_path))

        logger.info("Moved diagram %s to %s", diagram.uri, trash_path)
        return trash_path

    async def rename_diagram(self, diagram: Diagram, new_name: str) -> Diagram:
        session = self._require_session()
        source = Path(diagram.uri)
        destination = session.path_for(new_name)

        with create_span(
            "diagram_store.rename_diagram",
            attributes={"diagram.name": diagram.name, "diagram.new_name": new_name},
        ):
            await self._check_writability(destination)

            if await self.filesystem.exists(destination) and not await self._is_case_change(
                diagram, new_name, source, destination
            ):
                logger.warning("Refusing to rename %s: %s already exists", diagram.uri, destination)
                raise BadRequestError(
                    f"A diagram named '{new_name}' already exists.",
                    additional_information={"uri": str(destination)},
                )

            await self._move(source, destination)
            renamed = await self.get_diagram_by_name(new_name)

        logger.info("Renamed diagram %s to %s", diagram.uri, destination)
        return renamed

    def _require_session(self) -> SolutionSession:
        if self._session is None:
            raise BadRequestError("No solution has been opened; call open_path first.")
        return self._session

    async def _check_for_directory(self, directory_path: Path) -> None:
        """Fail unless ``directory_path`` exists and is a directory."""
        if not await self.filesystem.exists(directory_path):
            raise NotFoundError(f"'{directory_path}' does not exist.")

        if not await self.filesystem.is_dir(directory_path):
            raise BadRequestError(f"'{directory_path}' is not a directory.")

    async def _check_writability(self, file_path: Path) -> None:
        await self._check_for_directory(file_path.parent)

    async def _read(self, path: Path) -> str:
        try:
            return await self.filesystem.read_text(path, encoding=self.encoding)
        except FileNotFoundError as e:
            raise NotFoundError(f"'{path}' does not exist.", additional_information=e) from e

    async def _read_diagram(self, path: Path, name: str) -> Diagram:
        xml = await self._read(path)
        return Diagram(name=name, uri=str(path), xml=xml)

    async def _find_free_trash_path(self, diagram_name: str) -> Path:
        """Return ``<name>.bpmn`` in the trash, or the lowest free ``<name>.bpmn.N``."""
        file_name = f"{diagram_name}{DIAGRAM_FILE_EXTENSION}"
        candidate = self.trash_dir / file_name

        suffix = 0
        while await self.filesystem.exists(candidate):
            suffix += 1
            candidate = self.trash_dir / f"{file_name}.{suffix}"

        return candidate

    async def _is_case_change(self, diagram: Diagram, new_name: str, source: Path, destination: Path) -> bool:
        """Whether ``destination`` is the diagram's own file under a different letter case."""
        if new_name.casefold() != diagram.name.casefold():
            return False
        return await self.filesystem.same_file(source, destination)

    async def _move(self, source: Path, destination: Path) -> None:
        try:
            await self.filesystem.rename(source, destination)
        except FileNotFoundError as e:
            raise NotFoundError(f"'{source}' does not exist.", additional_information=e) from e
        except OSError as e:
            logger.error(f"Failed to move {source} to {destination}: {e}", exc_info=True)
            raise InternalServerError("Unable to move diagram.", additional_information=e) from e
