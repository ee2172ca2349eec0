"""File-system implementation of :class:`~t3rn_contract.core.protocols.CodeLoader`."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from t3rn_contract.core.models import CrateMetadata
from t3rn_contract.exceptions import CodeNotFoundError
from t3rn_contract.infra.manifest import collect_metadata

logger = logging.getLogger(__name__)


class FileCodeLoader:
    """Read Wasm artifacts, defaulting to ``./target/<name>-pruned.wasm``.

    The manifest is only read when no explicit path is given.

    Parameters
    ----------
    metadata_source:
        Callable returning the project's :class:`CrateMetadata`.
    """

    def __init__(
        self,
        metadata_source: Callable[[], CrateMetadata] = collect_metadata,
    ) -> None:
        self._metadata_source = metadata_source

    def default_path(self) -> Path:
        """Compute the default artifact path from the manifest."""
        return self._metadata_source().default_wasm_path

    def load(self, path: Path | None = None) -> bytes:
        """Read the artifact at *path* (or the default path).

        Raises
        ------
        CodeNotFoundError
            If the file is missing or unreadable.
        MetadataReadError
            If *path* is ``None`` and the manifest cannot be read.
        """
        resolved = path if path is not None else self.default_path()
        logger.debug("Loading contract code from %s", resolved)
        try:
            return resolved.read_bytes()
        except OSError as exc:
            raise CodeNotFoundError(
                resolved,
                display=display_path(resolved),
                hint=(
                    "Build the contract first or pass the path to the .wasm file."
                    if path is None
                    else None
                ),
            ) from exc


def display_path(path: Path) -> str:
    """Render *path* as ``./relative`` when it lies below the working directory."""
    if not path.is_absolute():
        return str(path)
    try:
        relative = path.relative_to(Path.cwd())
    except ValueError:
        return str(path)
    return f"./{relative.as_posix()}"
