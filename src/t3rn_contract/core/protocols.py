"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Protocol

from t3rn_contract.core.models import (
    AccountId,
    CrateMetadata,
    ExtrinsicCall,
    SubmissionResult,
    UnstableFlags,
    Verbosity,
)


class KeyDeriver(Protocol):
    """Contract for turning secret URIs into signers and account ids."""

    def signer(
        self, suri: str, password: str | None = None,
    ) -> AbstractContextManager[Any]:
        """Return a context manager yielding a signer for *suri*.

        The signer is only valid inside the ``with`` block; callers must
        not keep a reference to it past the block.

        Raises
        ------
        KeyDerivationError
            When the URI (or password) does not yield a keypair.
        """
        ...  # pragma: no cover

    def account_id(self, secret: str, *, role: str) -> AccountId:
        """Derive the :class:`AccountId` controlled by *secret*.

        *role* names the account in error messages (e.g. ``"Requester"``).
        """
        ...  # pragma: no cover


class CodeLoader(Protocol):
    """Contract for reading compiled Wasm artifacts."""

    def load(self, path: Path | None = None) -> bytes:
        """Read *path*, or the project's default artifact when ``None``.

        Raises
        ------
        CodeNotFoundError
            When the file is missing or unreadable.
        MetadataReadError
            When the default path cannot be computed.
        """
        ...  # pragma: no cover


class ChainClient(Protocol):
    """Contract for extrinsic submission backends.

    Implementations must wait for inclusion and map every
    backend-specific failure to :class:`RemoteCallError`, keeping the
    node's error text verbatim.
    """

    def submit(self, url: str, signer: Any, call: ExtrinsicCall) -> SubmissionResult:
        ...  # pragma: no cover


class Toolchain(Protocol):
    """Contract for the compiler/scaffolding collaborators."""

    def new_project(self, name: str, target_dir: Path | None = None) -> Path:
        ...  # pragma: no cover

    def build(
        self,
        metadata: CrateMetadata,
        verbosity: Verbosity | None,
        unstable_flags: UnstableFlags,
    ) -> Path:
        ...  # pragma: no cover

    def composable_build(
        self,
        metadata: CrateMetadata,
        verbosity: Verbosity | None,
        unstable_flags: UnstableFlags,
    ) -> Path:
        ...  # pragma: no cover

    def generate_metadata(
        self,
        metadata: CrateMetadata,
        verbosity: Verbosity | None,
        unstable_flags: UnstableFlags,
    ) -> Path:
        ...  # pragma: no cover
