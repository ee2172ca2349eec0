"""Custom exception hierarchy for t3rn-contract.

All exceptions that cross layer boundaries must inherit from
:class:`ContractToolError`.  Raw third-party exceptions (e.g. from
substrate-interface or the cargo subprocess) must NEVER propagate beyond
the infrastructure layer — they must be caught and re-raised as a typed
subclass defined here.

Hierarchy
---------
ContractToolError
├── ConflictingFlagsError
├── UnknownOptionError
├── KeyDerivationError
├── CodeNotFoundError
├── MetadataReadError
├── NothingToDeployError
├── RemoteCallError
├── InvalidHexInputError
├── InvalidCodeHashLengthError
├── InvalidAccountIdError
├── InvalidURLError
├── CommandUnimplementedError
├── BuildError
├── ProjectExistsError
└── EnvironmentError
    └── ToolchainNotFoundError
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class ContractToolError(Exception):
    """Base exception for all t3rn-contract errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance appended to the ERROR line."""


# --- Flag validation -------------------------------------------------------

class ConflictingFlagsError(ContractToolError):
    """Raised when mutually exclusive flags are passed together."""


class UnknownOptionError(ContractToolError):
    """Raised when ``-Z`` names an option outside the allowlist."""

    def __init__(self, options: Sequence[str], *, hint: str | None = None) -> None:
        self.options: tuple[str, ...] = tuple(options)
        listed = ", ".join(repr(option) for option in self.options)
        super().__init__(f"Unknown unstable-options [{listed}]", hint=hint)


# --- Argument parsing ------------------------------------------------------

class InvalidHexInputError(ContractToolError):
    """Raised when a hex-encoded argument does not decode."""


class InvalidCodeHashLengthError(ContractToolError):
    """Raised when a decoded code hash is not exactly 32 bytes."""

    def __init__(self, actual: int, *, expected: int = 32) -> None:
        self.actual: int = actual
        self.expected: int = expected
        super().__init__(
            f"Code hash should be {expected} bytes in length, got {actual}",
        )


class InvalidAccountIdError(ContractToolError):
    """Raised when raw bytes cannot be interpreted as an account id."""


class InvalidURLError(ContractToolError):
    """Raised when an endpoint URL fails validation."""


# --- Signing ---------------------------------------------------------------

class KeyDerivationError(ContractToolError):
    """Raised when a keypair cannot be derived from a secret URI.

    The message never contains the secret itself.
    """


# --- Artifacts / project metadata -------------------------------------------

class CodeNotFoundError(ContractToolError):
    """Raised when the Wasm code artifact cannot be read."""

    def __init__(
        self, path: Path, *, display: str | None = None, hint: str | None = None,
    ) -> None:
        self.path: Path = path
        self.display: str = display if display is not None else str(path)
        super().__init__(
            f"Failed to read contract code from {self.display}", hint=hint,
        )


class MetadataReadError(ContractToolError):
    """Raised when the project manifest is missing or malformed."""


class NothingToDeployError(ContractToolError):
    """Raised when the composable schedule has no deploy entries."""


# --- Remote ----------------------------------------------------------------

class RemoteCallError(ContractToolError):
    """Raised when the node rejects or fails an extrinsic.

    The remote error text is carried verbatim.
    """


# --- Commands / toolchain --------------------------------------------------

class CommandUnimplementedError(ContractToolError):
    """Raised by commands that exist on the CLI but do nothing yet."""


class BuildError(ContractToolError):
    """Raised when a cargo invocation fails or produces no artifact."""


class ProjectExistsError(ContractToolError):
    """Raised when ``new`` would overwrite an existing directory."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(ContractToolError):
    """Raised when a required runtime dependency is not available."""


class ToolchainNotFoundError(EnvironmentError):
    """Raised when cargo cannot be located."""
