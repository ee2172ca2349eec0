"""Domain models for t3rn-contract.

All models are **frozen** dataclasses — immutable value objects built
once per invocation from CLI input (and, for composable deploy, from the
project manifest).  They carry zero I/O and zero dependencies on
external packages.
"""

from __future__ import annotations

import binascii
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from t3rn_contract.exceptions import (
    InvalidAccountIdError,
    InvalidCodeHashLengthError,
    InvalidHexInputError,
)

CODE_HASH_LENGTH: int = 32
ACCOUNT_ID_LENGTH: int = 32


def decode_hex(value: str) -> bytes:
    """Decode *value* as hex, accepting an optional ``0x`` prefix.

    Raises
    ------
    InvalidHexInputError
        On odd length or non-hex characters.
    """
    stripped = value.strip()
    if stripped[:2].lower() == "0x":
        stripped = stripped[2:]
    try:
        return binascii.unhexlify(stripped)
    except (binascii.Error, ValueError) as exc:
        raise InvalidHexInputError(
            f"Invalid hex input {value!r}: {exc}",
            hint="Expected an even number of characters from 0-9 and a-f.",
        ) from exc


# ---------------------------------------------------------------------------
# Byte-level values
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HexData:
    """Opaque bytes supplied on the command line as a hex string."""

    data: bytes = b""

    @classmethod
    def from_hex(cls, value: str) -> HexData:
        return cls(decode_hex(value))

    def to_hex(self) -> str:
        return "0x" + self.data.hex()

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True, slots=True)
class CodeHash:
    """Fixed 32-byte identifier of code stored on chain."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != CODE_HASH_LENGTH:
            raise InvalidCodeHashLengthError(len(self.value))

    @classmethod
    def from_hex(cls, value: str) -> CodeHash:
        return cls(decode_hex(value))

    def to_hex(self) -> str:
        return "0x" + self.value.hex()

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True, slots=True)
class AccountId:
    """32-byte account identifier derived from an sr25519 public key."""

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != ACCOUNT_ID_LENGTH:
            raise InvalidAccountIdError(
                f"Account id should be {ACCOUNT_ID_LENGTH} bytes in length, "
                f"got {len(self.value)}",
            )

    @classmethod
    def from_hex_data(cls, data: HexData) -> AccountId:
        return cls(data.data)

    def to_hex(self) -> str:
        return "0x" + self.value.hex()

    def __str__(self) -> str:
        return self.to_hex()


# ---------------------------------------------------------------------------
# Flags
# ---------------------------------------------------------------------------

class Verbosity(enum.Enum):
    """Validated output verbosity for toolchain commands."""

    QUIET = "quiet"
    VERBOSE = "verbose"


@dataclass(frozen=True, slots=True)
class UnstableFlags:
    """Validated ``-Z`` options, one boolean per known option."""

    original_manifest: bool = False
    """Build against the manifest as written, without optimisation overrides."""


# ---------------------------------------------------------------------------
# Extrinsic options
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExtrinsicOpts:
    """Endpoint and signing identity for one extrinsic submission."""

    url: str
    """Websocket URL of a Substrate node."""

    suri: str = field(repr=False)
    """Secret key URI of the signing account."""

    password: str | None = field(default=None, repr=False)
    """Optional password for the secret key."""


# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DeployTarget:
    """One component of a composable schedule and the node it goes to."""

    compose: str
    url: str


@dataclass(frozen=True, slots=True)
class ComposableSchedule:
    """Composable deployment schedule declared in the manifest.

    ``deploy`` is ``None`` when the manifest section has no deploy key.
    """

    deploy: tuple[DeployTarget, ...] | None = None


@dataclass(frozen=True, slots=True)
class CrateMetadata:
    """The parts of ``Cargo.toml`` this tool reads."""

    package_name: str
    manifest_path: Path
    composable_schedule: ComposableSchedule | None = None

    @property
    def root(self) -> Path:
        return self.manifest_path.parent

    @property
    def target_directory(self) -> Path:
        return self.root / "target"

    @property
    def default_wasm_path(self) -> Path:
        return self.target_directory / f"{self.package_name}-pruned.wasm"

    @property
    def composables_directory(self) -> Path:
        return self.target_directory / "composables"

    def composable_wasm_path(self, compose: str) -> Path:
        """Location of the built artifact for composable component *compose*."""
        return self.composables_directory / f"{compose}-pruned.wasm"


# ---------------------------------------------------------------------------
# Chain interaction
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExtrinsicCall:
    """A typed call payload, ready to be composed by the chain client."""

    module: str
    function: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ChainEvent:
    """An event triggered by a submitted extrinsic."""

    module: str
    name: str
    attributes: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """Outcome of a successfully included extrinsic."""

    extrinsic_hash: str | None
    block_hash: str | None
    events: tuple[ChainEvent, ...] = ()

    def find_event(self, module: str, name: str) -> ChainEvent | None:
        """Return the first event matching *module* and *name*."""
        return next(
            (
                event
                for event in self.events
                if event.module == module and event.name == name
            ),
            None,
        )

    def __str__(self) -> str:
        names = ", ".join(f"{e.module}.{e.name}" for e in self.events)
        return (
            f"extrinsic {self.extrinsic_hash} in block {self.block_hash}"
            f" [{names}]"
        )


@dataclass(frozen=True, slots=True)
class ComposableDeployReport:
    """Ordered per-target results of a composable deploy.

    Only the signer's public account is kept, never its secret URI.
    """

    account: AccountId
    deployed: tuple[tuple[DeployTarget, CodeHash], ...] = ()

    @property
    def message(self) -> str:
        return f"All components successfully deployed for '{self.account}'"
