"""The closed set of commands understood by t3rn-contract.

Each command is a frozen dataclass holding already-validated values; the
CLI layer builds exactly one of them per invocation and hands it to the
dispatcher.  :data:`Command` is the union of every variant and
:data:`EXTRINSIC_COMMANDS` the subset that only exists when the
extrinsics capability is enabled.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from t3rn_contract.core.models import (
    CodeHash,
    ExtrinsicOpts,
    HexData,
    UnstableFlags,
    Verbosity,
)

DEFAULT_URL: str = "ws://localhost:9944"
DEFAULT_GAS_LIMIT: int = 500_000_000
DEFAULT_CONTRACT_GAS_LIMIT: int = 3_875_000_000


# ---------------------------------------------------------------------------
# Toolchain commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class NewCommand:
    """Set up and create a new smart contract project."""

    name: str
    target_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildCommand:
    """Compile the smart contract."""

    verbosity: Verbosity | None = None
    unstable_flags: UnstableFlags = UnstableFlags()


@dataclass(frozen=True, slots=True)
class ComposableBuildCommand:
    """Compile every composable contract named in the schedule."""

    verbosity: Verbosity | None = None
    unstable_flags: UnstableFlags = UnstableFlags()


@dataclass(frozen=True, slots=True)
class GenerateMetadataCommand:
    """Generate contract metadata artifacts."""

    verbosity: Verbosity | None = None
    unstable_flags: UnstableFlags = UnstableFlags()


@dataclass(frozen=True, slots=True)
class TestCommand:
    """Test the smart contract off-chain."""

    __test__ = False  # not a pytest test class


# ---------------------------------------------------------------------------
# Extrinsic commands
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class DeployCommand:
    """Upload the smart contract code to the chain."""

    extrinsic_opts: ExtrinsicOpts
    wasm_path: Path | None = None


@dataclass(frozen=True, slots=True)
class ComposableDeployCommand:
    """Upload every scheduled component to its appointed node."""

    suri: str


@dataclass(frozen=True, slots=True)
class InstantiateCommand:
    """Instantiate code already uploaded to the chain."""

    extrinsic_opts: ExtrinsicOpts
    code_hash: CodeHash
    data: HexData
    endowment: int = 0
    gas_limit: int = DEFAULT_GAS_LIMIT


@dataclass(frozen=True, slots=True)
class CallRuntimeGatewayCommand:
    """Execute a contract through the runtime gateway."""

    extrinsic_opts: ExtrinsicOpts
    target: str
    requester: str
    phase: int = 0
    value: int = 0
    gas_limit: int = DEFAULT_GAS_LIMIT
    wasm_path: Path | None = None
    data: HexData = HexData(b"\x00")


@dataclass(frozen=True, slots=True)
class CallContractsGatewayCommand:
    """Execute a contract through the contracts gateway."""

    extrinsic_opts: ExtrinsicOpts
    requester: str
    target: HexData = HexData(b"\x00")
    phase: int = 0
    value: int = 0
    gas_limit: int = DEFAULT_CONTRACT_GAS_LIMIT
    wasm_path: Path | None = None
    data: HexData = HexData(b"\x00")


@dataclass(frozen=True, slots=True)
class CallContractCommand:
    """Call a deployed contract directly through the contracts pallet."""

    extrinsic_opts: ExtrinsicOpts
    target: HexData = HexData(b"\x00")
    value: int = 0
    gas_limit: int = DEFAULT_CONTRACT_GAS_LIMIT
    data: HexData = HexData(b"\x00")


Command = Union[
    NewCommand,
    BuildCommand,
    ComposableBuildCommand,
    GenerateMetadataCommand,
    TestCommand,
    DeployCommand,
    ComposableDeployCommand,
    InstantiateCommand,
    CallRuntimeGatewayCommand,
    CallContractsGatewayCommand,
    CallContractCommand,
]

EXTRINSIC_COMMANDS: tuple[type, ...] = (
    DeployCommand,
    ComposableDeployCommand,
    InstantiateCommand,
    CallRuntimeGatewayCommand,
    CallContractsGatewayCommand,
    CallContractCommand,
)
