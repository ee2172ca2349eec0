"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from t3rn_contract.core.composable_service import ComposableDeployService
from t3rn_contract.core.extrinsic_service import ExtrinsicService
from t3rn_contract.core.flags import validate_unstable_options, validate_verbosity
from t3rn_contract.core.models import (
    AccountId,
    CodeHash,
    ComposableSchedule,
    CrateMetadata,
    DeployTarget,
    ExtrinsicOpts,
    HexData,
    UnstableFlags,
    Verbosity,
)
from t3rn_contract.core.protocols import ChainClient, CodeLoader, KeyDeriver, Toolchain

__all__: list[str] = [
    "AccountId",
    "ChainClient",
    "CodeHash",
    "CodeLoader",
    "ComposableDeployService",
    "ComposableSchedule",
    "CrateMetadata",
    "DeployTarget",
    "ExtrinsicOpts",
    "ExtrinsicService",
    "HexData",
    "KeyDeriver",
    "Toolchain",
    "UnstableFlags",
    "Verbosity",
    "validate_unstable_options",
    "validate_verbosity",
]
