"""Infrastructure layer — external system integration.

This layer wraps all interaction with substrate-interface, the file
system (manifest and Wasm artifacts) and cargo.  Every raw third-party
exception must be caught here and re-raised as a
:class:`~t3rn_contract.exceptions.ContractToolError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from t3rn_contract.infra.capabilities import extrinsics_enabled
from t3rn_contract.infra.cargo_toolchain import (
    CargoStatus,
    CargoToolchain,
    detect_cargo,
    require_cargo,
)
from t3rn_contract.infra.code_loader import FileCodeLoader
from t3rn_contract.infra.manifest import collect_metadata
from t3rn_contract.infra.signer import SubstrateKeyDeriver, signer_scope
from t3rn_contract.infra.substrate_client import SubstrateChainClient

__all__: list[str] = [
    "CargoStatus",
    "CargoToolchain",
    "FileCodeLoader",
    "SubstrateChainClient",
    "SubstrateKeyDeriver",
    "collect_metadata",
    "detect_cargo",
    "extrinsics_enabled",
    "require_cargo",
    "signer_scope",
]
