"""t3rn-contract — build, deploy and call Wasm smart contracts.

Orchestrates contract extrinsics against Substrate nodes with a strict
layered architecture.
"""

from t3rn_contract.version import __version__

__all__: list[str] = ["__version__"]
