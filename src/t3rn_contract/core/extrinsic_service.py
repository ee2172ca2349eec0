"""Core extrinsic service — single-target contract operations.

Every operation is a short sequential pipeline: derive the signer,
resolve code where needed, build an :class:`ExtrinsicCall`, hand it to
the injected :class:`~t3rn_contract.core.protocols.ChainClient` and map
the outcome back to a domain value.

Guarantees
----------
* No I/O of its own; files and network are reached through protocols.
* Remote failures propagate unchanged (:class:`RemoteCallError`).
* Secrets only live inside the signer scope and are never logged.
"""

from __future__ import annotations

import logging
from pathlib import Path

from t3rn_contract.core.models import (
    AccountId,
    CodeHash,
    ExtrinsicCall,
    ExtrinsicOpts,
    HexData,
    SubmissionResult,
    decode_hex,
)
from t3rn_contract.core.protocols import ChainClient, CodeLoader, KeyDeriver
from t3rn_contract.exceptions import (
    CodeNotFoundError,
    MetadataReadError,
    RemoteCallError,
)

logger = logging.getLogger(__name__)


class ExtrinsicService:
    """Deploy, instantiate and call contracts on a single node.

    Parameters
    ----------
    client:
        Any object satisfying the :class:`ChainClient` protocol.
    keys:
        Any object satisfying the :class:`KeyDeriver` protocol.
    code_loader:
        Any object satisfying the :class:`CodeLoader` protocol.
    """

    def __init__(
        self,
        client: ChainClient,
        keys: KeyDeriver,
        code_loader: CodeLoader,
    ) -> None:
        self._client: ChainClient = client
        self._keys: KeyDeriver = keys
        self._code_loader: CodeLoader = code_loader

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def deploy(self, opts: ExtrinsicOpts, wasm_path: Path | None = None) -> CodeHash:
        """Upload contract code and return the hash the node stored it under.

        Raises
        ------
        CodeNotFoundError
            If the Wasm artifact cannot be read.
        KeyDerivationError
            If ``opts.suri`` does not yield a keypair.
        RemoteCallError
            If the node rejects the extrinsic.
        """
        code = self._code_loader.load(wasm_path)
        call = ExtrinsicCall("Contracts", "put_code", {"code": _hex(code)})
        result = self._submit(opts, call)
        event = result.find_event("Contracts", "CodeStored")
        if event is None or not event.attributes:
            raise RemoteCallError(
                "Failed to find a Contracts.CodeStored event in the extrinsic result",
            )
        return CodeHash(decode_hex(str(event.attributes[0])))

    def instantiate(
        self,
        opts: ExtrinsicOpts,
        endowment: int,
        gas_limit: int,
        code_hash: CodeHash,
        data: HexData,
    ) -> AccountId:
        """Instantiate uploaded code and return the new contract account."""
        call = ExtrinsicCall(
            "Contracts",
            "instantiate",
            {
                "endowment": endowment,
                "gas_limit": gas_limit,
                "code_hash": code_hash.to_hex(),
                "data": data.to_hex(),
            },
        )
        result = self._submit(opts, call)
        event = result.find_event("Contracts", "Instantiated")
        if event is None or not event.attributes:
            raise RemoteCallError(
                "Failed to find a Contracts.Instantiated event in the extrinsic result",
            )
        # Attributes are (deployer, contract).
        return AccountId(decode_hex(str(event.attributes[-1])))

    def call_runtime_gateway(
        self,
        opts: ExtrinsicOpts,
        *,
        requester: str,
        target: str,
        phase: int,
        value: int,
        gas_limit: int,
        data: HexData,
        wasm_path: Path | None = None,
    ) -> SubmissionResult:
        """Route an execution order through the runtime gateway.

        *requester* and *target* are secret URIs; code resolution is
        mandatory.
        """
        code = self._code_loader.load(wasm_path)
        target_id = self._keys.account_id(target, role="Target")
        requester_id = self._keys.account_id(requester, role="Requester")
        return self._submit(
            opts,
            self._multistep_call(
                "RuntimeGateway",
                requester_id,
                target_id,
                phase=phase,
                code=code,
                value=value,
                gas_limit=gas_limit,
                data=data,
            ),
        )

    def call_contracts_gateway(
        self,
        opts: ExtrinsicOpts,
        *,
        requester: str,
        target: HexData,
        phase: int,
        value: int,
        gas_limit: int,
        data: HexData,
        wasm_path: Path | None = None,
    ) -> SubmissionResult:
        """Route an execution order through the contracts gateway.

        Unlike every other operation, missing code is not fatal here:
        the call proceeds with empty code, which the gateway treats as a
        direct call to *target*.
        """
        try:
            code = self._code_loader.load(wasm_path)
        except (CodeNotFoundError, MetadataReadError) as exc:
            logger.warning(
                "Correct code not found. Proceeding with a direct contract call "
                "at target_dest (%s)",
                exc,
            )
            code = b""
        requester_id = self._keys.account_id(requester, role="Requester")
        target_id = AccountId.from_hex_data(target)
        return self._submit(
            opts,
            self._multistep_call(
                "ContractsGateway",
                requester_id,
                target_id,
                phase=phase,
                code=code,
                value=value,
                gas_limit=gas_limit,
                data=data,
            ),
        )

    def signer_account(self, suri: str) -> AccountId:
        """Return the public account *suri* signs as."""
        return self._keys.account_id(suri, role="Signer")

    def call_contract(
        self,
        opts: ExtrinsicOpts,
        *,
        target: HexData,
        value: int,
        gas_limit: int,
        data: HexData,
    ) -> SubmissionResult:
        """Call an existing contract account directly."""
        call = ExtrinsicCall(
            "Contracts",
            "call",
            {
                "dest": AccountId.from_hex_data(target).to_hex(),
                "value": value,
                "gas_limit": gas_limit,
                "data": data.to_hex(),
            },
        )
        return self._submit(opts, call)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _submit(self, opts: ExtrinsicOpts, call: ExtrinsicCall) -> SubmissionResult:
        logger.debug("Submitting %s.%s to %s", call.module, call.function, opts.url)
        with self._keys.signer(opts.suri, opts.password) as signer:
            result = self._client.submit(opts.url, signer, call)
            del signer
        logger.debug("Included: %s", result)
        return result

    @staticmethod
    def _multistep_call(
        module: str,
        requester: AccountId,
        target: AccountId,
        *,
        phase: int,
        code: bytes,
        value: int,
        gas_limit: int,
        data: HexData,
    ) -> ExtrinsicCall:
        return ExtrinsicCall(
            module,
            "multistep_call",
            {
                "requester": requester.to_hex(),
                "target_dest": target.to_hex(),
                "phase": phase,
                "code": _hex(code),
                "value": value,
                "gas_limit": gas_limit,
                "input_data": data.to_hex(),
            },
        )


def _hex(data: bytes) -> str:
    return "0x" + data.hex()
