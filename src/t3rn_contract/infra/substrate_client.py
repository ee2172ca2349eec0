"""substrate-interface backed implementation of :class:`~t3rn_contract.core.protocols.ChainClient`.

This module is the **only** place in the codebase that talks to a node.
Every substrate-interface / transport exception is caught here and
re-raised as :class:`~t3rn_contract.exceptions.RemoteCallError` with the
remote text kept verbatim — nothing raw escapes the infrastructure
boundary.
"""

from __future__ import annotations

import logging
from typing import Any

from t3rn_contract.core.models import ChainEvent, ExtrinsicCall, SubmissionResult
from t3rn_contract.exceptions import EnvironmentError, RemoteCallError

logger = logging.getLogger(__name__)


def _load_substrate_interface() -> Any:
    try:
        from substrateinterface import SubstrateInterface
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "substrate-interface is not installed. "
            "Install with: pip install 't3rn-contract[extrinsics]'",
        ) from exc
    return SubstrateInterface


class SubstrateChainClient:
    """Concrete :class:`ChainClient` speaking to a node over websockets.

    A fresh connection is opened per submission and always closed.
    Submissions block until the extrinsic is included in a block.
    """

    def __init__(self, *, wait_for_finalization: bool = False) -> None:
        self._wait_for_finalization = wait_for_finalization

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def submit(self, url: str, signer: Any, call: ExtrinsicCall) -> SubmissionResult:
        """Compose, sign and submit *call*, waiting for inclusion.

        Raises
        ------
        RemoteCallError
            If the node is unreachable, rejects the extrinsic or reports
            a dispatch error.
        """
        substrate_cls = _load_substrate_interface()

        try:
            substrate = substrate_cls(url=url)
        except Exception as exc:
            raise RemoteCallError(f"Failed to connect to {url}: {exc}") from exc
        logger.debug("Connected to %s", url)

        try:
            composed = substrate.compose_call(
                call_module=call.module,
                call_function=call.function,
                call_params=call.params,
            )
            extrinsic = substrate.create_signed_extrinsic(call=composed, keypair=signer)
            receipt = substrate.submit_extrinsic(
                extrinsic,
                wait_for_inclusion=True,
                wait_for_finalization=self._wait_for_finalization,
            )
            if not receipt.is_success:
                raise RemoteCallError(_format_dispatch_error(receipt.error_message))
            logger.debug("Included in block %s", receipt.block_hash)
            events = tuple(
                _to_chain_event(record) for record in receipt.triggered_events
            )
            return SubmissionResult(
                extrinsic_hash=receipt.extrinsic_hash,
                block_hash=receipt.block_hash,
                events=events,
            )
        except RemoteCallError:
            raise
        except Exception as exc:
            raise RemoteCallError(str(exc)) from exc
        finally:
            substrate.close()


# ---------------------------------------------------------------------------
# Receipt mapping
# ---------------------------------------------------------------------------

def _format_dispatch_error(error: Any) -> str:
    if isinstance(error, dict):
        name = error.get("name") or error.get("type") or "DispatchError"
        docs = error.get("docs")
        if isinstance(docs, list):
            docs = " ".join(str(line) for line in docs)
        return f"{name}: {docs}" if docs else str(name)
    return str(error)


def _to_chain_event(record: Any) -> ChainEvent:
    """Flatten a substrate-interface ``EventRecord`` into a :class:`ChainEvent`."""
    value: dict[str, Any] = record.value
    event = value.get("event", value)
    module = event.get("module_id") or value.get("module_id", "")
    name = event.get("event_id") or value.get("event_id", "")
    raw = event.get("attributes", value.get("attributes"))
    return ChainEvent(
        module=str(module),
        name=str(name),
        attributes=tuple(_normalise(attr) for attr in _attribute_values(raw)),
    )


def _attribute_values(raw: Any) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, dict):
        return list(raw.values())
    if isinstance(raw, (list, tuple)):
        # Older releases wrap each attribute as {"type": ..., "value": ...}.
        return [
            item["value"] if isinstance(item, dict) and "value" in item else item
            for item in raw
        ]
    return [raw]


def _normalise(value: Any) -> Any:
    """Render SS58 addresses as ``0x`` public-key hex; pass others through."""
    if isinstance(value, str) and not value.startswith("0x"):
        try:
            from substrateinterface.utils.ss58 import ss58_decode

            return "0x" + ss58_decode(value)
        except ValueError:
            return value
    return value
