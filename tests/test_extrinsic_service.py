"""Tests for the single-target extrinsic service (core/extrinsic_service.py).

The chain client, key deriver and code loader are all mocks; each test
inspects the :class:`ExtrinsicCall` handed to ``client.submit``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from conftest import ALICE_PUBLIC_HEX, BOB_PUBLIC_HEX, code_stored, fake_keys, submission
from t3rn_contract.core.extrinsic_service import ExtrinsicService
from t3rn_contract.core.models import (
    AccountId,
    ChainEvent,
    CodeHash,
    ExtrinsicCall,
    ExtrinsicOpts,
    HexData,
)
from t3rn_contract.exceptions import (
    CodeNotFoundError,
    InvalidAccountIdError,
    KeyDerivationError,
    MetadataReadError,
    RemoteCallError,
)

OPTS = ExtrinsicOpts(url="ws://localhost:9944", suri="//Alice")
HASH_HEX = "0x" + "ab" * 32


def _service(
    *,
    code: bytes | Exception = b"\x00asm",
    result=None,
    keys: MagicMock | None = None,
) -> tuple[ExtrinsicService, MagicMock, MagicMock, MagicMock]:
    client = MagicMock()
    client.submit.return_value = result if result is not None else submission()
    loader = MagicMock()
    if isinstance(code, Exception):
        loader.load.side_effect = code
    else:
        loader.load.return_value = code
    keys = keys or fake_keys()
    return ExtrinsicService(client, keys, loader), client, keys, loader


def _submitted_call(client: MagicMock) -> ExtrinsicCall:
    client.submit.assert_called_once()
    return client.submit.call_args.args[2]


# ---------------------------------------------------------------------------
# deploy
# ---------------------------------------------------------------------------

class TestDeploy:
    def test_returns_hash_from_code_stored_event(self) -> None:
        service, client, _, _ = _service(result=code_stored(HASH_HEX))
        code_hash = service.deploy(OPTS)
        assert code_hash == CodeHash(b"\xab" * 32)

    def test_uploads_loaded_code(self) -> None:
        service, client, _, loader = _service(result=code_stored(HASH_HEX))
        service.deploy(OPTS, Path("x.wasm"))
        loader.load.assert_called_once_with(Path("x.wasm"))
        call = _submitted_call(client)
        assert (call.module, call.function) == ("Contracts", "put_code")
        assert call.params == {"code": "0x" + b"\x00asm".hex()}

    def test_submits_to_requested_url_with_scoped_signer(self) -> None:
        service, client, keys, _ = _service(result=code_stored(HASH_HEX))
        service.deploy(OPTS)
        keys.signer.assert_called_once_with("//Alice", None)
        url, signer, _ = client.submit.call_args.args
        assert url == "ws://localhost:9944"
        assert signer == "signer"
        keys.signer.return_value.__exit__.assert_called_once()

    def test_missing_code_is_fatal_and_nothing_is_submitted(self) -> None:
        err = CodeNotFoundError(Path("target/flipper-pruned.wasm"))
        service, client, _, _ = _service(code=err)
        with pytest.raises(CodeNotFoundError):
            service.deploy(OPTS)
        client.submit.assert_not_called()

    def test_missing_event_is_remote_error(self) -> None:
        service, _, _, _ = _service(result=submission())
        with pytest.raises(RemoteCallError, match="CodeStored"):
            service.deploy(OPTS)

    def test_remote_error_propagates_verbatim(self) -> None:
        service, client, _, _ = _service()
        client.submit.side_effect = RemoteCallError("Module error: Contracts.CodeTooLarge")
        with pytest.raises(RemoteCallError, match="CodeTooLarge"):
            service.deploy(OPTS)

    def test_bad_suri_stops_before_submission(self) -> None:
        keys = fake_keys()
        keys.signer.side_effect = KeyDerivationError("Secret string error")
        service, client, _, _ = _service(keys=keys)
        with pytest.raises(KeyDerivationError, match="Secret string error"):
            service.deploy(OPTS)
        client.submit.assert_not_called()


# ---------------------------------------------------------------------------
# instantiate
# ---------------------------------------------------------------------------

class TestInstantiate:
    def test_returns_contract_account(self) -> None:
        event = ChainEvent("Contracts", "Instantiated", ("0x" + "01" * 32, "0x" + "02" * 32))
        service, client, _, _ = _service(result=submission(event))
        account = service.instantiate(
            OPTS, 100, 500_000_000, CodeHash(b"\xab" * 32), HexData(b"\x00"),
        )
        assert account == AccountId(b"\x02" * 32)

    def test_call_parameters(self) -> None:
        event = ChainEvent("Contracts", "Instantiated", ("0x" + "02" * 32,))
        service, client, _, loader = _service(result=submission(event))
        service.instantiate(
            OPTS, 7, 1000, CodeHash(b"\xab" * 32), HexData(b"\xde\xad"),
        )
        call = _submitted_call(client)
        assert (call.module, call.function) == ("Contracts", "instantiate")
        assert call.params == {
            "endowment": 7,
            "gas_limit": 1000,
            "code_hash": HASH_HEX,
            "data": "0xdead",
        }
        loader.load.assert_not_called()

    def test_missing_event_is_remote_error(self) -> None:
        service, _, _, _ = _service(result=submission())
        with pytest.raises(RemoteCallError, match="Instantiated"):
            service.instantiate(
                OPTS, 0, 1, CodeHash(b"\xab" * 32), HexData(b""),
            )


# ---------------------------------------------------------------------------
# Runtime gateway
# ---------------------------------------------------------------------------

class TestCallRuntimeGateway:
    def _call(self, service: ExtrinsicService, **overrides):
        kwargs = dict(
            requester="//Alice",
            target="//Bob",
            phase=0,
            value=0,
            gas_limit=500_000_000,
            data=HexData(b"\x00"),
        )
        kwargs.update(overrides)
        return service.call_runtime_gateway(OPTS, **kwargs)

    def test_builds_multistep_call(self) -> None:
        keys = fake_keys({
            "//Alice": bytes.fromhex(ALICE_PUBLIC_HEX),
            "//Bob": bytes.fromhex(BOB_PUBLIC_HEX),
        })
        service, client, _, _ = _service(code=b"\x01\x02", keys=keys)
        self._call(service, phase=1, value=5, gas_limit=42, data=HexData(b"\xff"))
        call = _submitted_call(client)
        assert (call.module, call.function) == ("RuntimeGateway", "multistep_call")
        assert call.params == {
            "requester": "0x" + ALICE_PUBLIC_HEX,
            "target_dest": "0x" + BOB_PUBLIC_HEX,
            "phase": 1,
            "code": "0x0102",
            "value": 5,
            "gas_limit": 42,
            "input_data": "0xff",
        }

    def test_returns_submission_result(self) -> None:
        result = submission(ChainEvent("RuntimeGateway", "MultistepResult"))
        service, _, _, _ = _service(result=result)
        assert self._call(service) is result

    def test_missing_code_is_fatal(self) -> None:
        service, client, keys, _ = _service(code=CodeNotFoundError(Path("a.wasm")))
        with pytest.raises(CodeNotFoundError):
            self._call(service)
        client.submit.assert_not_called()
        keys.account_id.assert_not_called()

    def test_target_is_derived_before_requester(self) -> None:
        service, _, keys, _ = _service()
        self._call(service)
        roles = [c.kwargs["role"] for c in keys.account_id.call_args_list]
        assert roles == ["Target", "Requester"]

    def test_bad_target_secret_names_the_role(self) -> None:
        keys = fake_keys()
        keys.account_id.side_effect = KeyDerivationError("Target account read string error")
        service, client, _, _ = _service(keys=keys)
        with pytest.raises(KeyDerivationError, match="Target"):
            self._call(service, target="not a suri")
        client.submit.assert_not_called()


# ---------------------------------------------------------------------------
# Contracts gateway
# ---------------------------------------------------------------------------

class TestCallContractsGateway:
    def _call(self, service: ExtrinsicService, **overrides):
        kwargs = dict(
            requester="//Alice",
            target=HexData(bytes.fromhex(BOB_PUBLIC_HEX)),
            phase=0,
            value=0,
            gas_limit=3_875_000_000,
            data=HexData(b"\x00"),
        )
        kwargs.update(overrides)
        return service.call_contracts_gateway(OPTS, **kwargs)

    def test_builds_multistep_call(self) -> None:
        keys = fake_keys({"//Alice": bytes.fromhex(ALICE_PUBLIC_HEX)})
        service, client, _, _ = _service(code=b"\x0a", keys=keys)
        self._call(service)
        call = _submitted_call(client)
        assert (call.module, call.function) == ("ContractsGateway", "multistep_call")
        assert call.params["requester"] == "0x" + ALICE_PUBLIC_HEX
        assert call.params["target_dest"] == "0x" + BOB_PUBLIC_HEX
        assert call.params["code"] == "0x0a"
        assert call.params["gas_limit"] == 3_875_000_000

    @pytest.mark.parametrize(
        "error",
        [
            CodeNotFoundError(Path("target/flipper-pruned.wasm")),
            MetadataReadError("Failed to read Cargo.toml"),
        ],
    )
    def test_missing_code_falls_back_to_direct_call(
        self, error: Exception, caplog: pytest.LogCaptureFixture,
    ) -> None:
        service, client, _, _ = _service(code=error)
        with caplog.at_level(logging.WARNING, logger="t3rn_contract"):
            self._call(service)
        call = _submitted_call(client)
        assert call.params["code"] == "0x"
        assert "Proceeding with a direct contract call" in caplog.text

    def test_other_errors_are_not_swallowed(self) -> None:
        service, client, _, _ = _service(code=PermissionError("denied"))
        with pytest.raises(PermissionError):
            self._call(service)
        client.submit.assert_not_called()

    def test_short_target_rejected(self) -> None:
        service, client, _, _ = _service()
        with pytest.raises(InvalidAccountIdError):
            self._call(service, target=HexData(b"\x00"))
        client.submit.assert_not_called()


# ---------------------------------------------------------------------------
# call-contract
# ---------------------------------------------------------------------------

class TestCallContract:
    def test_builds_contracts_call(self) -> None:
        service, client, _, loader = _service()
        service.call_contract(
            OPTS,
            target=HexData(bytes.fromhex(BOB_PUBLIC_HEX)),
            value=3,
            gas_limit=99,
            data=HexData(b"\x12\x34"),
        )
        call = _submitted_call(client)
        assert (call.module, call.function) == ("Contracts", "call")
        assert call.params == {
            "dest": "0x" + BOB_PUBLIC_HEX,
            "value": 3,
            "gas_limit": 99,
            "data": "0x1234",
        }
        loader.load.assert_not_called()

    def test_remote_error_propagates(self) -> None:
        service, client, _, _ = _service()
        client.submit.side_effect = RemoteCallError("Module error: Contracts.NotCallable")
        with pytest.raises(RemoteCallError, match="NotCallable"):
            service.call_contract(
                OPTS,
                target=HexData(bytes(32)),
                value=0,
                gas_limit=1,
                data=HexData(b""),
            )


# ---------------------------------------------------------------------------
# signer account
# ---------------------------------------------------------------------------

class TestSignerAccount:
    def test_returns_public_account(self) -> None:
        keys = fake_keys({"//Alice": bytes.fromhex(ALICE_PUBLIC_HEX)})
        service, client, _, _ = _service(keys=keys)
        account = service.signer_account("//Alice")
        assert account.to_hex() == "0x" + ALICE_PUBLIC_HEX
        client.submit.assert_not_called()

    def test_bad_secret_names_the_signer(self) -> None:
        keys = fake_keys()
        keys.account_id.side_effect = KeyDerivationError("Signer account read string error")
        service, _, _, _ = _service(keys=keys)
        with pytest.raises(KeyDerivationError, match="Signer account"):
            service.signer_account("not a secret")
        assert keys.account_id.call_args.kwargs == {"role": "Signer"}
