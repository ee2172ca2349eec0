"""Shared pytest fixtures and configuration for the t3rn-contract test suite.

Guidelines
----------
* No network access in any test — the chain client is always faked.
* cargo is never executed; ``subprocess.run`` is patched.
* Core tests must be pure — no side effects.
* File-system tests work inside ``tmp_path``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from t3rn_contract.core.models import ChainEvent, SubmissionResult

ALICE_PUBLIC_HEX: str = "d43593c715fdd31c61141abd04a99fd6822c8558854ccde39a5684e7a56da27d"
BOB_PUBLIC_HEX: str = "8eaf04151687736326c9fea17e25fc5287613693c912909cb226aa4794f26a48"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("T3RN_CONTRACT_EXTRINSICS", raising=False)
    monkeypatch.delenv("T3RN_CONTRACT_LOG", raising=False)


def write_manifest(root: Path, body: str) -> Path:
    """Write ``Cargo.toml`` with *body* under *root* and return its path."""
    manifest = root / "Cargo.toml"
    manifest.write_text(body, encoding="utf-8")
    return manifest


def submission(*events: ChainEvent) -> SubmissionResult:
    return SubmissionResult(extrinsic_hash="0xabc", block_hash="0xdef", events=events)


def code_stored(hash_hex: str) -> SubmissionResult:
    return submission(ChainEvent("Contracts", "CodeStored", (hash_hex,)))


def fake_keys(account_ids: dict[str, bytes] | None = None) -> MagicMock:
    """A KeyDeriver whose signer scope yields a sentinel and tracks exits."""
    keys = MagicMock()
    keys.signer.return_value.__enter__.return_value = "signer"
    keys.signer.return_value.__exit__.return_value = False
    mapping = account_ids or {}

    def _account_id(secret: str, *, role: str) -> Any:
        from t3rn_contract.core.models import AccountId

        return AccountId(mapping.get(secret, bytes(32)))

    keys.account_id.side_effect = _account_id
    return keys
