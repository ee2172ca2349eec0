"""sr25519 key derivation backed by substrate-interface.

Implements :class:`~t3rn_contract.core.protocols.KeyDeriver`.  Secret
URIs follow the Substrate convention::

    <phrase | 0x seed>[//hard][/soft]...[///password]

An empty phrase (``//Alice``) means the development phrase.  The
password is the BIP39 passphrase: it changes the mini-secret derived
from the phrase and is ignored for raw ``0x`` seeds.  A ``--password``
given on the command line takes precedence over one embedded in the URI.

Secrets never appear in log records or exception messages, and library
errors are re-raised ``from None`` because their text may quote the URI.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from t3rn_contract.core.models import AccountId
from t3rn_contract.exceptions import EnvironmentError, KeyDerivationError

SS58_FORMAT: int = 42

_SURI = re.compile(r"^(?P<phrase>[^/]*)(?P<path>(?://?[^/]+)*)(?:///(?P<password>.*))?$")


@dataclass(frozen=True, slots=True)
class _CryptoApi:
    keypair_cls: Any
    keypair_type: Any
    dev_phrase: str
    extract_derive_path: Any
    bip39_to_mini_secret: Any
    sr25519: Any


def _load_crypto_api() -> _CryptoApi:
    """Return the substrate-interface primitives or raise ``EnvironmentError``."""
    try:
        import sr25519
        from bip39 import bip39_to_mini_secret
        from substrateinterface import Keypair, KeypairType
        from substrateinterface.constants import DEV_PHRASE
        from substrateinterface.key import extract_derive_path
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "substrate-interface is not installed. "
            "Install with: pip install 't3rn-contract[extrinsics]'",
        ) from exc
    return _CryptoApi(
        keypair_cls=Keypair,
        keypair_type=KeypairType,
        dev_phrase=DEV_PHRASE,
        extract_derive_path=extract_derive_path,
        bip39_to_mini_secret=bip39_to_mini_secret,
        sr25519=sr25519,
    )


def derive_keypair(suri: str, password: str | None = None) -> Any:
    """Derive an sr25519 ``Keypair`` from *suri* and optional *password*.

    Raises
    ------
    KeyDerivationError
        For any malformed URI, mnemonic, derivation path or password.
    """
    api = _load_crypto_api()
    try:
        return _derive(api, suri, password)
    except Exception:
        raise KeyDerivationError("Secret string error") from None


def _derive(api: _CryptoApi, suri: str, password: str | None) -> Any:
    match = _SURI.match(suri)
    if match is None:
        raise ValueError("malformed secret URI")
    phrase = match["phrase"].strip() or api.dev_phrase
    passphrase = password or match["password"] or ""

    if phrase.startswith("0x"):
        seed = bytes.fromhex(phrase[2:])
    else:
        seed = bytes(api.bip39_to_mini_secret(phrase, passphrase))
    keypair = api.keypair_cls.create_from_seed(
        seed_hex=seed,
        ss58_format=SS58_FORMAT,
        crypto_type=api.keypair_type.SR25519,
    )

    path = match["path"]
    if not path:
        return keypair

    public_key, private_key = keypair.public_key, keypair.private_key
    for junction in api.extract_derive_path(path):
        derive = (
            api.sr25519.hard_derive_keypair
            if junction.is_hard
            else api.sr25519.derive_keypair
        )
        _, public_key, private_key = derive(
            (junction.chain_code, public_key, private_key), b"",
        )
    return api.keypair_cls(
        public_key=public_key,
        private_key=private_key,
        ss58_format=SS58_FORMAT,
    )


@contextmanager
def signer_scope(suri: str, password: str | None = None) -> Iterator[Any]:
    """Yield a keypair for the duration of the ``with`` block.

    On exit only this scope's reference is dropped; Python offers no way
    to zero the key bytes, so callers must not keep the yielded object.
    """
    keypair = derive_keypair(suri, password)
    try:
        yield keypair
    finally:
        del keypair


class SubstrateKeyDeriver:
    """Concrete :class:`KeyDeriver` for sr25519 accounts."""

    def signer(self, suri: str, password: str | None = None) -> Any:
        return signer_scope(suri, password)

    def account_id(self, secret: str, *, role: str) -> AccountId:
        """Derive the account controlled by *secret* (no password)."""
        try:
            keypair = derive_keypair(secret)
        except KeyDerivationError:
            raise KeyDerivationError(f"{role} account read string error") from None
        return AccountId(bytes(keypair.public_key))
