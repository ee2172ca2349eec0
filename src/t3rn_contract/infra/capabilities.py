"""Feature switch for the extrinsic commands.

The deploy/instantiate/call commands are only offered when the
``extrinsics`` extra (substrate-interface) is installed, or when forced
with ``T3RN_CONTRACT_EXTRINSICS=1``.  ``T3RN_CONTRACT_EXTRINSICS=0``
hides them even when the library is present.
"""

from __future__ import annotations

import importlib.util
import os
from collections.abc import Mapping
from typing import Final

EXTRINSICS_ENV: Final[str] = "T3RN_CONTRACT_EXTRINSICS"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


def extrinsics_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Return whether the extrinsic commands should be registered."""
    env = os.environ if environ is None else environ
    raw = env.get(EXTRINSICS_ENV, "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    try:
        return importlib.util.find_spec("substrateinterface") is not None
    except (ImportError, ValueError):
        return False
