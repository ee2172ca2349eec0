"""Validation of the raw flags shared by the toolchain commands.

Pure functions: raw booleans / option names in, validated values out.
"""

from __future__ import annotations

from collections.abc import Sequence

from t3rn_contract.core.models import UnstableFlags, Verbosity
from t3rn_contract.exceptions import ConflictingFlagsError, UnknownOptionError

ORIGINAL_MANIFEST: str = "original-manifest"

KNOWN_UNSTABLE_OPTIONS: frozenset[str] = frozenset({ORIGINAL_MANIFEST})
"""Names accepted by ``-Z`` / ``--unstable-options``."""


def validate_verbosity(quiet: bool, verbose: bool) -> Verbosity | None:
    """Collapse the ``--quiet`` / ``--verbose`` pair into one setting.

    Raises
    ------
    ConflictingFlagsError
        When both flags are set.
    """
    if quiet and verbose:
        raise ConflictingFlagsError("Cannot pass both --quiet and --verbose flags")
    if quiet:
        return Verbosity.QUIET
    if verbose:
        return Verbosity.VERBOSE
    return None


def validate_unstable_options(options: Sequence[str]) -> UnstableFlags:
    """Check every ``-Z`` name against :data:`KNOWN_UNSTABLE_OPTIONS`.

    Raises
    ------
    UnknownOptionError
        Naming every unknown option, in the order given.
    """
    invalid = [option for option in options if option not in KNOWN_UNSTABLE_OPTIONS]
    if invalid:
        raise UnknownOptionError(
            invalid,
            hint=f"Supported options: {', '.join(sorted(KNOWN_UNSTABLE_OPTIONS))}",
        )
    return UnstableFlags(original_manifest=ORIGINAL_MANIFEST in options)
